"""Lix profile lookup against a mocked transport."""

import httpx
import pytest

from rapport.application import ProfileLookupError, ProfileNotFound
from rapport.infrastructure import LixProfileLookup

PROFILE_URL = "https://www.linkedin.com/in/ada"


def _lookup(handler, api_key: str = "secret") -> LixProfileLookup:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LixProfileLookup(api_key, http_client=client)


async def test_maps_payload_fields() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["profile_link"] = request.url.params.get("profile_link")
        return httpx.Response(
            200,
            json={
                "name": "Ada Lovelace",
                "description": "Mathematician",
                "link": PROFILE_URL,
                "location": "London",
                "aboutSummaryText": "First programmer.",
                "experience": [
                    {"title": "Analyst", "organisation": {"name": "Analytical Engines"}},
                    {"title": "Intern", "organisation": {"name": "Elsewhere"}},
                ],
            },
        )

    profile = await _lookup(handler).lookup(PROFILE_URL)
    assert seen == {"auth": "secret", "profile_link": PROFILE_URL}
    assert profile.name == "Ada Lovelace"
    assert profile.company == "Analytical Engines"
    assert profile.role == "Analyst"
    assert profile.location == "London"
    assert profile.bio == "First programmer."


async def test_role_falls_back_to_description() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "Ada", "description": "Mathematician"})

    profile = await _lookup(handler).lookup(PROFILE_URL)
    assert profile.role == "Mathematician"
    assert profile.company == ""
    assert profile.linkedin_url == PROFILE_URL


async def test_not_found() -> None:
    lookup = _lookup(lambda request: httpx.Response(404))
    with pytest.raises(ProfileNotFound):
        await lookup.lookup(PROFILE_URL)


async def test_server_error() -> None:
    lookup = _lookup(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(ProfileLookupError):
        await lookup.lookup(PROFILE_URL)


async def test_invalid_json() -> None:
    lookup = _lookup(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(ProfileLookupError):
        await lookup.lookup(PROFILE_URL)


async def test_name_only_is_not_found() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ProfileNotFound):
        await _lookup(handler).lookup(name="Ada", company="Acme")


async def test_missing_key() -> None:
    lookup = _lookup(lambda request: httpx.Response(200, json={}), api_key="")
    with pytest.raises(ProfileLookupError):
        await lookup.lookup(PROFILE_URL)


async def test_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProfileLookupError):
        await _lookup(handler).lookup(PROFILE_URL)
