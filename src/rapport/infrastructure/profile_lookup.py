"""Profile lookup against the Lix person API, used to pre-fill contact forms.

Never touches stored state. Resolves by profile URL only.
"""

import logging
from typing import Any

import httpx

from rapport.application.dto import ProfileData
from rapport.application.errors import ProfileLookupError, ProfileNotFound

logger = logging.getLogger(__name__)

LIX_PERSON_URL = "https://api.lix-it.com/v1/person"
DEFAULT_TIMEOUT_S = 15.0


def _profile_from_payload(payload: Any, fallback_url: str) -> ProfileData:
    if not isinstance(payload, dict):
        raise ProfileLookupError("Malformed profile payload")
    experience = payload.get("experience") or []
    current = experience[0] if isinstance(experience, list) and experience else {}
    if not isinstance(current, dict):
        current = {}
    organisation = current.get("organisation") or {}
    company = organisation.get("name") if isinstance(organisation, dict) else ""
    return ProfileData(
        name=payload.get("name") or "",
        company=company or "",
        role=current.get("title") or payload.get("description") or "",
        linkedin_url=payload.get("link") or fallback_url,
        location=payload.get("location") or "",
        bio=payload.get("aboutSummaryText") or "",
    )


class LixProfileLookup:
    def __init__(
        self,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = LIX_PERSON_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)
        self._base_url = base_url

    async def lookup(
        self,
        linkedin_url: str | None = None,
        *,
        name: str | None = None,
        company: str | None = None,
    ) -> ProfileData:
        url = (linkedin_url or "").strip()
        if not url:
            # The person endpoint has no name/company search.
            raise ProfileNotFound(
                f"No profile URL given for {name or 'unknown'} at {company or 'unknown company'}"
            )
        if not self._api_key:
            raise ProfileLookupError("Profile lookup is not configured")

        logger.info("Fetching profile: %s", url)
        try:
            response = await self._client.get(
                self._base_url,
                params={"profile_link": url},
                headers={"Authorization": self._api_key},
            )
        except httpx.HTTPError as e:
            raise ProfileLookupError(f"Profile lookup request failed: {e}") from e

        if response.status_code == 404:
            raise ProfileNotFound("Profile not found")
        if response.status_code >= 400:
            logger.warning("Profile API error %s: %s", response.status_code, response.text[:200])
            raise ProfileLookupError(f"Profile lookup failed ({response.status_code})")
        try:
            payload = response.json()
        except ValueError as e:
            raise ProfileLookupError("Profile API returned invalid JSON") from e
        return _profile_from_payload(payload, url)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
