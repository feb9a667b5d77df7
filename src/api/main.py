"""
FastAPI backend: REST API for contacts, interactions, suggestions and sync.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from fastapi import FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from pydantic import BaseModel

from rapport import __version__
from rapport.application import (
    ContactCreated,
    ContactInput,
    ContactNotFound,
    ContactService,
    ContactSummary,
    Invalid,
    InteractionLogged,
    InteractionService,
    PersistenceError,
    ProfileLookupError,
    ProfileNotFound,
    Repository,
    SafeMode,
    SuggestionQueue,
    SyncOrchestrator,
    SyncReport,
    SyncScheduler,
)
from rapport.config import Settings, load_env
from rapport.domain import ContactFilter, EngagementFrequency, Interaction, Suggestion
from rapport.infrastructure import (
    InMemoryRepository,
    JsonFileRepository,
    LixProfileLookup,
    LoggingNotifier,
    Neo4jRepository,
    SimulatedLinkedInDetector,
    TelegramNotifier,
    ensure_constraints,
)

load_env()

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# Identity is delegated to an external provider; it hands us a stable user id.
USER_ID_HEADER = "X-User-Id"
DEFAULT_USER_ID = "default"


@dataclass
class Services:
    repository: Repository
    contacts: ContactService
    interactions: InteractionService
    suggestions: SuggestionQueue
    sync: SyncOrchestrator


def _get_driver(settings: Settings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


def _build_detector(settings: Settings) -> SimulatedLinkedInDetector:
    rng = random.Random(settings.detection_seed) if settings.detection_seed is not None else None
    return SimulatedLinkedInDetector(
        rng=rng,
        chance=settings.detection_chance,
        latency_s=settings.detection_latency_s,
    )


def _build_notifier(settings: Settings):
    if settings.telegram_bot_token and settings.telegram_notify_chat_id:
        return TelegramNotifier(settings.telegram_bot_token, settings.telegram_notify_chat_id)
    return LoggingNotifier()


def _build_repository(app: FastAPI, user_id: str) -> Repository:
    settings: Settings = app.state.settings
    if settings.storage == "neo4j":
        return Neo4jRepository(app.state.driver, user_id=user_id)
    # memory and json are single-user stores shared by every caller
    if app.state.shared_repository is None:
        if settings.storage == "memory":
            app.state.shared_repository = InMemoryRepository()
        else:
            app.state.shared_repository = JsonFileRepository(
                settings.storage_dir, settings.storage_name
            )
    return app.state.shared_repository


def get_services(user_id: str, app: FastAPI) -> Services:
    cache: dict[str, Services] = app.state.services
    if user_id not in cache:
        settings: Settings = app.state.settings
        repo = _build_repository(app, user_id)
        queue = SuggestionQueue(repo)
        cache[user_id] = Services(
            repository=repo,
            contacts=ContactService(repo, fallback=settings.due_fallback),
            interactions=InteractionService(repo),
            suggestions=queue,
            sync=SyncOrchestrator(
                repo,
                app.state.detector,
                queue,
                safe_mode=app.state.safe_mode,
                notifier=app.state.notifier,
            ),
        )
    return cache[user_id]


def _services(request: Request, x_user_id: str | None) -> Services:
    user_id = (x_user_id or "").strip() or DEFAULT_USER_ID
    return get_services(user_id, request.app)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    app.state.settings = settings
    app.state.driver = None
    app.state.shared_repository = None
    app.state.services = {}
    app.state.safe_mode = SafeMode(settings.safe_mode)
    app.state.detector = _build_detector(settings)
    app.state.notifier = _build_notifier(settings)
    app.state.profile_lookup = LixProfileLookup(settings.lix_api_key)
    app.state.scheduler = None
    logger.info("Storage backend: %s", settings.storage)
    try:
        if settings.storage == "neo4j":
            app.state.driver = _get_driver(settings)
            ensure_constraints(app.state.driver)
        default = get_services(DEFAULT_USER_ID, app)
        # Periodic sync covers the default owner only; other X-User-Id owners sync via POST /sync.
        app.state.scheduler = SyncScheduler(
            default.sync,
            interval_s=settings.sync_interval_s,
            enabled=settings.sync_enabled,
        )
        app.state.scheduler.start()
        yield
    finally:
        if app.state.scheduler is not None:
            await app.state.scheduler.stop()
        await app.state.profile_lookup.aclose()
        if app.state.driver is not None:
            app.state.driver.close()


app = FastAPI(title="Rapport API", version=__version__, lifespan=lifespan)


@app.exception_handler(PersistenceError)
async def _persistence_error(request: Request, exc: PersistenceError):
    logger.error("Persistence error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


# --- models ---


class ContactBody(BaseModel):
    name: str
    company: str = ""
    role: str = ""
    email: str | None = None
    linkedin_url: str | None = None
    notes: str = ""
    relationship_type: str = "peer"
    engagement_frequency: str | None = None
    linkedin_auto_sync: bool = False
    last_contacted: datetime | None = None


class ContactPatch(BaseModel):
    name: str | None = None
    company: str | None = None
    role: str | None = None
    email: str | None = None
    linkedin_url: str | None = None
    notes: str | None = None
    relationship_type: str | None = None
    engagement_frequency: str | None = None
    linkedin_auto_sync: bool | None = None
    last_contacted: datetime | None = None


class ContactOut(BaseModel):
    id: str
    name: str
    company: str
    role: str
    email: str | None = None
    linkedin_url: str | None = None
    notes: str = ""
    relationship_type: str
    engagement_frequency: str | None = None
    linkedin_auto_sync: bool
    sync_status: str
    last_contacted: datetime | None = None
    created_at: datetime
    due_status: str
    days_since_contact: int | None = None
    last_interaction_at: datetime | None = None


class InteractionBody(BaseModel):
    type: str
    timestamp: datetime | None = None
    notes: str | None = None


class InteractionOut(BaseModel):
    id: str
    contact_id: str
    type: str
    timestamp: datetime
    notes: str | None = None
    source: str
    auto_logged: bool
    created_at: datetime


class SuggestionOut(BaseModel):
    id: str
    contact_id: str
    contact_name: str
    type: str
    timestamp: datetime
    notes: str | None = None
    detected_at: datetime
    status: str


class SuggestionPatch(BaseModel):
    type: str | None = None
    timestamp: datetime | None = None
    notes: str | None = None


class SyncOut(BaseModel):
    outcome: str
    detected: int
    added: int
    contact_statuses: dict[str, str]
    error: str | None = None
    manual: bool


class SafeModeBody(BaseModel):
    enabled: bool


class ProfileLookupBody(BaseModel):
    linkedin_url: str | None = None
    name: str | None = None
    company: str | None = None


def _contact_out(s: ContactSummary) -> ContactOut:
    c = s.contact
    frequency = c.engagement_frequency
    return ContactOut(
        id=c.id,
        name=c.name,
        company=c.company,
        role=c.role,
        email=c.email,
        linkedin_url=c.linkedin_url,
        notes=c.notes,
        relationship_type=c.relationship_type.value,
        engagement_frequency=None if frequency is EngagementFrequency.UNSET else frequency.value,
        linkedin_auto_sync=c.linkedin_auto_sync,
        sync_status=c.sync_status.value,
        last_contacted=c.last_contacted,
        created_at=c.created_at,
        due_status=s.due_status.value,
        days_since_contact=s.days_since_contact,
        last_interaction_at=s.last_interaction.timestamp if s.last_interaction else None,
    )


def _interaction_out(i: Interaction) -> InteractionOut:
    return InteractionOut(
        id=i.id,
        contact_id=i.contact_id,
        type=i.type.value,
        timestamp=i.timestamp,
        notes=i.notes,
        source=i.source.value,
        auto_logged=i.auto_logged,
        created_at=i.created_at,
    )


def _suggestion_out(s: Suggestion) -> SuggestionOut:
    return SuggestionOut(
        id=s.id,
        contact_id=s.contact_id,
        contact_name=s.contact_name,
        type=s.type.value,
        timestamp=s.timestamp,
        notes=s.notes,
        detected_at=s.detected_at,
        status=s.status.value,
    )


def _sync_out(report: SyncReport) -> SyncOut:
    return SyncOut(
        outcome=report.outcome.value,
        detected=report.detected,
        added=report.added,
        contact_statuses={cid: status.value for cid, status in report.contact_statuses.items()},
        error=report.error,
        manual=report.manual,
    )


# --- REST: health ---


@app.get("/health")
def health(request: Request):
    repo = _build_repository(request.app, DEFAULT_USER_ID)
    storage_ok = repo.ping()
    return {
        "status": "ok" if storage_ok else "degraded",
        "app": "rapport",
        "version": __version__,
        "checks": {"storage": "ok" if storage_ok else "unavailable"},
    }


# --- REST: contacts ---


@app.get("/contacts")
def list_contacts(
    request: Request,
    contact_filter: ContactFilter = Query(ContactFilter.ALL, alias="filter"),
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    return [_contact_out(s) for s in services.contacts.list_contacts(contact_filter)]


@app.post("/contacts")
def create_contact(
    body: ContactBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    result = services.contacts.create_contact(ContactInput(**body.model_dump()))
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if not isinstance(result, ContactCreated):
        raise HTTPException(status_code=400, detail="Failed to create contact")
    summary = services.contacts.get_contact(result.contact_id)
    return JSONResponse(
        content=_contact_out(summary).model_dump(mode="json"),
        status_code=201,
    )


@app.get("/contacts/{contact_id}")
def get_contact(
    contact_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    summary = _services(request, x_user_id).contacts.get_contact(contact_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return _contact_out(summary)


@app.patch("/contacts/{contact_id}")
def update_contact(
    contact_id: str,
    body: ContactPatch,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    result = services.contacts.update_contact(contact_id, **body.model_dump(exclude_unset=True))
    if isinstance(result, ContactNotFound):
        raise HTTPException(status_code=404, detail="Contact not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return _contact_out(services.contacts.get_contact(contact_id))


@app.delete("/contacts/{contact_id}", status_code=204)
def delete_contact(
    contact_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    _services(request, x_user_id).contacts.delete_contact(contact_id)
    return Response(status_code=204)


@app.get("/dashboard")
def dashboard(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    counts = _services(request, x_user_id).contacts.dashboard()
    return {
        "overdue": counts.overdue,
        "due_soon": counts.due_soon,
        "on_track": counts.on_track,
        "no_frequency": counts.no_frequency,
        "total": counts.total,
    }


@app.get("/onboarding")
def onboarding(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    progress = _services(request, x_user_id).contacts.onboarding_progress()
    return {
        "current": progress.current,
        "minimum": progress.minimum,
        "maximum": progress.maximum,
        "can_proceed": progress.can_proceed,
        "reached_max": progress.reached_max,
    }


# --- REST: interactions ---


@app.get("/contacts/{contact_id}/interactions")
def list_interactions(
    contact_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    return [_interaction_out(i) for i in services.interactions.interactions_for(contact_id)]


@app.post("/contacts/{contact_id}/interactions")
def log_interaction(
    contact_id: str,
    body: InteractionBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    result = services.interactions.log_interaction(
        contact_id, body.type, timestamp=body.timestamp, notes=body.notes
    )
    if isinstance(result, ContactNotFound):
        raise HTTPException(status_code=404, detail="Contact not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if not isinstance(result, InteractionLogged):
        raise HTTPException(status_code=400, detail="Failed to log interaction")
    return JSONResponse(
        content=_interaction_out(result.interaction).model_dump(mode="json"),
        status_code=201,
    )


@app.delete("/interactions/{interaction_id}", status_code=204)
def delete_interaction(
    interaction_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    _services(request, x_user_id).interactions.delete_interaction(interaction_id)
    return Response(status_code=204)


@app.get("/activity")
def activity(
    request: Request,
    limit: int = Query(20, ge=0, le=200),
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    services = _services(request, x_user_id)
    return [_interaction_out(i) for i in services.interactions.recent_activity(limit)]


# --- REST: suggestions ---


@app.get("/suggestions")
def list_suggestions(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    return [_suggestion_out(s) for s in _services(request, x_user_id).suggestions.pending()]


@app.patch("/suggestions/{suggestion_id}")
def edit_suggestion(
    suggestion_id: str,
    body: SuggestionPatch,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    queue = _services(request, x_user_id).suggestions
    try:
        edited = queue.edit(
            suggestion_id,
            interaction_type=body.type,
            timestamp=body.timestamp,
            notes=body.notes,
        )
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown interaction type: {body.type}")
    if edited is None:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return _suggestion_out(edited)


@app.post("/suggestions/{suggestion_id}/accept")
def accept_suggestion(
    suggestion_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    interaction = _services(request, x_user_id).suggestions.accept(suggestion_id)
    if interaction is None:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return JSONResponse(
        content=_interaction_out(interaction).model_dump(mode="json"),
        status_code=201,
    )


@app.post("/suggestions/{suggestion_id}/dismiss", status_code=204)
def dismiss_suggestion(
    suggestion_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    _services(request, x_user_id).suggestions.dismiss(suggestion_id)
    return Response(status_code=204)


# --- REST: sync ---


@app.post("/sync")
async def sync_now(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    report = await _services(request, x_user_id).sync.run_cycle(manual=True)
    return _sync_out(report)


@app.get("/safe-mode")
def get_safe_mode(request: Request):
    return {"enabled": request.app.state.safe_mode.enabled}


@app.post("/safe-mode")
def set_safe_mode(body: SafeModeBody, request: Request):
    safe_mode: SafeMode = request.app.state.safe_mode
    if body.enabled:
        safe_mode.enable()
    else:
        safe_mode.disable()
    return {"enabled": safe_mode.enabled}


# --- REST: profile lookup ---


@app.post("/profile-lookup")
async def profile_lookup(body: ProfileLookupBody, request: Request):
    lookup: LixProfileLookup = request.app.state.profile_lookup
    try:
        profile = await lookup.lookup(body.linkedin_url, name=body.name, company=body.company)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ProfileLookupError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {
        "name": profile.name,
        "company": profile.company,
        "role": profile.role,
        "linkedin_url": profile.linkedin_url,
        "location": profile.location,
        "bio": profile.bio,
    }
