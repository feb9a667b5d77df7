"""Settings loaded from environment variables (and .env, if present).

Environment variables:
- RAPPORT_STORAGE: memory | json | neo4j (default: json)
- RAPPORT_STORAGE_DIR: directory for the JSON store (default: ./data)
- RAPPORT_STORAGE_NAME: JSON store file name without extension (default: rapport-storage)
- NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD: Neo4j connection
- RAPPORT_SYNC_INTERVAL_S: seconds between sync cycles (default: 900, minimum: 60)
- RAPPORT_SYNC_ENABLED: run the periodic sync (default: true)
- RAPPORT_SAFE_MODE: start with sync suppressed (default: false)
- RAPPORT_DUE_FALLBACK: none | last_contacted | created_at (default: none)
- RAPPORT_DETECTION_CHANCE: per-contact chance for the simulated detector (default: 0.3)
- RAPPORT_DETECTION_SEED: optional seed for the simulated detector
- RAPPORT_DETECTION_LATENCY_S: simulated detector delay in seconds (default: 1.0)
- LIX_API_KEY: profile lookup API key
- TELEGRAM_BOT_TOKEN, TELEGRAM_NOTIFY_CHAT_ID: send notifications to Telegram
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from rapport.application.sync import DEFAULT_SYNC_INTERVAL_S
from rapport.domain import ReferenceFallback
from rapport.infrastructure.detection import DEFAULT_DETECTION_CHANCE, DEFAULT_LATENCY_S
from rapport.infrastructure.json_repository import DEFAULT_STORAGE_NAME

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "json", "neo4j")
MIN_SYNC_INTERVAL_S = 60

# Repo root: from src/rapport/config.py go up to repo root
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def load_env() -> None:
    """Load .env from repo root or current dir (first one found)."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("false", "0", "no", "off", "")


def _clean(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    storage: str = "json"
    storage_dir: Path = Path("./data")
    storage_name: str = DEFAULT_STORAGE_NAME
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    sync_interval_s: int = DEFAULT_SYNC_INTERVAL_S
    sync_enabled: bool = True
    safe_mode: bool = False
    due_fallback: ReferenceFallback = ReferenceFallback.NONE
    detection_chance: float = DEFAULT_DETECTION_CHANCE
    detection_seed: int | None = None
    detection_latency_s: float = DEFAULT_LATENCY_S
    lix_api_key: str = ""
    telegram_bot_token: str = ""
    telegram_notify_chat_id: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment. Invalid values fall back to defaults with a warning."""
        defaults = cls()

        storage = _clean("RAPPORT_STORAGE", defaults.storage).lower()
        if storage not in STORAGE_BACKENDS:
            logger.warning("RAPPORT_STORAGE=%s is not one of %s, using json", storage, STORAGE_BACKENDS)
            storage = defaults.storage

        interval_s = defaults.sync_interval_s
        raw_interval = _clean("RAPPORT_SYNC_INTERVAL_S")
        if raw_interval:
            try:
                interval_s = int(raw_interval)
            except ValueError:
                logger.warning("RAPPORT_SYNC_INTERVAL_S=%s is not an integer, using default", raw_interval)
        if interval_s < MIN_SYNC_INTERVAL_S:
            logger.warning(
                "RAPPORT_SYNC_INTERVAL_S=%d is below minimum %d, using minimum",
                interval_s,
                MIN_SYNC_INTERVAL_S,
            )
            interval_s = MIN_SYNC_INTERVAL_S

        fallback = defaults.due_fallback
        raw_fallback = _clean("RAPPORT_DUE_FALLBACK").lower()
        if raw_fallback:
            try:
                fallback = ReferenceFallback(raw_fallback)
            except ValueError:
                logger.warning("RAPPORT_DUE_FALLBACK=%s is not recognized, using none", raw_fallback)

        chance = defaults.detection_chance
        raw_chance = _clean("RAPPORT_DETECTION_CHANCE")
        if raw_chance:
            try:
                chance = float(raw_chance)
            except ValueError:
                logger.warning("RAPPORT_DETECTION_CHANCE=%s is not a number, using default", raw_chance)
            if not 0.0 <= chance <= 1.0:
                logger.warning("RAPPORT_DETECTION_CHANCE=%s is out of range, using default", raw_chance)
                chance = defaults.detection_chance

        seed = None
        raw_seed = _clean("RAPPORT_DETECTION_SEED")
        if raw_seed:
            try:
                seed = int(raw_seed)
            except ValueError:
                logger.warning("RAPPORT_DETECTION_SEED=%s is not an integer, ignoring", raw_seed)

        latency_s = defaults.detection_latency_s
        raw_latency = _clean("RAPPORT_DETECTION_LATENCY_S")
        if raw_latency:
            try:
                latency_s = max(float(raw_latency), 0.0)
            except ValueError:
                logger.warning("RAPPORT_DETECTION_LATENCY_S=%s is not a number, using default", raw_latency)

        return cls(
            storage=storage,
            storage_dir=Path(_clean("RAPPORT_STORAGE_DIR", str(defaults.storage_dir))),
            storage_name=_clean("RAPPORT_STORAGE_NAME", defaults.storage_name) or defaults.storage_name,
            neo4j_uri=_clean("NEO4J_URI", defaults.neo4j_uri),
            neo4j_user=_clean("NEO4J_USER", defaults.neo4j_user),
            neo4j_password=_clean("NEO4J_PASSWORD", defaults.neo4j_password),
            sync_interval_s=interval_s,
            sync_enabled=_flag("RAPPORT_SYNC_ENABLED", defaults.sync_enabled),
            safe_mode=_flag("RAPPORT_SAFE_MODE", defaults.safe_mode),
            due_fallback=fallback,
            detection_chance=chance,
            detection_seed=seed,
            detection_latency_s=latency_s,
            lix_api_key=_clean("LIX_API_KEY"),
            telegram_bot_token=_clean("TELEGRAM_BOT_TOKEN"),
            telegram_notify_chat_id=_clean("TELEGRAM_NOTIFY_CHAT_ID"),
        )
