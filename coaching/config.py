from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


KNOWLEDGE_SHEET = "Knowledge_Base"
MATCH_SHEET = "Match_History"

# Row 1 holds the headers.
KNOWLEDGE_READ_RANGE = f"{KNOWLEDGE_SHEET}!A2:H"
MATCH_READ_RANGE = f"{MATCH_SHEET}!A2:H"
KNOWLEDGE_APPEND_RANGE = f"{KNOWLEDGE_SHEET}!A1"
MATCH_APPEND_RANGE = f"{MATCH_SHEET}!A1"

KNOWLEDGE_HEADERS = [
    "timestamp",
    "video_title",
    "video_url",
    "content",
    "role_tags",
    "champion_tags",
    "category",
    "importance",
]
MATCH_HEADERS = [
    "timestamp",
    "role",
    "champion",
    "result",
    "achievement_rate",
    "checked_count",
    "total_count",
    "note",
]

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_REDIRECT_URI = "http://localhost:8000/api/auth/callback"

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_ADVICE_LANGUAGE = "Japanese"

DEFAULT_HTTP_TIMEOUT_S = 60

RECENT_TREND_SIZE = 20
RECENT_TABLE_SIZE = 5

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "coach-journal" / "settings.json"


@dataclass(frozen=True)
class Settings:
    """The three user-editable values, persisted across sessions."""

    spreadsheet_id: str = ""
    client_id: str = ""
    api_key: str = ""

    @property
    def has_store(self) -> bool:
        return bool(self.spreadsheet_id.strip())

    @property
    def has_client(self) -> bool:
        return bool(self.client_id.strip())

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())


@dataclass(frozen=True)
class OAuthConfig:
    client_secret: Optional[str]
    redirect_uri: str
    token_path: Path


@dataclass(frozen=True)
class ExtractionConfig:
    model: str
    language: str
    timeout_s: int


def settings_path_from_env() -> Path:
    override = os.environ.get("COACH_SETTINGS_PATH")
    return Path(override).expanduser() if override else DEFAULT_SETTINGS_PATH


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load stored settings, then let environment variables override them."""
    path = path or settings_path_from_env()
    stored: Dict[str, Any] = {}
    if path.exists():
        try:
            stored = json.loads(path.read_text(encoding="utf-8")) or {}
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable settings file %s", path)
            stored = {}

    settings = Settings(
        spreadsheet_id=str(stored.get("spreadsheet_id") or ""),
        client_id=str(stored.get("client_id") or ""),
        api_key=str(stored.get("api_key") or ""),
    )
    overrides = {
        "spreadsheet_id": os.environ.get("COACH_SPREADSHEET_ID"),
        "client_id": os.environ.get("GOOGLE_CLIENT_ID"),
        "api_key": os.environ.get("GEMINI_API_KEY"),
    }
    overrides = {k: v for k, v in overrides.items() if v}
    return replace(settings, **overrides) if overrides else settings


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    path = path or settings_path_from_env()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, indent=2)
    logger.info("Saved settings to %s", path)
    return path


def oauth_config_from_env(settings_path: Optional[Path] = None) -> OAuthConfig:
    base = (settings_path or settings_path_from_env()).parent
    return OAuthConfig(
        client_secret=os.environ.get("GOOGLE_CLIENT_SECRET") or None,
        redirect_uri=os.environ.get("GOOGLE_REDIRECT_URI", DEFAULT_REDIRECT_URI),
        token_path=base / "token.json",
    )


def extraction_config_from_env() -> ExtractionConfig:
    return ExtractionConfig(
        model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        language=os.environ.get("COACH_ADVICE_LANGUAGE", DEFAULT_ADVICE_LANGUAGE),
        timeout_s=int(os.environ.get("COACH_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_S)),
    )
