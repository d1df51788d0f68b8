"""Composition root: owns the settings, the Google auth session and the workflows."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from coaching.auth import GoogleAuthSession
from coaching.config import (
    ExtractionConfig,
    OAuthConfig,
    Settings,
    extraction_config_from_env,
    load_settings,
    oauth_config_from_env,
    save_settings,
    settings_path_from_env,
)
from coaching.extraction import GeminiAdviceExtractor, VideoAnalyzer
from coaching.gemini_client import GeminiClient
from coaching.session import MatchSession
from coaching.sheets_client import KnowledgeStore, SheetsClient

from .adapters import GeminiExtractionAdapter, SheetsKnowledgeStoreAdapter

logger = logging.getLogger(__name__)


class CoachContext:
    """Everything one interactive user needs, with an explicit open/close lifecycle.

    The match session and the video analyzer survive settings changes; the
    clients behind them are rebuilt.
    """

    def __init__(
        self,
        settings: Settings,
        settings_path: Optional[Path] = None,
        oauth: Optional[OAuthConfig] = None,
        extraction: Optional[ExtractionConfig] = None,
    ):
        self.settings = settings
        self.settings_path = settings_path or settings_path_from_env()
        self._oauth = oauth or oauth_config_from_env(self.settings_path)
        self._extraction = extraction or extraction_config_from_env()
        self.auth = GoogleAuthSession(
            client_id=settings.client_id,
            redirect_uri=self._oauth.redirect_uri,
            client_secret=self._oauth.client_secret,
            token_path=self._oauth.token_path,
        )
        self.session = MatchSession()
        self.analyzer = VideoAnalyzer(extractor=None)
        self._sheets: Optional[SheetsClient] = None
        self._gemini: Optional[GeminiClient] = None
        self.store: Optional[SheetsKnowledgeStoreAdapter] = None

    @classmethod
    def from_env(cls) -> "CoachContext":
        path = settings_path_from_env()
        return cls(load_settings(path), settings_path=path)

    def open(self) -> "CoachContext":
        self.auth.open()
        self._build_clients()
        logger.info(
            "Context ready (spreadsheet configured: %s, signed in: %s)",
            self.settings.has_store,
            self.auth.is_authenticated,
        )
        return self

    def close(self) -> None:
        self._close_clients()
        self.auth.close()

    def update_settings(
        self,
        spreadsheet_id: Optional[str] = None,
        client_id: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> Settings:
        changes = {
            "spreadsheet_id": spreadsheet_id,
            "client_id": client_id,
            "api_key": api_key,
        }
        changes = {k: v.strip() for k, v in changes.items() if v is not None}
        self.settings = replace(self.settings, **changes)
        save_settings(self.settings, self.settings_path)
        self.auth.reconfigure(self.settings.client_id)
        self._close_clients()
        self._build_clients()
        return self.settings

    def _build_clients(self) -> None:
        self._sheets = SheetsClient(self.auth, timeout_s=self._extraction.timeout_s)
        self.store = SheetsKnowledgeStoreAdapter(KnowledgeStore(self._sheets, self.settings.spreadsheet_id))
        self._gemini = GeminiClient(
            api_key=self.settings.api_key,
            model=self._extraction.model,
            timeout_s=self._extraction.timeout_s,
        )
        extractor = GeminiAdviceExtractor(self._gemini, language=self._extraction.language)
        self.analyzer.extractor = GeminiExtractionAdapter(extractor)

    def _close_clients(self) -> None:
        if self._sheets is not None:
            self._sheets.close()
            self._sheets = None
        if self._gemini is not None:
            self._gemini.close()
            self._gemini = None
