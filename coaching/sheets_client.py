from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .auth import GoogleAuthSession
from .config import (
    DEFAULT_HTTP_TIMEOUT_S,
    KNOWLEDGE_APPEND_RANGE,
    KNOWLEDGE_HEADERS,
    KNOWLEDGE_READ_RANGE,
    KNOWLEDGE_SHEET,
    MATCH_APPEND_RANGE,
    MATCH_HEADERS,
    MATCH_READ_RANGE,
    MATCH_SHEET,
    SHEETS_API_URL,
)
from .errors import AuthenticationError, ConfigurationError, PersistenceError
from .models import Advice, MatchRecord

logger = logging.getLogger(__name__)


@dataclass
class SheetsClient:
    """Minimal Sheets v4 values client authorised by a :class:`GoogleAuthSession`."""

    auth: GoogleAuthSession
    timeout_s: int = DEFAULT_HTTP_TIMEOUT_S

    def __post_init__(self) -> None:
        self.session = requests.Session()
        self.session.headers.update({"accept": "application/json"})

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        headers = self.auth.authorization_header()
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as exc:
            logger.error("Sheets %s %s failed: %s", method, url, exc)
            raise PersistenceError(details={"message": str(exc)}) from exc

        if resp.status_code == 401:
            raise AuthenticationError("Google sign-in expired. Log in again.")
        if resp.status_code >= 400:
            logger.error("Sheets %s %s returned %s: %s", method, url, resp.status_code, resp.text)
            raise PersistenceError(details={"status_code": resp.status_code, "message": resp.text})
        return resp.json() if resp.content else {}

    def get_values(self, spreadsheet_id: str, cell_range: str) -> List[List[Any]]:
        url = f"{SHEETS_API_URL}/{spreadsheet_id}/values/{quote(cell_range, safe='!:')}"
        body = self._request("GET", url)
        return body.get("values") or []

    def append_values(self, spreadsheet_id: str, cell_range: str, rows: List[List[Any]]) -> Dict[str, Any]:
        url = f"{SHEETS_API_URL}/{spreadsheet_id}/values/{quote(cell_range, safe='!:')}:append"
        params = {"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"}
        return self._request("POST", url, params=params, json={"values": rows})

    def sheet_titles(self, spreadsheet_id: str) -> List[str]:
        body = self._request(
            "GET", f"{SHEETS_API_URL}/{spreadsheet_id}", params={"fields": "sheets.properties.title"}
        )
        return [s.get("properties", {}).get("title", "") for s in body.get("sheets") or []]

    def add_sheet(self, spreadsheet_id: str, title: str) -> None:
        self._request(
            "POST",
            f"{SHEETS_API_URL}/{spreadsheet_id}:batchUpdate",
            json={"requests": [{"addSheet": {"properties": {"title": title}}}]},
        )

    def close(self) -> None:
        self.session.close()


class KnowledgeStore:
    """Knowledge Base and Match History tabs of one spreadsheet.

    Rows are only ever appended; nothing here updates or deletes.
    """

    def __init__(self, client: SheetsClient, spreadsheet_id: str) -> None:
        self._client = client
        self.spreadsheet_id = (spreadsheet_id or "").strip()

    def _sheet_id(self) -> str:
        if not self.spreadsheet_id:
            raise ConfigurationError("Set the spreadsheet id in the settings first.")
        return self.spreadsheet_id

    def fetch_knowledge_base(self) -> List[Advice]:
        rows = self._client.get_values(self._sheet_id(), KNOWLEDGE_READ_RANGE)
        return [Advice.from_row(r) for r in rows if any(str(c).strip() for c in r)]

    def append_advice(self, advice: List[Advice]) -> None:
        if not advice:
            return
        self._client.append_values(self._sheet_id(), KNOWLEDGE_APPEND_RANGE, [a.to_row() for a in advice])

    def fetch_match_history(self) -> List[MatchRecord]:
        rows = self._client.get_values(self._sheet_id(), MATCH_READ_RANGE)
        return [MatchRecord.from_row(r) for r in rows if any(str(c).strip() for c in r)]

    def append_match_record(self, record: MatchRecord) -> None:
        self._client.append_values(self._sheet_id(), MATCH_APPEND_RANGE, [record.to_row()])

    def ensure_sheets(self) -> List[str]:
        """Create missing tabs with a header row. Existing tabs are left untouched."""
        sheet_id = self._sheet_id()
        existing = set(self._client.sheet_titles(sheet_id))
        created: List[str] = []
        for title, headers, header_range in (
            (KNOWLEDGE_SHEET, KNOWLEDGE_HEADERS, KNOWLEDGE_APPEND_RANGE),
            (MATCH_SHEET, MATCH_HEADERS, MATCH_APPEND_RANGE),
        ):
            if title in existing:
                continue
            self._client.add_sheet(sheet_id, title)
            self._client.append_values(sheet_id, header_range, [list(headers)])
            created.append(title)
        if created:
            logger.info("Created sheets: %s", ", ".join(created))
        return created


def build_store(auth: GoogleAuthSession, spreadsheet_id: Optional[str]) -> KnowledgeStore:
    return KnowledgeStore(SheetsClient(auth), spreadsheet_id or "")
