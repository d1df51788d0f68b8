from typing import List

import pytest
from fastapi.testclient import TestClient

from coaching.config import ExtractionConfig, OAuthConfig, Settings
from coaching.errors import PersistenceError, QuotaExceededError
from coaching.models import Advice, Category, Importance, MatchRecord, MatchResult, RawAdviceItem
from src.infrastructure.context import CoachContext
from src.main import app

from conftest import FakeStore


class FakeExtractor:
    def __init__(self, items: List[RawAdviceItem] | None = None, error: Exception | None = None):
        self.items = items or []
        self.error = error

    def extract(self, video_url: str, notes: str = "") -> List[RawAdviceItem]:
        if self.error:
            raise self.error
        return list(self.items)


def _advice(content: str, roles: str, champs: str) -> Advice:
    return Advice("ts", "Video", "https://youtu.be/x", content, roles, champs, Category.LANING, Importance.HIGH)


def _record(rate: float, won: bool, subject: str = "Ahri") -> MatchRecord:
    return MatchRecord("2025-01-01T00:00:00Z", "Mid", subject, MatchResult.WIN if won else MatchResult.LOSS, rate, 0, 0, "")


@pytest.fixture
def ctx(tmp_path):
    context = CoachContext(
        Settings(spreadsheet_id="sheet123"),
        settings_path=tmp_path / "settings.json",
        oauth=OAuthConfig(client_secret=None, redirect_uri="http://testserver/api/auth/callback", token_path=tmp_path / "token.json"),
        extraction=ExtractionConfig(model="gemini-test", language="English", timeout_s=5),
    ).open()
    context.store = FakeStore(
        advice=[
            _advice("Use charm to zone", "Mid", "Ahri"),
            _advice("Track the jungler", "General", "General"),
            _advice("Freeze near tower", "Top", "Garen"),
        ]
    )
    context.analyzer.extractor = FakeExtractor(
        [RawAdviceItem(content="Shove then roam", role_tags="Mid", subject_tags="Ahri", category="Laning", importance="High")]
    )
    yield context
    context.close()


@pytest.fixture
def client(ctx):
    # Not entered as a context manager, so the lifespan does not replace the stub context.
    app.state.context = ctx
    return TestClient(app)


def _error_code(resp) -> str:
    return resp.json()["detail"]["error"]["code"]


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["spreadsheet_configured"] is True
    assert body["api_key_configured"] is False


def test_update_settings_persists_and_hides_key(client, tmp_path) -> None:
    resp = client.put("/api/settings", json={"apiKey": " key-123 ", "clientId": "client-1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body == {
        "spreadsheetId": "sheet123",
        "clientId": "client-1",
        "apiKeyConfigured": True,
        "authenticated": False,
    }
    assert (tmp_path / "settings.json").exists()


def test_saved_settings_are_served_by_the_next_request(client, ctx, tmp_path) -> None:
    resp = client.put("/api/settings", json={"spreadsheetId": " sheet456 "})
    assert resp.status_code == 200

    body = client.get("/api/settings").json()
    assert body["spreadsheetId"] == "sheet456"
    assert body["apiKeyConfigured"] is False
    assert ctx.settings.spreadsheet_id == "sheet456"
    assert "sheet456" in (tmp_path / "settings.json").read_text()


def test_login_without_client_id_needs_configuration(client) -> None:
    resp = client.get("/api/auth/login")
    assert resp.status_code == 400
    assert _error_code(resp) == "CONFIGURATION_REQUIRED"


def test_auth_callback_with_unknown_state(client) -> None:
    resp = client.get("/api/auth/callback", params={"code": "c", "state": "s"})
    assert resp.status_code == 401
    assert _error_code(resp) == "AUTHENTICATION_REQUIRED"


def test_review_flow(client, ctx) -> None:
    resp = client.post("/api/session/start", json={"role": "Mid", "champion": "Ahri", "result": "Win"})
    assert resp.status_code == 200
    session = resp.json()
    assert session["state"] == "reviewing"
    assert session["hasAdvice"] is True
    assert [a["content"] for a in session["checklist"]] == ["Use charm to zone", "Track the jungler"]

    resp = client.post("/api/session/checklist/1/toggle")
    assert resp.json()["checked"] == [1]
    assert resp.json()["achievementRate"] == 50.0

    resp = client.put("/api/session/note", json={"note": "clean laning"})
    assert resp.json()["note"] == "clean laning"

    resp = client.post("/api/session/save")
    assert resp.status_code == 200
    body = resp.json()
    assert body["record"]["achievementRate"] == 50.0
    assert body["record"]["championIcon"] == "Ahri"
    assert body["session"]["state"] == "configuring"
    assert len(ctx.store.history) == 1


def test_toggle_before_start_is_a_state_error(client) -> None:
    resp = client.post("/api/session/checklist/0/toggle")
    assert resp.status_code == 409
    assert _error_code(resp) == "INVALID_STATE"


def test_unknown_role_is_rejected(client) -> None:
    resp = client.post("/api/session/start", json={"role": "Roamer", "champion": "Ahri"})
    assert resp.status_code == 400
    assert _error_code(resp) == "INVALID_REQUEST"


def test_failed_load_reports_unchanged_session(client, ctx) -> None:
    ctx.store.fail_reads = PersistenceError()
    resp = client.post("/api/session/start", json={"role": "Mid", "champion": "Ahri"})
    assert resp.status_code == 502
    details = resp.json()["detail"]["error"]["details"]
    assert _error_code(resp) == "PERSISTENCE_FAILED"
    assert details["session"]["state"] == "configuring"


def test_failed_save_keeps_review(client, ctx) -> None:
    client.post("/api/session/start", json={"role": "Mid", "champion": "Ahri"})
    client.post("/api/session/checklist/0/toggle")
    ctx.store.fail_writes = PersistenceError()

    resp = client.post("/api/session/save")
    assert resp.status_code == 502
    assert resp.json()["detail"]["error"]["details"]["session"]["checked"] == [0]
    assert client.get("/api/session").json()["state"] == "reviewing"


def test_analyze_and_save_advice(client, ctx) -> None:
    resp = client.post("/api/extraction/analyze", json={"videoUrl": "https://youtu.be/abc", "notes": ""})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"].startswith("Video Analysis - ")
    assert body["items"][0]["subjectTags"] == "Ahri"

    resp = client.post("/api/knowledge/advice", json={"title": "Mid guide"})
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert ctx.store.advice[-1].source_title == "Mid guide"

    resp = client.get("/api/knowledge/advice")
    assert resp.json()["count"] == 4


def test_save_advice_without_analysis(client) -> None:
    resp = client.post("/api/knowledge/advice", json={})
    assert resp.status_code == 400
    assert _error_code(resp) == "INVALID_REQUEST"


def test_quota_errors_map_to_429(client, ctx) -> None:
    ctx.analyzer.extractor = FakeExtractor(error=QuotaExceededError())
    resp = client.post("/api/extraction/analyze", json={"videoUrl": "https://youtu.be/abc"})
    assert resp.status_code == 429
    assert _error_code(resp) == "QUOTA_EXCEEDED"


def test_dashboard(client, ctx) -> None:
    ctx.store.history = [_record(80, True), _record(30, False, "Lux"), _record(90, True)]
    resp = client.get("/api/dashboard")
    assert resp.status_code == 200
    body = resp.json()
    assert body["overview"] == {"totalGames": 3, "wins": 2, "overallWinRate": 66.7, "averageAdherence": 66.7}
    assert [b["range"] for b in body["correlation"]] == ["0-25%", "26-50%", "51-75%", "76-100%"]
    assert body["correlation"][3]["winRate"] == 100.0
    assert [p["game"] for p in body["trend"]] == [1, 2, 3]
    assert body["recentMatches"][1]["championIcon"] == "Lux"


def test_dashboard_pdf(client, ctx) -> None:
    ctx.store.history = [_record(80, True), _record(30, False)]
    resp = client.get("/api/dashboard/report.pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_websocket_analysis_reports_progress(client) -> None:
    with client.websocket_connect("/ws/analyze") as ws:
        ws.send_json({"action": "analyze", "videoUrl": "https://youtu.be/abc"})
        statuses = []
        while True:
            msg = ws.receive_json()
            statuses.append(msg["status"])
            if msg["status"] in ("completed", "error"):
                break
    assert statuses[0] == "connecting"
    assert statuses[-1] == "completed"
    assert msg["items"][0]["content"] == "Shove then roam"


def test_websocket_reports_extraction_errors(client, ctx) -> None:
    ctx.analyzer.extractor = FakeExtractor(error=QuotaExceededError())
    with client.websocket_connect("/ws/analyze") as ws:
        ws.send_json({"action": "analyze", "videoUrl": "https://youtu.be/abc"})
        msg = ws.receive_json()
        while msg["status"] not in ("completed", "error"):
            msg = ws.receive_json()
    assert msg["status"] == "error"
    assert "quota" in msg["message"].lower()
