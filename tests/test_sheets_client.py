import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from coaching.errors import AuthenticationError, ConfigurationError, PersistenceError
from coaching.models import MatchRecord, MatchResult
from coaching.sheets_client import KnowledgeStore, SheetsClient


class StaticAuth:
    def authorization_header(self) -> dict:
        return {"Authorization": "Bearer test-token"}


def _response(status: int, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return resp


def _store(*responses: requests.Response, spreadsheet_id: str = "sheet123") -> KnowledgeStore:
    client = SheetsClient(StaticAuth())
    client.session = MagicMock()
    client.session.request.side_effect = list(responses)
    return KnowledgeStore(client, spreadsheet_id)


def _calls(store: KnowledgeStore) -> list:
    return store._client.session.request.call_args_list


def test_fetch_knowledge_base_skips_blank_rows() -> None:
    store = _store(
        _response(
            200,
            {
                "range": "Knowledge_Base!A2:H4",
                "values": [
                    ["ts", "Video", "https://youtu.be/x", "Shove then roam", "Mid", "Ahri", "Laning", "High"],
                    ["", "", ""],
                    ["ts", "Video", "https://youtu.be/x", "Breathe", "General", "General", "Mental"],
                ],
            },
        )
    )
    advice = store.fetch_knowledge_base()
    assert [a.content for a in advice] == ["Shove then roam", "Breathe"]

    args, kwargs = _calls(store)[0]
    assert args[0] == "GET"
    assert args[1].endswith("/sheet123/values/Knowledge_Base!A2:H")
    assert kwargs["headers"] == {"Authorization": "Bearer test-token"}


def test_fetch_match_history_of_empty_sheet() -> None:
    store = _store(_response(200, {"range": "Match_History!A2:H"}))
    assert store.fetch_match_history() == []


def test_append_match_record_uses_user_entered_rows() -> None:
    store = _store(_response(200, {"updates": {"updatedRows": 1}}))
    record = MatchRecord.from_counts("Mid", "Ahri", MatchResult.WIN, 2, 3, note="ok", timestamp="ts")
    store.append_match_record(record)

    args, kwargs = _calls(store)[0]
    assert args[0] == "POST"
    assert args[1].endswith("/sheet123/values/Match_History!A1:append")
    assert kwargs["params"] == {"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"}
    assert kwargs["json"] == {"values": [["ts", "Mid", "Ahri", "Win", 66.7, 2, 3, "ok"]]}


def test_append_empty_advice_is_a_no_op() -> None:
    store = _store()
    store.append_advice([])
    assert _calls(store) == []


def test_missing_spreadsheet_id_fails_before_any_request() -> None:
    store = _store(spreadsheet_id="  ")
    with pytest.raises(ConfigurationError):
        store.fetch_knowledge_base()
    assert _calls(store) == []


def test_unauthorized_maps_to_authentication_error() -> None:
    store = _store(_response(401, {"error": {"code": 401, "status": "UNAUTHENTICATED"}}))
    with pytest.raises(AuthenticationError):
        store.fetch_match_history()


@pytest.mark.parametrize("status", [403, 404, 500])
def test_other_http_errors_are_persistence_errors(status: int) -> None:
    store = _store(_response(status, {"error": {"code": status}}))
    with pytest.raises(PersistenceError) as exc_info:
        store.fetch_knowledge_base()
    assert exc_info.value.details["status_code"] == status


def test_network_errors_are_persistence_errors() -> None:
    store = _store()
    store._client.session.request.side_effect = requests.ConnectionError("offline")
    with pytest.raises(PersistenceError):
        store.fetch_knowledge_base()


def test_ensure_sheets_creates_only_missing_tabs() -> None:
    store = _store(
        _response(200, {"sheets": [{"properties": {"title": "Knowledge_Base"}}]}),
        _response(200, {"replies": [{}]}),
        _response(200, {"updates": {"updatedRows": 1}}),
    )
    assert store.ensure_sheets() == ["Match_History"]

    calls = _calls(store)
    assert len(calls) == 3
    _, add_kwargs = calls[1]
    assert add_kwargs["json"] == {"requests": [{"addSheet": {"properties": {"title": "Match_History"}}}]}
    _, header_kwargs = calls[2]
    assert header_kwargs["json"]["values"][0][0] == "timestamp"
    assert header_kwargs["json"]["values"][0][3] == "result"
