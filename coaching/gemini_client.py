from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_GEMINI_MODEL, DEFAULT_HTTP_TIMEOUT_S, GEMINI_API_URL
from .errors import CredentialError, ExtractionFailedError, QuotaExceededError

logger = logging.getLogger(__name__)

_CREDENTIAL_REASONS = {"API_KEY_INVALID", "API_KEY_EXPIRED", "API_KEY_SERVICE_BLOCKED"}
_CREDENTIAL_MARKERS = ("api key not valid", "api key expired", "api_key_invalid", "permission denied")
_QUOTA_MARKERS = ("resource_exhausted", "quota", "rate limit")


def _error_body(resp: requests.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {"message": resp.text}
    err = body.get("error") if isinstance(body, dict) else None
    return err if isinstance(err, dict) else {"message": json.dumps(body)}


def _reasons(err: Dict[str, Any]) -> List[str]:
    out = []
    for detail in err.get("details") or []:
        if isinstance(detail, dict) and detail.get("reason"):
            out.append(str(detail["reason"]))
    return out


def classify_error(resp: requests.Response) -> Exception:
    """Map a failed generateContent response to the error the user should see."""
    err = _error_body(resp)
    message = str(err.get("message") or "")
    status = str(err.get("status") or "")
    haystack = f"{message} {status}".lower()
    details = {"status_code": resp.status_code, "status": status, "message": message}

    if set(_reasons(err)) & _CREDENTIAL_REASONS or any(m in haystack for m in _CREDENTIAL_MARKERS):
        return CredentialError(details=details)
    if resp.status_code in (401, 403):
        return CredentialError(details=details)
    if resp.status_code == 429 or any(m in haystack for m in _QUOTA_MARKERS):
        return QuotaExceededError(details=details)
    return ExtractionFailedError(details=details)


def response_text(body: Dict[str, Any]) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))


@dataclass
class GeminiClient:
    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    timeout_s: int = DEFAULT_HTTP_TIMEOUT_S

    def __post_init__(self) -> None:
        self.session = requests.Session()
        self.session.headers.update(
            {
                "x-goog-api-key": self.api_key,
                "content-type": "application/json",
                "accept": "application/json",
            }
        )

    @property
    def url(self) -> str:
        return f"{GEMINI_API_URL}/{self.model}:generateContent"

    def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        search_grounding: bool = True,
    ) -> str:
        """Single generateContent call; returns the concatenated reply text.

        Failures are raised once and never retried here.
        """
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if search_grounding:
            # JSON response mime type cannot be combined with the search tool,
            # so the prompt asks for JSON instead.
            payload["tools"] = [{"google_search": {}}]

        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout_s)
        except requests.RequestException as exc:
            logger.error("Gemini request failed: %s", exc)
            raise ExtractionFailedError(details={"message": str(exc)}) from exc

        if resp.status_code != 200:
            error = classify_error(resp)
            logger.error("Gemini returned %s: %s", resp.status_code, getattr(error, "details", {}))
            raise error

        try:
            body = resp.json()
        except ValueError as exc:
            raise ExtractionFailedError(details={"message": "Response was not JSON"}) from exc
        return response_text(body)

    def close(self) -> None:
        self.session.close()


_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_advice_payload(text: str) -> List[Dict[str, Any]]:
    """Pull the ``adviceList`` array out of a reply that may wrap JSON in prose or fences."""
    if not text.strip():
        return []
    match = _JSON_OBJECT.search(text)
    json_str = match.group(0) if match else text
    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise ExtractionFailedError(
            "The model reply could not be read as advice. Try again.",
            details={"message": str(exc)},
        ) from exc
    if not isinstance(parsed, dict):
        raise ExtractionFailedError("The model reply had an unexpected shape.")
    items = parsed.get("adviceList") or []
    if not isinstance(items, list):
        raise ExtractionFailedError("The model reply had an unexpected shape.")
    return [i for i in items if isinstance(i, dict)]
