"""Turn a video URL into knowledge-base advice via Gemini."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

from .config import DEFAULT_ADVICE_LANGUAGE
from .errors import ConfigurationError, InvalidInputError
from .gemini_client import GeminiClient, parse_advice_payload
from .inflight import InFlightGuard
from .models import Advice, RawAdviceItem, normalize_extracted, now_iso

if TYPE_CHECKING:
    from .sheets_client import KnowledgeStore

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """\
You are an expert League of Legends coach.
Your task is to analyze the content of a provided YouTube video URL (using Google Search grounding)
and extract specific, actionable mindset or gameplay advice.

Rules:
1. Focus on specific habits, decision-making rules, or mechanical tips.
2. Ignore generic fluff.
3. Determine the Role (Top, Jungle, Mid, ADC, Support, or General).
4. Determine the Champion if specific (or General).
5. Categorize into: Laning, Teamfight, Vision, Macro, or Mental.
6. Rate importance: High, Medium, Low.
7. The 'content' of the advice MUST be in {language}.

Output strictly in valid JSON format.
Structure: {{ "adviceList": [ {{ "content": "...", "role_tags": "...", "champion_tags": "...", "category": "...", "importance": "..." }} ] }}
"""

USER_PROMPT = """\
Analyze this LoL video: {video_url}.
Additional context: {notes}.

Extract actionable advice items.
Return a JSON object with a key 'adviceList' containing an array of items.
Ensure the 'content' field is written in {language}.
"""


def build_prompts(video_url: str, notes: str, language: str = DEFAULT_ADVICE_LANGUAGE) -> tuple[str, str]:
    system = SYSTEM_INSTRUCTION.format(language=language)
    prompt = USER_PROMPT.format(video_url=video_url, notes=notes or "none", language=language)
    return system, prompt


class GeminiAdviceExtractor:
    def __init__(self, client: GeminiClient, language: str = DEFAULT_ADVICE_LANGUAGE) -> None:
        self._client = client
        self._language = language

    def extract(self, video_url: str, notes: str = "") -> List[RawAdviceItem]:
        if not self._client.api_key:
            raise ConfigurationError("Set the Gemini API key in the settings first.")
        system, prompt = build_prompts(video_url, notes, self._language)
        text = self._client.generate(prompt, system_instruction=system)
        items = [RawAdviceItem.from_payload(p) for p in parse_advice_payload(text)]
        logger.info("Extracted %d advice candidates from %s", len(items), video_url)
        return items


def default_title(at: Optional[datetime] = None) -> str:
    return f"Video Analysis - {(at or datetime.now()).strftime('%H:%M:%S')}"


@dataclass
class VideoAnalyzer:
    """Holds the candidates between "analyze" and "save"."""

    extractor: Any  # anything with extract(video_url, notes)
    video_url: str = ""
    notes: str = ""
    title: str = ""
    candidates: List[RawAdviceItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._analyze_guard = InFlightGuard("analyze video")
        self._save_guard = InFlightGuard("save advice")

    def analyze(self, video_url: str, notes: str = "") -> List[RawAdviceItem]:
        video_url = (video_url or "").strip()
        if not video_url:
            raise InvalidInputError("Enter a video URL.")
        with self._analyze_guard.hold():
            self.candidates = []
            items = self.extractor.extract(video_url, notes)
        self.video_url = video_url
        self.notes = notes
        self.candidates = list(items)
        self.title = default_title()
        return list(self.candidates)

    def save(self, store: "KnowledgeStore", title: Optional[str] = None) -> List[Advice]:
        if not self.candidates:
            raise InvalidInputError("Nothing to save. Analyze a video first.")
        with self._save_guard.hold():
            stamp = now_iso()
            advice = [
                normalize_extracted(item, title or self.title, self.video_url, stamp)
                for item in self.candidates
            ]
            store.append_advice(advice)
        logger.info("Saved %d advice items from %s", len(advice), self.video_url)
        self.candidates = []
        self.video_url = ""
        self.notes = ""
        return advice
