from __future__ import annotations

import argparse
import json
import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, List, Optional
from urllib.parse import parse_qs, urlparse

from dotenv import load_dotenv

from .auth import GoogleAuthSession
from .config import (
    Settings,
    extraction_config_from_env,
    load_settings,
    oauth_config_from_env,
    save_settings,
    settings_path_from_env,
)
from .errors import CoachingError
from .extraction import GeminiAdviceExtractor, VideoAnalyzer
from .gemini_client import GeminiClient
from .models import MatchResult, Role
from .render import render_checklist, render_summary
from .session import MatchSession
from .sheets_client import KnowledgeStore, build_store
from .stats import aggregate

logger = logging.getLogger(__name__)


def _mask(value: str) -> str:
    if not value:
        return "(not set)"
    return value[:4] + "…" if len(value) > 8 else "****"


def _auth_session(settings: Settings) -> GoogleAuthSession:
    oauth = oauth_config_from_env()
    return GoogleAuthSession(
        client_id=settings.client_id,
        redirect_uri=oauth.redirect_uri,
        client_secret=oauth.client_secret,
        token_path=oauth.token_path,
    )


@contextmanager
def _store(settings: Settings) -> Iterator[KnowledgeStore]:
    with _auth_session(settings) as auth:
        yield build_store(auth, settings.spreadsheet_id)


def _parse_indices(raw: str, total: int) -> List[int]:
    """1-based item numbers to distinct 0-based indices; repeats count once."""
    out = set()
    for part in raw.replace(" ", "").split(","):
        if not part:
            continue
        try:
            idx = int(part) - 1
        except ValueError:
            raise SystemExit(f"Not a checklist item number: {part!r}") from None
        if not 0 <= idx < total:
            raise SystemExit(f"Checklist item {part} does not exist (1..{total}).")
        out.add(idx)
    return sorted(out)


def cmd_settings(args: argparse.Namespace, settings: Settings) -> None:
    updates = {
        "spreadsheet_id": args.spreadsheet_id,
        "client_id": args.client_id,
        "api_key": args.api_key,
    }
    updates = {k: v for k, v in updates.items() if v is not None}
    if updates:
        settings = replace(settings, **updates)
        path = save_settings(settings)
        print(f"Saved settings to {path}")
    print(f"Spreadsheet id : {settings.spreadsheet_id or '(not set)'}")
    print(f"Client id      : {settings.client_id or '(not set)'}")
    print(f"Gemini API key : {_mask(settings.api_key)}")


def cmd_login(args: argparse.Namespace, settings: Settings) -> None:
    with _auth_session(settings) as auth:
        if auth.is_authenticated and not args.force:
            print("Already signed in.")
            return
        print("Open this URL, approve access, then paste the address you were redirected to:")
        print(auth.consent_url())
        redirected = input("> ").strip()
        query = parse_qs(urlparse(redirected).query)
        code = (query.get("code") or [""])[0]
        state = (query.get("state") or [""])[0]
        if not code:
            raise SystemExit("No authorization code found in that URL.")
        auth.exchange_code(code, state)
        print("Signed in.")


def cmd_logout(args: argparse.Namespace, settings: Settings) -> None:
    with _auth_session(settings) as auth:
        auth.logout()
    print("Signed out.")


def cmd_init_sheets(args: argparse.Namespace, settings: Settings) -> None:
    with _store(settings) as store:
        created = store.ensure_sheets()
    print("Created: " + ", ".join(created) if created else "Both sheets already exist.")


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> None:
    extraction = extraction_config_from_env()
    client = GeminiClient(api_key=settings.api_key, model=extraction.model, timeout_s=extraction.timeout_s)
    analyzer = VideoAnalyzer(GeminiAdviceExtractor(client, language=extraction.language))
    try:
        items = analyzer.analyze(args.url, args.notes or "")
    finally:
        client.close()

    if args.output_format == "json":
        print(json.dumps([i.to_dict() for i in items], indent=2, ensure_ascii=False))
    else:
        print(f"{analyzer.title}: {len(items)} advice items")
        for n, item in enumerate(items, 1):
            print(f"{n:>2}. [{item.category or '-'}|{item.importance or '-'}] "
                  f"{item.role_tags or 'General'} / {item.subject_tags or 'General'}: {item.content or ''}")

    if args.save and items:
        with _store(settings) as store:
            saved = analyzer.save(store, title=args.title)
        print(f"Saved {len(saved)} items to the knowledge base.")


def cmd_review(args: argparse.Namespace, settings: Settings) -> None:
    session = MatchSession()
    with _store(settings) as store:
        checklist = session.begin_review(store, role=args.role, subject=args.champion, result=args.result)
        print(render_checklist(checklist, set()))
        if checklist:
            raw = args.checked
            if raw is None:
                raw = input("Items you followed (e.g. 1,3,4): ")
            for idx in _parse_indices(raw, len(checklist)):
                session.toggle(idx)
        note = args.note if args.note is not None else input("Note (optional): ")
        session.set_note(note)
        record = session.save(store)
    print(f"Saved. Adherence: {record.achievement_rate:.1f}% ({record.checked_count}/{record.total_count})")


def cmd_dashboard(args: argparse.Namespace, settings: Settings) -> None:
    with _store(settings) as store:
        summary = aggregate(store.fetch_match_history())

    if args.output_format == "pdf":
        if not args.output:
            raise SystemExit("--output is required for pdf output.")
        from .report_pdf import build_pdf

        build_pdf(summary, args.output)
        print(f"Wrote {args.output}")
        return

    text = json.dumps(summary.to_dict(), indent=2) if args.output_format == "json" else render_summary(summary)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        print(text)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="League of Legends coaching journal")
    parser.add_argument("--debug", action="store_true", help="Print debug logs")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("settings", help="Show or update stored settings")
    p.add_argument("--spreadsheet-id", default=None)
    p.add_argument("--client-id", default=None)
    p.add_argument("--api-key", default=None, help="Gemini API key")
    p.set_defaults(func=cmd_settings)

    p = sub.add_parser("login", help="Sign in to Google Sheets")
    p.add_argument("--force", action="store_true", help="Log in even if a token exists")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Forget the Google token")
    p.set_defaults(func=cmd_logout)

    p = sub.add_parser("init-sheets", help="Create the Knowledge_Base and Match_History tabs")
    p.set_defaults(func=cmd_init_sheets)

    p = sub.add_parser("analyze", help="Extract advice from a video")
    p.add_argument("--url", required=True, help="Video URL")
    p.add_argument("--notes", default="", help="Extra context for the model")
    p.add_argument("--title", default=None, help="Source title stored with the advice")
    p.add_argument("--save", action="store_true", help="Append the advice to the knowledge base")
    p.add_argument("--output-format", choices=["json", "text"], default="text")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("review", help="Review a finished match against your advice")
    p.add_argument("--role", choices=[r.value for r in Role], default=Role.MID.value)
    p.add_argument("--champion", required=True)
    p.add_argument("--result", choices=[r.value for r in MatchResult], default=MatchResult.WIN.value)
    p.add_argument("--checked", default=None, help="Comma-separated checklist numbers you followed")
    p.add_argument("--note", default=None)
    p.set_defaults(func=cmd_review)

    p = sub.add_parser("dashboard", help="Show match statistics")
    p.add_argument("--output-format", choices=["text", "json", "pdf"], default="text")
    p.add_argument("--output", default=None, help="Output path")
    p.set_defaults(func=cmd_dashboard)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    logger.debug("Using settings from %s", settings_path_from_env())
    try:
        args.func(args, settings)
    except CoachingError as exc:
        raise SystemExit(f"[{exc.code}] {exc.user_message}") from exc


if __name__ == "__main__":
    main()
