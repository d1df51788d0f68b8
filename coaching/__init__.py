"""Coaching journal core package."""

__all__ = [
    "config",
    "errors",
    "models",
    "matcher",
    "session",
    "stats",
    "inflight",
    "auth",
    "sheets_client",
    "gemini_client",
    "extraction",
    "render",
    "report_pdf",
    "cli",
]
