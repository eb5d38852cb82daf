"""
Runtime settings read from the environment (.env is loaded by the package).
"""

from __future__ import annotations

import os
from typing import Optional

DEFAULT_MODEL = "gpt-5"
DEFAULT_TIMEOUT = 15.0


def root_url() -> str:
    s = os.getenv("SCHEME", "https")
    h = os.getenv("HOST", "three.arcprize.org")
    p = os.getenv("PORT", "443")
    if (s == "https" and p == "443") or (s == "http" and p == "80"):
        return f"{s}://{h}"
    return f"{s}://{h}:{p}"


def arc_api_key() -> str:
    return os.getenv("ARC_API_KEY", "").strip().strip("'").strip('"')


def openai_api_key() -> str:
    return os.getenv("OPENAI_API_KEY", "").strip().strip("'").strip('"')


def default_model() -> str:
    return os.getenv("OPENAI_MODEL", DEFAULT_MODEL)


def default_reasoning_effort() -> str:
    return os.getenv("REASONING_EFFORT", "")


def default_game_filter() -> str:
    return os.getenv("GAME_ID", "")


def extra_tags() -> list[str]:
    return [t.strip() for t in os.getenv("TAGS", "").split(",") if t.strip()]


def request_timeout() -> float:
    raw = os.getenv("ARC_REQUEST_TIMEOUT", "")
    try:
        return float(raw) if raw else DEFAULT_TIMEOUT
    except ValueError:
        return DEFAULT_TIMEOUT


def debug_messages_path() -> Optional[str]:
    return os.getenv("DEBUG_MESSAGES_PATH") or None


def transcripts_enabled() -> bool:
    return os.getenv("TRANSCRIPTS", "0").strip().lower() in ("1", "true", "yes", "on")


def transcripts_dir() -> str:
    return os.getenv("TRANSCRIPTS_DIR", "transcripts")
