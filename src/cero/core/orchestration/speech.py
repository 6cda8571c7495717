from __future__ import annotations

import re

from .replies import EMPTY_AFTER_CLEANUP

# Links are never spoken; confirmations keep the date/time wording only.
_URL_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
_EMPHASIS_RE = re.compile(r"[*_`#~]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_urls(text: str) -> str:
    return _URL_RE.sub("", text)


def clean_speech_text(text: str | None) -> str:
    cleaned = strip_urls(text or "")
    cleaned = _EMPHASIS_RE.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned or EMPTY_AFTER_CLEANUP
