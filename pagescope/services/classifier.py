"""Heuristics deciding whether a fetched page needs escalation.

Both predicates are side-effect free and deliberately loose: escalating a
legitimately short page, or accepting a subtly broken render, is acceptable.
"""

from pagescope.constants import (
    EMPTY_BODY_TEXT_CHARS,
    EMPTY_MAX_LINKS,
    EMPTY_MIN_PARAGRAPHS,
    MIN_BODY_TEXT_CHARS,
)
from pagescope.models.scrape_models import ExtractedDocument

# Bot-wall/challenge markers. A marker matches when all of its phrases
# appear in the lower-cased HTML.
CHALLENGE_MARKERS: tuple[tuple[str, ...], ...] = (
    ("enable javascript",),
    ("please enable cookies",),
    ("attention required", "cloudflare"),
    ("cf-chl",),
    ("challenge-platform",),
    ("access denied",),
)


def matched_challenge_marker(html: str) -> tuple[str, ...] | None:
    """First challenge marker found in ``html``, if any."""
    lower = (html or "").lower()
    for marker in CHALLENGE_MARKERS:
        if all(phrase in lower for phrase in marker):
            return marker
    return None


def looks_blocked_or_js_required(html: str, document: ExtractedDocument) -> bool:
    """True for tiny bodies or pages carrying challenge/bot-wall phrases."""
    if document.body_text_length < MIN_BODY_TEXT_CHARS:
        return True
    return matched_challenge_marker(html) is not None


def looks_empty_extraction(document: ExtractedDocument) -> bool:
    """True when the extraction came back with basically nothing."""
    paragraphs = len(document.paragraphs)
    links = len(document.links)

    if document.body_text_length < EMPTY_BODY_TEXT_CHARS and paragraphs < EMPTY_MIN_PARAGRAPHS:
        return True

    # Many bot walls return a couple of generic links
    return paragraphs == 0 and links <= EMPTY_MAX_LINKS
