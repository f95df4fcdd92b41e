"""Gift suggestion interface.

Suggestions are a convenience for the giver. A suggester may fail or return
nothing; neither affects the exchange itself.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)

SUPPORTED_LANGUAGES = ("en", "zh", "ja", "ko", "es")
DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class GiftSuggestion:
    item: str
    reason: str
    estimated_price: str


class GiftSuggester(Protocol):
    def suggest(self, name: str, wishlist: Sequence[str], lang: str) -> list[GiftSuggestion]:
        """Return gift ideas for the named recipient."""


class NoSuggestions:
    def suggest(self, name: str, wishlist: Sequence[str], lang: str) -> list[GiftSuggestion]:
        return []


def normalize_language(lang: str | None) -> str:
    code = (lang or "").strip().lower()
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def safe_suggest(suggester: GiftSuggester, name: str, wishlist: Sequence[str], lang: str | None) -> list[GiftSuggestion]:
    try:
        return list(suggester.suggest(name, list(wishlist), normalize_language(lang)))
    except Exception as exc:
        logger.warning("gift_suggestions_failed", recipient=name, error=str(exc))
        return []
