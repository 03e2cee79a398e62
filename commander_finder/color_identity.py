"""
Color identity resolution for Commander Finder.

This module turns free-form user text into a canonical color identity code,
builds the Scryfall search query for it, and maps raw Scryfall card objects
into display-ready CommanderRecord values.
"""

import logging
import random
import re
from typing import Any, Dict, List, Optional

from .models import ColorIdentityQuery, CommanderRecord


COLOR_ORDER = "WUBRG"

COLOR_WORDS = {
    'white': 'W',
    'blue': 'U',
    'black': 'B',
    'red': 'R',
    'green': 'G',
}

MAX_COLORS = 5

# Probability of each color-set size when generating a random identity
SIZE_WEIGHTS = [
    (1, 0.20),
    (2, 0.30),
    (3, 0.30),
    (4, 0.10),
    (5, 0.10),
]

DETAIL_URL_SOURCES = ('scryfall', 'edhrec')

_VALID_CODE = re.compile(r'^[WUBRG]+$')
_NON_LETTERS = re.compile(r'[^a-z]')


def _text(value: Any) -> str:
    """Return value stripped if it is a string, else ''."""
    if isinstance(value, str):
        return value.strip()
    return ''


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class ColorIdentityError(ValueError):
    """Base class for rejected color identity input."""

    def __init__(self, message: str, candidate: str = ""):
        super().__init__(message)
        self.candidate = candidate


class EmptyIdentity(ColorIdentityError):
    """Raised when the input contains no color tokens at all."""
    pass


class TooManyColors(ColorIdentityError):
    """Raised when the candidate code is longer than five colors."""
    pass


class InvalidColorCode(ColorIdentityError):
    """Raised when the candidate code contains letters outside WUBRG."""
    pass


class ColorIdentityResolver:
    """Normalizes color identities and shapes search results for display."""

    def __init__(self, rng: Optional[random.Random] = None, detail_url_source: str = 'scryfall'):
        """
        Initialize the resolver.

        Args:
            rng: Random source used for random picks and random identities.
                Defaults to an OS-seeded random.Random instance.
            detail_url_source: Which detail page to link, 'scryfall' or 'edhrec'
        """
        if detail_url_source not in DETAIL_URL_SOURCES:
            raise ValueError(f"Unknown detail URL source: {detail_url_source}")

        self.logger = logging.getLogger(__name__)
        self.rng = rng or random.Random()
        self.detail_url_source = detail_url_source

    def normalize(self, raw_text: str) -> str:
        """
        Normalize free-form text into a validated color code.

        Color words are mapped to their letters ("blue-black" -> "UB");
        any other token is upper-cased and kept, so "u b" -> "UB".

        Args:
            raw_text: Text as typed by the user

        Returns:
            Validated color code such as "UB" or "WBRG"

        Raises:
            EmptyIdentity: If no tokens remain after cleanup
            TooManyColors: If the candidate is longer than five letters
            InvalidColorCode: If the candidate contains letters outside WUBRG
        """
        cleaned = _NON_LETTERS.sub(' ', (raw_text or '').lower())
        tokens = cleaned.split()
        candidate = "".join(COLOR_WORDS.get(token, token.upper()) for token in tokens)

        self.logger.debug(f"Normalized {raw_text!r} to candidate {candidate!r}")

        if not candidate:
            raise EmptyIdentity("Please enter at least one color", candidate)

        if len(candidate) > MAX_COLORS:
            raise TooManyColors(
                f"A color identity has at most {MAX_COLORS} colors, got {len(candidate)} ({candidate})",
                candidate
            )

        if not _VALID_CODE.match(candidate):
            raise InvalidColorCode(
                f"Invalid color code '{candidate}': use W, U, B, R, G or color names",
                candidate
            )

        return candidate

    def build_search_query(self, code: str) -> ColorIdentityQuery:
        """Build the commander search query for a validated color code."""
        return ColorIdentityQuery(code=code)

    def to_display_record(self, raw: Dict[str, Any]) -> CommanderRecord:
        """
        Map a raw Scryfall card object to a CommanderRecord.

        Args:
            raw: Card object from a Scryfall search response

        Returns:
            CommanderRecord with optional image fields left as None when absent
        """
        raw = _mapping(raw)
        faces = raw.get('card_faces')
        first_face = faces[0] if isinstance(faces, list) and faces and isinstance(faces[0], dict) else {}

        name = _text(raw.get('name')) or _text(first_face.get('name')) or 'Unknown card'

        primary = _text(_mapping(raw.get('image_uris')).get('normal')) or None
        fallback = _text(_mapping(first_face.get('image_uris')).get('normal')) or None

        return CommanderRecord(
            name=name,
            image_primary_url=primary,
            image_fallback_url=fallback,
            detail_url=self._detail_url(raw)
        )

    def _detail_url(self, raw: Dict[str, Any]) -> str:
        """Pick the detail page link, preferring the configured source."""
        card_page = _text(raw.get('scryfall_uri'))
        related = _text(_mapping(raw.get('related_uris')).get('edhrec'))

        if self.detail_url_source == 'edhrec':
            candidates = [related, card_page]
        else:
            candidates = [card_page, related]

        for url in candidates + [_text(raw.get('uri'))]:
            if url:
                return url
        return ''

    def select_all(self, raw_results: List[Dict[str, Any]]) -> List[CommanderRecord]:
        """Map every raw result to a CommanderRecord, keeping upstream order."""
        return [self.to_display_record(raw) for raw in raw_results]

    def select_random_one(self, raw_results: List[Dict[str, Any]]) -> Optional[CommanderRecord]:
        """
        Pick one result uniformly at random.

        Returns:
            The picked CommanderRecord, or None if there are no results
        """
        if not raw_results:
            return None

        index = int(self.rng.random() * len(raw_results))
        # random() is in [0, 1) but guard the float edge anyway
        index = min(index, len(raw_results) - 1)
        self.logger.debug(f"Random pick index {index} of {len(raw_results)}")
        return self.to_display_record(raw_results[index])

    def pick_color_count(self) -> int:
        """Draw a color-set size using the cumulative weight thresholds."""
        r = self.rng.random()
        cumulative = 0.0
        for size, weight in SIZE_WEIGHTS:
            cumulative += weight
            if cumulative > r:
                return size
        return SIZE_WEIGHTS[-1][0]

    def generate_random_color_identity(self) -> str:
        """
        Generate a random color identity.

        The size is weighted towards two and three colors; the colors
        themselves are distinct and returned in WUBRG order.
        """
        size = self.pick_color_count()
        chosen = set(self.rng.sample(COLOR_ORDER, size))
        code = "".join(color for color in COLOR_ORDER if color in chosen)
        self.logger.debug(f"Generated random color identity {code}")
        return code
