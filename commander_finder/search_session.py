"""
Search session tying the resolver, the Scryfall service and user state together.

Only one search is active at a time: starting a new search cancels the
token of the previous one, and a superseded search discards its results.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .color_identity import ColorIdentityResolver
from .models import ColorIdentityQuery, CommanderRecord
from .scryfall_service import ScryfallService
from .state import AppState, add_favorite


class CancellationToken:
    """Flag shared between a search and whoever may supersede it."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class SearchOutcome:
    """Result of one completed search."""
    code: str
    query: ColorIdentityQuery
    records: List[CommanderRecord] = field(default_factory=list)
    total_found: int = 0
    random_pick: bool = False


class FinderSession:
    """Runs commander searches and applies their results to user state."""

    def __init__(
        self,
        resolver: ColorIdentityResolver,
        scryfall_service: ScryfallService,
        state: Optional[AppState] = None
    ):
        self.logger = logging.getLogger(__name__)
        self.resolver = resolver
        self.scryfall_service = scryfall_service
        self.state = state or AppState()

        self._lock = threading.Lock()
        self._current_token: Optional[CancellationToken] = None

    def begin_search(self) -> CancellationToken:
        """Cancel any search in flight and issue a token for a new one."""
        token = CancellationToken()
        with self._lock:
            if self._current_token is not None:
                self._current_token.cancel()
            self._current_token = token
        return token

    def _finish(self, token: CancellationToken) -> bool:
        """Release the token; False if the search was superseded meanwhile."""
        with self._lock:
            if self._current_token is token:
                self._current_token = None
        return not token.cancelled

    def search(self, raw_text: str, pick_random: bool = False) -> Optional[SearchOutcome]:
        """
        Search commanders for a user-entered color identity.

        Args:
            raw_text: Free-form colors, e.g. "blue-black" or "UB"
            pick_random: Return a single random match instead of all matches

        Returns:
            SearchOutcome, or None if a newer search superseded this one

        Raises:
            ColorIdentityError: If the text is not a valid color identity
            SearchFailed: If the Scryfall request fails
        """
        code = self.resolver.normalize(raw_text)
        return self._search_code(code, pick_random)

    def search_random_identity(self, pick_random: bool = False) -> Optional[SearchOutcome]:
        """Search commanders for a randomly generated color identity."""
        code = self.resolver.generate_random_color_identity()
        self.logger.info(f"Random color identity: {code}")
        return self._search_code(code, pick_random)

    def _search_code(self, code: str, pick_random: bool) -> Optional[SearchOutcome]:
        query = self.resolver.build_search_query(code)
        token = self.begin_search()

        try:
            raw_results = self.scryfall_service.search_cards(query, cancel_token=token)
        finally:
            current = self._finish(token)

        if not current:
            self.logger.debug(f"Discarding superseded results for {code}")
            return None

        if pick_random:
            picked = self.resolver.select_random_one(raw_results)
            records = [picked] if picked is not None else []
        else:
            records = self.resolver.select_all(raw_results)

        return SearchOutcome(
            code=code,
            query=query,
            records=records,
            total_found=len(raw_results),
            random_pick=pick_random
        )

    def save_favorite(self, outcome: SearchOutcome, name: str) -> CommanderRecord:
        """
        Add a commander from a search outcome to the favorites.

        Raises:
            ValueError: If no record in the outcome has that name
        """
        wanted = name.strip().lower()
        for record in outcome.records:
            if record.name.lower() == wanted:
                self.state = add_favorite(self.state, record)
                return record
        raise ValueError(f"'{name}' is not among the {outcome.code} results")
