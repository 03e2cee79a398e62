"""
Favorites and theme state for Commander Finder.

AppState is immutable; the update functions return a new state. Persistence
happens only through StateStore.load() at startup and StateStore.save()
after a change.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Tuple, Union

from .models import CommanderRecord


FAVORITES_KEY = "favorites"
THEME_KEY = "theme"

THEMES = ('light', 'dark')
DEFAULT_THEME = 'light'


@dataclass(frozen=True)
class AppState:
    """Persisted user state: saved commanders and the display theme."""
    favorites: Tuple[CommanderRecord, ...] = ()
    theme: str = DEFAULT_THEME

    def has_favorite(self, name: str) -> bool:
        """Check whether a commander with this name is saved."""
        wanted = name.strip().lower()
        return any(record.name.lower() == wanted for record in self.favorites)


def add_favorite(state: AppState, record: CommanderRecord) -> AppState:
    """Return state with record appended, unless a card of that name is already saved."""
    if state.has_favorite(record.name):
        return state
    return replace(state, favorites=state.favorites + (record,))


def remove_favorite(state: AppState, name: str) -> AppState:
    """Return state without the named commander (case-insensitive)."""
    wanted = name.strip().lower()
    kept = tuple(record for record in state.favorites if record.name.lower() != wanted)
    return replace(state, favorites=kept)


def set_theme(state: AppState, theme: str) -> AppState:
    """Return state with the given theme."""
    if theme not in THEMES:
        raise ValueError(f"Unknown theme: {theme} (expected one of {', '.join(THEMES)})")
    return replace(state, theme=theme)


def toggle_theme(state: AppState) -> AppState:
    """Switch between light and dark."""
    return set_theme(state, 'light' if state.theme == 'dark' else 'dark')


class StateStore:
    """Loads and saves AppState as a JSON document."""

    def __init__(self, path: Union[str, Path], default_theme: str = DEFAULT_THEME):
        """
        Initialize state store.

        Args:
            path: JSON file holding the favorites and theme
            default_theme: Theme used when nothing has been saved yet
        """
        self.logger = logging.getLogger(__name__)
        self.path = Path(path)
        self.default_theme = default_theme if default_theme in THEMES else DEFAULT_THEME

    def default_state(self) -> AppState:
        return AppState(theme=self.default_theme)

    def load(self) -> AppState:
        """
        Load state from disk.

        A missing file yields the default state. A corrupt file is moved
        aside to a .backup file and the default state is returned.
        """
        if not self.path.exists():
            return self.default_state()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            favorites = tuple(self._load_favorites(data.get(FAVORITES_KEY, [])))
            theme = data.get(THEME_KEY, self.default_theme)
            if theme not in THEMES:
                theme = self.default_theme

            self.logger.debug(f"Loaded {len(favorites)} favorites from {self.path}")
            return AppState(favorites=favorites, theme=theme)

        except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            self.logger.warning(f"State file {self.path} is unreadable ({e}), starting fresh")
            backup_file = self.path.with_suffix(self.path.suffix + '.backup')
            self.path.replace(backup_file)
            return self.default_state()

    def _load_favorites(self, items) -> List[CommanderRecord]:
        """Parse saved favorites, skipping entries that are not valid records."""
        if not isinstance(items, list):
            self.logger.warning(f"Ignoring favorites in {self.path}: expected a list")
            return []

        favorites = []
        for item in items:
            try:
                favorites.append(CommanderRecord.from_dict(item))
            except (AttributeError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping invalid favorite {item!r}: {e}")
        return favorites

    def save(self, state: AppState) -> None:
        """Write state to disk."""
        data = {
            FAVORITES_KEY: [record.to_dict() for record in state.favorites],
            THEME_KEY: state.theme,
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise RuntimeError(f"Failed to save state: {e}")

        self.logger.debug(f"Saved {len(state.favorites)} favorites to {self.path}")
