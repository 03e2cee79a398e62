"""
Data models for Commander Finder.

This module contains the value types passed between the resolver, the
Scryfall service and the CLI: ColorIdentityQuery and CommanderRecord.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


COMMANDER_FORMAT = "commander"


@dataclass(frozen=True)
class ColorIdentityQuery:
    """Scryfall search for commanders with exactly the given color identity."""
    code: str
    format_name: str = COMMANDER_FORMAT

    @property
    def text(self) -> str:
        """Scryfall search syntax for this query."""
        return f"identity={self.code} is:commander legal:{self.format_name}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class CommanderRecord:
    """A commander card shaped for display."""
    name: str
    detail_url: str
    image_primary_url: Optional[str] = None
    image_fallback_url: Optional[str] = None

    def __post_init__(self):
        """Reject records without a name."""
        if not self.name or not self.name.strip():
            raise ValueError("CommanderRecord requires a non-empty name")

    @property
    def image_url(self) -> Optional[str]:
        """Image to show: the card image, or the first face for double-faced cards."""
        return self.image_primary_url or self.image_fallback_url

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization, omitting absent images."""
        data = {
            'name': self.name,
            'detail_url': self.detail_url,
        }
        if self.image_primary_url is not None:
            data['image_primary_url'] = self.image_primary_url
        if self.image_fallback_url is not None:
            data['image_fallback_url'] = self.image_fallback_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommanderRecord':
        """Create CommanderRecord from dictionary."""
        return cls(
            name=data.get('name', ''),
            detail_url=data.get('detail_url', ''),
            image_primary_url=data.get('image_primary_url'),
            image_fallback_url=data.get('image_fallback_url')
        )
