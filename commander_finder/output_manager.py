"""Output manager for formatting and saving commander search results."""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .color_identity import COLOR_ORDER
from .models import CommanderRecord
from .state import AppState


COLOR_LABELS = {
    'W': 'White',
    'U': 'Blue',
    'B': 'Black',
    'R': 'Red',
    'G': 'Green',
}

OUTPUT_FORMATS = ('text', 'json')


def describe_code(code: str) -> str:
    """Spell out a color code, e.g. 'UB' -> 'Blue, Black'."""
    return ", ".join(COLOR_LABELS[c] for c in code if c in COLOR_LABELS) or "Colorless"


class OutputManager:
    """Handles result formatting and result file output."""

    def __init__(self, output_directory: str = "."):
        """
        Initialize output manager.

        Args:
            output_directory: Directory where result files will be written
        """
        self.output_directory = Path(output_directory)

    def format_record(self, record: CommanderRecord) -> str:
        """Format one commander as a short multi-line entry."""
        lines = [record.name]
        if record.detail_url:
            lines.append(f"    Details: {record.detail_url}")
        if record.image_url:
            lines.append(f"    Image:   {record.image_url}")
        return "\n".join(lines)

    def format_results(self, code: str, records: List[CommanderRecord], random_pick: bool = False) -> str:
        """
        Format search results in readable text format.

        Args:
            code: Color identity that was searched
            records: Records to list
            random_pick: Whether the records are a single random pick

        Returns:
            Formatted results as string
        """
        lines = []

        title = "Random commander" if random_pick else "Commanders"
        lines.append("=" * 60)
        lines.append(f"{title} for {code} ({describe_code(code)})")
        lines.append("=" * 60)

        if not records:
            lines.append("No commanders found.")
            return "\n".join(lines)

        for i, record in enumerate(records, 1):
            lines.append(f"{i:3d}. {self.format_record(record)}")

        if not random_pick:
            lines.append("")
            lines.append(f"Total: {len(records)} commanders")

        return "\n".join(lines)

    def format_favorites(self, state: AppState) -> str:
        """Format the saved favorites list."""
        if not state.favorites:
            return "No favorites saved yet."

        lines = [f"Favorites ({len(state.favorites)}):"]
        for i, record in enumerate(state.favorites, 1):
            lines.append(f"{i:3d}. {self.format_record(record)}")
        return "\n".join(lines)

    def generate_filename(self, code: str, fmt: str = "text") -> str:
        """
        Generate a result filename that does not overwrite an existing file.

        Args:
            code: Color identity that was searched
            fmt: Output format ('text' or 'json')
        """
        extension = 'json' if fmt == 'json' else 'txt'
        safe_code = "".join(c for c in code.upper() if c in COLOR_ORDER) or "colorless"
        base_filename = f"commanders_{safe_code}.{extension}"

        if not (self.output_directory / base_filename).exists():
            return base_filename

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"commanders_{safe_code}_{timestamp}.{extension}"

    def write_results_file(
        self,
        code: str,
        records: List[CommanderRecord],
        filename: Optional[str] = None,
        fmt: str = "text"
    ) -> str:
        """
        Write search results to a file in the output directory.

        Args:
            code: Color identity that was searched
            records: Records to write
            filename: Optional filename (generated if not provided)
            fmt: 'text' or 'json'

        Returns:
            Path to the written file

        Raises:
            ValueError: If fmt is not a known output format
            OSError: If the file cannot be written
        """
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {fmt}")

        self.output_directory.mkdir(parents=True, exist_ok=True)
        output_path = self.output_directory / (filename or self.generate_filename(code, fmt))

        if fmt == 'json':
            content = json.dumps({
                'color_identity': code,
                'generated_at': datetime.now().isoformat(timespec='seconds'),
                'commanders': [record.to_dict() for record in records],
            }, indent=2, ensure_ascii=False)
        else:
            content = self.format_results(code, records)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content)
            f.write("\n")

        return str(output_path)
