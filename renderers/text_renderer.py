"""Plain-text rendering of the food guide."""
import logging
import textwrap
from pathlib import Path
from typing import Iterable

from processor.models import ScheduleEntry, ScheduleGroup
from processor.schedule import iter_entries

logger = logging.getLogger(__name__)


class TextRenderer:
    """Writes one tab-separated block per schedule entry."""

    def __init__(self, wrap_width: int = 120):
        """
        Initialize the renderer.

        Args:
            wrap_width: Column at which the name/description line wraps
        """
        if wrap_width < 1:
            raise ValueError(f"wrap_width must be positive, got {wrap_width}")
        self.wrap_width = wrap_width

    def render(self, groups: Iterable[ScheduleGroup], output_path: str) -> int:
        """
        Write the guide to a text file.

        Args:
            groups: Schedule groups in guide order
            output_path: Destination file, parent directories are created

        Returns:
            Number of entries written
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        written = 0
        with path.open('w', encoding='utf-8') as handle:
            for entry in iter_entries(groups):
                handle.write(self.format_entry(entry))
                written += 1

        logger.info(f"Wrote {written} entries to {path}")
        return written

    def format_entry(self, entry: ScheduleEntry) -> str:
        """
        Format a single entry.

        Args:
            entry: Schedule entry to format

        Returns:
            Times, address and location on one line, then the wrapped
            name and description on tab-indented lines
        """
        summary = self.wrap(f"{entry.event_name}:  {entry.event_description}")
        return (
            f"{entry.display_time}\t{entry.address}\t{entry.location_name}\n"
            f"\t{summary}\n"
        )

    def wrap(self, text: str, line_prefix: str = '\t') -> str:
        """Wrap on word breaks; continuation lines start with line_prefix."""
        words = text.split()
        if not words:
            return text
        lines = textwrap.wrap(
            ' '.join(words),
            width=self.wrap_width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        return f"\n{line_prefix}".join(lines)
