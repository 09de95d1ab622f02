"""Typeset (DOCX) rendering of the food guide."""
import logging
from pathlib import Path
from typing import Iterable, Optional

from docx import Document
from docx.enum.section import WD_SECTION
from docx.shared import Pt

from processor.event_processor import format_clock, format_short_date
from processor.models import FieldWidths, ScheduleEntry, ScheduleGroup
from processor.schedule import iter_entries

logger = logging.getLogger(__name__)


class DocxRenderer:
    """Writes a paginated guide with a title page and bulleted entries."""

    CHAR_WIDTH_PT = 5.5
    MAX_TAB_PT = 468  # 6.5in text column on a Letter page
    LONGEST_WEEKDAY = len('Wednesday ')

    def __init__(
        self,
        title: str = 'Food Guide',
        entries_per_page: int = 12,
        field_widths: Optional[FieldWidths] = None,
    ):
        """
        Initialize the renderer.

        Args:
            title: Text of the title page
            entries_per_page: Entries placed on each page after the title
            field_widths: Widest value per field, used to place tab stops
        """
        if entries_per_page < 1:
            raise ValueError(f"entries_per_page must be positive, got {entries_per_page}")
        self.title = title
        self.entries_per_page = entries_per_page
        self.field_widths = field_widths or FieldWidths()

    def render(self, groups: Iterable[ScheduleGroup], output_path: str) -> int:
        """
        Write the guide to a DOCX file.

        Args:
            groups: Schedule groups in guide order
            output_path: Destination file, parent directories are created

        Returns:
            Number of entries written
        """
        document = Document()
        self._add_title_page(document)

        written = 0
        last_day = None
        for entry in iter_entries(groups):
            if written % self.entries_per_page == 0:
                self._start_page(document, entry)

            self._add_entry(document, entry, show_weekday=entry.day_key != last_day)
            last_day = entry.day_key
            written += 1

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        document.save(str(path))

        logger.info(f"Wrote {written} entries to {path}")
        return written

    def _add_title_page(self, document) -> None:
        document.add_paragraph(self.title, style='Title')
        document.add_paragraph(
            'Food and drink events, by day and start time', style='Subtitle'
        )

    def _start_page(self, document, entry: ScheduleEntry) -> None:
        """Open a new page whose footer names the first start time on it."""
        section = document.add_section(WD_SECTION.NEW_PAGE)
        footer = section.footer
        footer.is_linked_to_previous = False
        footer.paragraphs[0].text = page_footer_text(entry)

    def _add_entry(self, document, entry: ScheduleEntry, show_weekday: bool) -> None:
        paragraph = document.add_paragraph(style='List Bullet')
        tab_stops = paragraph.paragraph_format.tab_stops
        time_tab, address_tab = self._tab_positions()
        tab_stops.add_tab_stop(Pt(time_tab))
        if address_tab > time_tab:
            tab_stops.add_tab_stop(Pt(address_tab))

        if show_weekday:
            paragraph.add_run(f"{entry.weekday} {entry.display_time}")
        else:
            paragraph.add_run(entry.clock_range)
        paragraph.add_run(f"\t{entry.address}\t")
        paragraph.add_run(entry.location_name).italic = True

        paragraph.add_run().add_break()
        paragraph.add_run(entry.event_name).bold = True
        if entry.event_description:
            paragraph.add_run(f": {entry.event_description}")

    def _tab_positions(self):
        widths = self.field_widths
        time_tab = min(
            (widths.display_time + self.LONGEST_WEEKDAY + 1) * self.CHAR_WIDTH_PT,
            self.MAX_TAB_PT,
        )
        address_tab = min(
            time_tab + (widths.address + 1) * self.CHAR_WIDTH_PT,
            self.MAX_TAB_PT,
        )
        return time_tab, address_tab


def page_footer_text(entry: ScheduleEntry) -> str:
    """Footer such as "Sunday 8/28 8am"."""
    return f"{entry.weekday} {format_short_date(entry.start)} {format_clock(entry.start)}"
