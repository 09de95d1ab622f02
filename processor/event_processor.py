"""Event processor turning raw events into schedule entries."""
import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from processor.models import (
    ArtInstallation,
    Camp,
    FieldWidths,
    Occurrence,
    RawEvent,
    ScheduleEntry,
)

logger = logging.getLogger(__name__)


class TimestampParseError(ValueError):
    """Raised when an occurrence timestamp does not match the export format."""

    def __init__(self, event_id: int, raw_value: str):
        self.event_id = event_id
        self.raw_value = raw_value
        super().__init__(
            f"Failed to parse time \"{raw_value}\" for event {event_id}"
        )


class EventProcessor:
    """Processor for filtering events and resolving their occurrences."""

    FOOD_CATEGORY_ID = 5
    TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S%z'
    TIMESTAMP_PATTERN = re.compile(
        r'[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}[+-][0-9]{2}:[0-9]{2}'
    )

    def __init__(self, category_id: int = FOOD_CATEGORY_ID):
        """
        Initialize the processor.

        Args:
            category_id: Event type id selecting the events to keep
        """
        self.category_id = category_id
        self.field_widths = FieldWidths()
        self.events_seen = 0
        self.qualifying_events = 0
        self.warnings = 0

    def process_events(
        self,
        raw_events: Iterable[RawEvent],
        camps: Dict[str, Camp],
        arts: Dict[str, ArtInstallation],
    ) -> List[ScheduleEntry]:
        """
        Build one schedule entry per occurrence of every qualifying event.

        Args:
            raw_events: Events in file order
            camps: Camp lookup keyed by uid
            arts: Art installation lookup keyed by uid

        Returns:
            List of ScheduleEntry objects in encounter order

        Raises:
            TimestampParseError: If any occurrence timestamp is malformed
        """
        entries = []

        for event in raw_events:
            self.events_seen += 1
            if event.event_type.id != self.category_id:
                continue

            self.qualifying_events += 1
            for occurrence in event.occurrence_set:
                entry = self._process_occurrence(event, occurrence, camps, arts)
                self.field_widths.update(entry)
                entries.append(entry)

        logger.info(
            f"Built {len(entries)} schedule entries from "
            f"{self.qualifying_events} events in category {self.category_id} "
            f"out of {self.events_seen} total events"
        )
        return entries

    def _process_occurrence(
        self,
        event: RawEvent,
        occurrence: Occurrence,
        camps: Dict[str, Camp],
        arts: Dict[str, ArtInstallation],
    ) -> ScheduleEntry:
        start = self._parse_timestamp(event.event_id, occurrence.start_time)
        end = self._parse_timestamp(event.event_id, occurrence.end_time)

        address, location_name = self._resolve_location(event, camps, arts)
        clock_range = self._format_clock_range(start, end)

        return ScheduleEntry(
            event_id=event.event_id,
            event_name=event.title,
            event_description=event.description,
            day_key=start.strftime('%m/%d'),
            time_key=start.strftime('%H%M'),
            # Negative when the export lists end before start; kept as-is.
            duration=end - start,
            display_time=f"{format_short_date(start)} {clock_range}",
            clock_range=clock_range,
            weekday=start.strftime('%A'),
            address=address,
            location_name=location_name,
            start=start,
            end=end,
        )

    def _parse_timestamp(self, event_id: int, raw_value: str) -> datetime:
        """
        Parse an ISO 8601 timestamp with a UTC offset.

        Args:
            event_id: Owning event, reported on failure
            raw_value: Timestamp such as 2022-08-28T08:00:00-07:00

        Returns:
            Timezone aware datetime

        Raises:
            TimestampParseError: If the value is not exactly
                YYYY-MM-DDThh:mm:ss+hh:mm
        """
        # strptime alone accepts unpadded fields and "Z" or colon-less offsets.
        if not isinstance(raw_value, str) or not self.TIMESTAMP_PATTERN.fullmatch(raw_value):
            raise TimestampParseError(event_id, raw_value)
        try:
            return datetime.strptime(raw_value, self.TIMESTAMP_FORMAT)
        except (TypeError, ValueError) as e:
            raise TimestampParseError(event_id, raw_value) from e

    def _resolve_location(
        self,
        event: RawEvent,
        camps: Dict[str, Camp],
        arts: Dict[str, ArtInstallation],
    ) -> Tuple[str, str]:
        """
        Resolve (address, location_name) for an event.

        A camp with a location string wins over art, and art wins over the
        free-text other_location.
        """
        camp: Optional[Camp] = None
        if event.hosted_by_camp:
            camp = camps.get(event.hosted_by_camp)
            if camp is None:
                self.warnings += 1
                logger.warning(
                    f"Could not find camp {event.hosted_by_camp} "
                    f"for event {event.event_id}"
                )

        art: Optional[ArtInstallation] = None
        if event.located_at_art:
            art = arts.get(event.located_at_art)
            if art is None:
                self.warnings += 1
                logger.warning(
                    f"Could not find art {event.located_at_art} "
                    f"for event {event.event_id}"
                )

        if camp is not None and camp.location_string:
            address, location_name = camp.location_string, camp.name
        elif art is not None:
            address, location_name = format_art_address(art), art.name
        else:
            address, location_name = '', event.other_location

        if not address and not location_name:
            self.warnings += 1
            logger.warning(f"No address found for event {event.event_id}")

        return address, location_name

    def _format_clock_range(self, start: datetime, end: datetime) -> str:
        """Format "8am - 9:30am", adding the end date when it differs."""
        end_date = ''
        if start.date() != end.date():
            end_date = f"{format_short_date(end)} "
        return f"{format_clock(start)} - {end_date}{format_clock(end)}"


def format_short_date(moment: datetime) -> str:
    """Month/day without zero padding, e.g. 8/28."""
    return f"{moment.month}/{moment.day}"


def format_clock(moment: datetime) -> str:
    """12-hour clock, minutes omitted on the hour: 3pm or 3:15pm."""
    hour = moment.hour % 12 or 12
    suffix = 'am' if moment.hour < 12 else 'pm'
    if moment.minute == 0:
        return f"{hour}{suffix}"
    return f"{hour}:{moment.minute:02d}{suffix}"


def format_art_address(art: ArtInstallation) -> str:
    """Clock-face position, e.g. 4:30 2500'."""
    location = art.location
    return f"{location.hour}:{location.minute:02d} {location.distance}'"
