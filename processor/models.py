"""Data models for the food guide pipeline."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional


@dataclass(frozen=True)
class CampLocation:
    """Structured camp placement."""
    string: str = ''
    frontage: str = ''
    intersection: str = ''
    intersection_type: str = ''


@dataclass(frozen=True)
class Camp:
    """Theme camp from the camps export."""
    uid: str
    name: str = ''
    description: str = ''
    location: CampLocation = field(default_factory=CampLocation)
    location_string: str = ''


@dataclass(frozen=True)
class ArtLocation:
    """Clock-face placement of an art installation."""
    hour: int = 0
    minute: int = 0
    distance: int = 0


@dataclass(frozen=True)
class ArtInstallation:
    """Art installation from the art export."""
    uid: str
    name: str = ''
    location: ArtLocation = field(default_factory=ArtLocation)


@dataclass(frozen=True)
class EventType:
    id: int = 0
    label: str = ''
    abbr: str = ''


@dataclass(frozen=True)
class Occurrence:
    """Raw start/end timestamps of one scheduled instance."""
    start_time: str
    end_time: str


@dataclass(frozen=True)
class RawEvent:
    """Event as it appears in the events export."""
    event_id: int
    title: str = ''
    uid: str = ''
    description: str = ''
    event_type: EventType = field(default_factory=EventType)
    year: int = 0
    print_description: str = ''
    hosted_by_camp: Optional[str] = None
    located_at_art: Optional[str] = None
    other_location: str = ''
    occurrence_set: List[Occurrence] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleEntry:
    """Location and time resolved record for one occurrence."""
    event_id: int
    event_name: str
    event_description: str
    day_key: str
    time_key: str
    duration: timedelta
    display_time: str
    clock_range: str
    weekday: str
    address: str
    location_name: str
    start: datetime
    end: datetime


@dataclass
class FieldWidths:
    """Running maxima of each field's display length."""
    display_time: int = 0
    address: int = 0
    location_name: int = 0
    event_name: int = 0
    event_description: int = 0

    def update(self, entry: ScheduleEntry) -> None:
        self.display_time = max(self.display_time, len(entry.display_time))
        self.address = max(self.address, len(entry.address))
        self.location_name = max(self.location_name, len(entry.location_name))
        self.event_name = max(self.event_name, len(entry.event_name))
        self.event_description = max(
            self.event_description, len(entry.event_description)
        )


@dataclass
class ScheduleGroup:
    """Entries sharing a calendar day and start time."""
    day_key: str
    time_key: str
    entries: List[ScheduleEntry]


@dataclass
class GuideSummary:
    """Result of a guide generation run."""
    camps_loaded: int
    art_loaded: int
    events_read: int
    qualifying_events: int
    entries_written: int
    warnings: int
    output_file: str
    output_format: str
