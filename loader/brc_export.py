"""Loader for the camps, art and events JSON export."""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, TypeVar

from processor.models import (
    ArtInstallation,
    ArtLocation,
    Camp,
    CampLocation,
    EventType,
    Occurrence,
    RawEvent,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ExportFormatError(Exception):
    """Raised when an export file cannot be read or has the wrong shape."""


class BrcExportLoader:
    """Reads the three collections of the event export."""

    def __init__(self, camps_path: str, art_path: str, events_path: str):
        """
        Initialize the loader.

        Args:
            camps_path: Path to the camps JSON array
            art_path: Path to the art installations JSON array
            events_path: Path to the events JSON array
        """
        self.camps_path = Path(camps_path)
        self.art_path = Path(art_path)
        self.events_path = Path(events_path)

    def load_camps(self) -> List[Camp]:
        """
        Load all camps from the camps export.

        Returns:
            List of Camp objects in file order
        """
        logger.info(f"Parsing camps from {self.camps_path}")
        camps = list(self._decode(self.camps_path, self._parse_camp))
        logger.info(f"Loaded {len(camps)} camps")
        return camps

    def load_art(self) -> List[ArtInstallation]:
        """
        Load all art installations from the art export.

        Returns:
            List of ArtInstallation objects in file order
        """
        logger.info(f"Parsing art from {self.art_path}")
        arts = list(self._decode(self.art_path, self._parse_art))
        logger.info(f"Loaded {len(arts)} art installations")
        return arts

    def iter_events(self) -> Iterator[RawEvent]:
        """
        Yield events from the events export one at a time, in file order.

        Raises:
            ExportFormatError: If the file is unreadable or malformed
        """
        logger.info(f"Parsing events from {self.events_path}")
        yield from self._decode(self.events_path, self._parse_event)

    def _decode(self, path: Path, parse: Callable[[Dict[str, Any]], T]) -> Iterator[T]:
        for index, record in enumerate(self._read_records(path)):
            try:
                yield parse(record)
            except (TypeError, ValueError) as e:
                raise ExportFormatError(
                    f"Malformed record {index} in {path}: {e}"
                ) from e

    def _read_records(self, path: Path) -> Iterator[Dict[str, Any]]:
        """
        Decode a JSON array of objects.

        Args:
            path: File to decode

        Raises:
            ExportFormatError: If the file is missing, not JSON, not an
                array, or holds a non-object element
        """
        try:
            with path.open(encoding='utf-8') as handle:
                data = json.load(handle)
        except OSError as e:
            raise ExportFormatError(f"Cannot open {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ExportFormatError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, list):
            raise ExportFormatError(
                f"Expected a JSON array at the top level of {path}, "
                f"got {type(data).__name__}"
            )

        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise ExportFormatError(
                    f"Record {index} in {path} is not an object: {record!r}"
                )
            yield record

    def _parse_camp(self, record: Dict[str, Any]) -> Camp:
        location = _as_dict(record.get('location'), 'location')
        return Camp(
            uid=record.get('uid') or '',
            name=record.get('name') or '',
            description=record.get('description') or '',
            location=CampLocation(
                string=location.get('string') or '',
                frontage=location.get('frontage') or '',
                intersection=location.get('intersection') or '',
                intersection_type=location.get('intersection_type') or '',
            ),
            location_string=record.get('location_string') or '',
        )

    def _parse_art(self, record: Dict[str, Any]) -> ArtInstallation:
        location = _as_dict(record.get('location'), 'location')
        return ArtInstallation(
            uid=record.get('uid') or '',
            name=record.get('name') or '',
            location=ArtLocation(
                hour=int(location.get('hour') or 0),
                minute=int(location.get('minute') or 0),
                distance=int(location.get('distance') or 0),
            ),
        )

    def _parse_event(self, record: Dict[str, Any]) -> RawEvent:
        event_type = _as_dict(record.get('event_type'), 'event_type')
        occurrence_set = record.get('occurrence_set')
        if occurrence_set is None:
            occurrence_set = []
        if not isinstance(occurrence_set, list):
            raise TypeError(
                f"occurrence_set must be an array, got {type(occurrence_set).__name__}"
            )
        occurrences = []
        for position, occurrence in enumerate(occurrence_set):
            if not isinstance(occurrence, dict):
                raise TypeError(
                    f"occurrence {position} must be an object, got {occurrence!r}"
                )
            occurrences.append(Occurrence(
                start_time=occurrence.get('start_time') or '',
                end_time=occurrence.get('end_time') or '',
            ))
        return RawEvent(
            event_id=int(record.get('event_id') or 0),
            title=record.get('title') or '',
            uid=record.get('uid') or '',
            description=record.get('description') or '',
            event_type=EventType(
                id=int(event_type.get('id') or 0),
                label=event_type.get('label') or '',
                abbr=event_type.get('abbr') or '',
            ),
            year=int(record.get('year') or 0),
            print_description=record.get('print_description') or '',
            hosted_by_camp=record.get('hosted_by_camp') or None,
            located_at_art=record.get('located_at_art') or None,
            other_location=record.get('other_location') or '',
            occurrence_set=occurrences,
        )


def build_camp_index(camps: Iterable[Camp]) -> Dict[str, Camp]:
    """Map camp uid to camp; later duplicates replace earlier ones."""
    return {camp.uid: camp for camp in camps}


def build_art_index(arts: Iterable[ArtInstallation]) -> Dict[str, ArtInstallation]:
    """Map art uid to installation; later duplicates replace earlier ones."""
    return {art.uid: art for art in arts}


def _as_dict(value: Any, field_name: str) -> Dict[str, Any]:
    """Return a nested object, treating an absent value as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(
            f"{field_name} must be an object, got {type(value).__name__}"
        )
    return value
