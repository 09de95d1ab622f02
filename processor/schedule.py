"""Grouping and ordering of schedule entries."""
import logging
from typing import Dict, Iterable, Iterator, List

from processor.models import ScheduleEntry, ScheduleGroup

logger = logging.getLogger(__name__)


def group_entries(
    entries: Iterable[ScheduleEntry],
) -> Dict[str, Dict[str, List[ScheduleEntry]]]:
    """
    Bucket entries by day and start time.

    Args:
        entries: Schedule entries in encounter order

    Returns:
        Mapping of day_key -> time_key -> entries sorted by duration.
        Entries with equal duration keep their encounter order.
    """
    grouped: Dict[str, Dict[str, List[ScheduleEntry]]] = {}

    for entry in entries:
        grouped.setdefault(entry.day_key, {}).setdefault(
            entry.time_key, []
        ).append(entry)

    for day in grouped.values():
        for bucket in day.values():
            bucket.sort(key=lambda entry: entry.duration)

    return grouped


def ordered_groups(entries: Iterable[ScheduleEntry]) -> List[ScheduleGroup]:
    """
    Group entries and return them in guide order.

    Days ascend, then start times within a day, then duration within a
    start time.
    """
    grouped = group_entries(entries)
    groups = [
        ScheduleGroup(day_key=day_key, time_key=time_key, entries=grouped[day_key][time_key])
        for day_key in sorted(grouped)
        for time_key in sorted(grouped[day_key])
    ]
    logger.info(f"Sorted entries into {len(groups)} groups over {len(grouped)} days")
    return groups


def iter_entries(groups: Iterable[ScheduleGroup]) -> Iterator[ScheduleEntry]:
    """Flatten groups back into a single ordered stream."""
    for group in groups:
        yield from group.entries
