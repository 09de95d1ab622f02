"""Command-line entry point for building the food guide."""
import argparse
import json
import logging
import os
import sys
import time
from dataclasses import dataclass, replace
from typing import List, Mapping, Optional

from loader.brc_export import BrcExportLoader, ExportFormatError, build_art_index, build_camp_index
from processor.event_processor import EventProcessor, TimestampParseError
from processor.models import FieldWidths, GuideSummary
from processor.schedule import ordered_groups
from renderers.docx_renderer import DocxRenderer
from renderers.text_renderer import TextRenderer

OUTPUT_FORMATS = ('text', 'docx')

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass(frozen=True)
class GuideConfig:
    """Settings for one guide run."""
    camps_file: str = 'brc_api_2022/camps.json'
    art_file: str = 'brc_api_2022/art.json'
    events_file: str = 'brc_api_2022/events.json'
    output_file: str = 'out/food-guide.txt'
    output_format: str = 'text'
    category_id: int = EventProcessor.FOOD_CATEGORY_ID
    wrap_width: int = 120
    entries_per_page: int = 12
    title: str = 'Food Guide'
    log_level: str = 'INFO'


def load_config(environ: Optional[Mapping[str, str]] = None) -> GuideConfig:
    """
    Read configuration from environment variables.

    Args:
        environ: Variables to read, defaults to os.environ

    Returns:
        GuideConfig with defaults for unset variables

    Raises:
        ValueError: If a numeric setting is not an integer, a width or page
            size is below 1, or the output format is unknown
    """
    env = os.environ if environ is None else environ
    defaults = GuideConfig()

    output_format = env.get('OUTPUT_FORMAT', defaults.output_format).lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown OUTPUT_FORMAT: {output_format}")

    config = GuideConfig(
        camps_file=env.get('CAMPS_FILE', defaults.camps_file),
        art_file=env.get('ART_FILE', defaults.art_file),
        events_file=env.get('EVENTS_FILE', defaults.events_file),
        output_file=env.get('OUTPUT_FILE', default_output_file(output_format)),
        output_format=output_format,
        category_id=int(env.get('FOOD_CATEGORY_ID', defaults.category_id)),
        wrap_width=int(env.get('WRAP_WIDTH', defaults.wrap_width)),
        entries_per_page=int(env.get('ENTRIES_PER_PAGE', defaults.entries_per_page)),
        title=env.get('GUIDE_TITLE', defaults.title),
        log_level=env.get('LOG_LEVEL', defaults.log_level),
    )

    if config.wrap_width < 1:
        raise ValueError(f"WRAP_WIDTH must be at least 1, got {config.wrap_width}")
    if config.entries_per_page < 1:
        raise ValueError(
            f"ENTRIES_PER_PAGE must be at least 1, got {config.entries_per_page}"
        )
    return config


def default_output_file(output_format: str) -> str:
    return 'out/food-guide.docx' if output_format == 'docx' else 'out/food-guide.txt'


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Build a food event guide from the camps, art and events export'
    )
    parser.add_argument('--format', choices=OUTPUT_FORMATS, help='Output format (default: text)')
    parser.add_argument('--output', help='Output file path')
    parser.add_argument('--camps', help='Camps JSON export')
    parser.add_argument('--art', help='Art JSON export')
    parser.add_argument('--events', help='Events JSON export')
    parser.add_argument('--category-id', type=int, help='Event type id to include (default: 5)')
    return parser.parse_args(argv)


def apply_args(config: GuideConfig, args: argparse.Namespace) -> GuideConfig:
    """Override configuration with any command-line values given."""
    overrides = {}
    if args.format:
        overrides['output_format'] = args.format
        if not args.output and config.output_file == default_output_file(config.output_format):
            overrides['output_file'] = default_output_file(args.format)
    if args.output:
        overrides['output_file'] = args.output
    if args.camps:
        overrides['camps_file'] = args.camps
    if args.art:
        overrides['art_file'] = args.art
    if args.events:
        overrides['events_file'] = args.events
    if args.category_id is not None:
        overrides['category_id'] = args.category_id
    return replace(config, **overrides)


def get_renderer(config: GuideConfig, field_widths: FieldWidths):
    """
    Build the renderer for the configured output format.

    Raises:
        ValueError: If the output format is unknown
    """
    if config.output_format == 'text':
        return TextRenderer(wrap_width=config.wrap_width)
    if config.output_format == 'docx':
        return DocxRenderer(
            title=config.title,
            entries_per_page=config.entries_per_page,
            field_widths=field_widths,
        )
    raise ValueError(f"Unknown output format: {config.output_format}")


def generate_guide(config: GuideConfig) -> GuideSummary:
    """
    Run the load, normalize, group and render stages.

    Args:
        config: Run configuration

    Returns:
        GuideSummary with counts for the run

    Raises:
        ExportFormatError: If an export file is unreadable or malformed
        TimestampParseError: If an occurrence timestamp is malformed
        OSError: If the output file cannot be written
    """
    loader = BrcExportLoader(
        camps_path=config.camps_file,
        art_path=config.art_file,
        events_path=config.events_file,
    )
    processor = EventProcessor(category_id=config.category_id)

    camps = build_camp_index(loader.load_camps())
    arts = build_art_index(loader.load_art())

    logger.info("Processing events")
    entries = processor.process_events(loader.iter_events(), camps, arts)

    logger.info("Sorting")
    groups = ordered_groups(entries)

    logger.info(f"Writing {config.output_format} guide to {config.output_file}")
    renderer = get_renderer(config, processor.field_widths)
    written = renderer.render(groups, config.output_file)

    return GuideSummary(
        camps_loaded=len(camps),
        art_loaded=len(arts),
        events_read=processor.events_seen,
        qualifying_events=processor.qualifying_events,
        entries_written=written,
        warnings=processor.warnings,
        output_file=config.output_file,
        output_format=config.output_format,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Build the guide and report the outcome.

    Returns:
        Process exit status, 0 on success and 1 on failure
    """
    args = parse_args(argv)
    try:
        config = apply_args(load_config(), args)
    except ValueError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)

    start_time = time.time()
    logger.info(
        "Guide generation started",
        extra={
            'output_format': config.output_format,
            'category_id': config.category_id
        }
    )

    try:
        summary = generate_guide(config)
    except (ExportFormatError, TimestampParseError, OSError) as e:
        logger.error(
            f"Guide generation failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    duration = time.time() - start_time
    logger.info(
        f"Complete! Wrote {summary.entries_written} entries to {summary.output_file} "
        f"with {summary.warnings} warnings in {round(duration, 2)}s"
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
