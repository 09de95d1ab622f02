"""Integration tests for the food guide entry point."""
import json
import logging
import os
from unittest.mock import Mock, patch

import pytest
from docx import Document

from food_guide import (
    GuideConfig,
    apply_args,
    generate_guide,
    get_renderer,
    load_config,
    main,
    parse_args,
    setup_logging,
)
from processor.models import FieldWidths
from renderers.docx_renderer import DocxRenderer
from renderers.text_renderer import TextRenderer


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def export_dir(tmp_path):
    """Write the one-camp, one-event export."""
    camps = [{"uid": "c1", "name": "Camp X", "location_string": "3:00 & Esplanade"}]
    events = [
        {
            "event_id": 1,
            "title": "Pancakes",
            "description": "Fluffy.",
            "event_type": {"id": 5},
            "hosted_by_camp": "c1",
            "occurrence_set": [
                {"start_time": "2022-08-28T08:00:00-07:00", "end_time": "2022-08-28T09:00:00-07:00"}
            ]
        },
        {
            "event_id": 2,
            "title": "Yoga",
            "event_type": {"id": 3},
            "hosted_by_camp": "c1",
            "occurrence_set": [
                {"start_time": "2022-08-28T07:00:00-07:00", "end_time": "2022-08-28T08:00:00-07:00"}
            ]
        }
    ]
    write_json(tmp_path / "camps.json", camps)
    write_json(tmp_path / "art.json", [])
    write_json(tmp_path / "events.json", events)
    return tmp_path


@pytest.fixture
def mock_env(export_dir):
    """Point the configuration at the test export."""
    env_vars = {
        'CAMPS_FILE': str(export_dir / "camps.json"),
        'ART_FILE': str(export_dir / "art.json"),
        'EVENTS_FILE': str(export_dir / "events.json"),
        'OUTPUT_FILE': str(export_dir / "out" / "food-guide.txt"),
        'LOG_LEVEL': 'INFO'
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


def config_for(export_dir, **overrides):
    settings = dict(
        camps_file=str(export_dir / "camps.json"),
        art_file=str(export_dir / "art.json"),
        events_file=str(export_dir / "events.json"),
        output_file=str(export_dir / "out" / "food-guide.txt"),
    )
    settings.update(overrides)
    return GuideConfig(**settings)


class TestLoadConfig:
    """Test cases for configuration loading."""

    def test_defaults(self):
        config = load_config({})

        assert config.camps_file == 'brc_api_2022/camps.json'
        assert config.art_file == 'brc_api_2022/art.json'
        assert config.events_file == 'brc_api_2022/events.json'
        assert config.output_file == 'out/food-guide.txt'
        assert config.output_format == 'text'
        assert config.category_id == 5
        assert config.wrap_width == 120
        assert config.entries_per_page == 12

    def test_environment_overrides(self):
        config = load_config({
            'OUTPUT_FORMAT': 'DOCX',
            'FOOD_CATEGORY_ID': '7',
            'WRAP_WIDTH': '80',
            'GUIDE_TITLE': 'Eats'
        })

        assert config.output_format == 'docx'
        assert config.output_file == 'out/food-guide.docx'
        assert config.category_id == 7
        assert config.wrap_width == 80
        assert config.title == 'Eats'

    def test_non_integer_setting_raises(self):
        with pytest.raises(ValueError):
            load_config({'FOOD_CATEGORY_ID': 'food'})

    @pytest.mark.parametrize("name", ['WRAP_WIDTH', 'ENTRIES_PER_PAGE'])
    @pytest.mark.parametrize("value", ['0', '-3'])
    def test_non_positive_size_raises(self, name, value):
        with pytest.raises(ValueError, match=name):
            load_config({name: value})

    def test_unknown_format_raises(self):
        with pytest.raises(ValueError, match="OUTPUT_FORMAT"):
            load_config({'OUTPUT_FORMAT': 'pdf'})

    def test_command_line_overrides(self):
        args = parse_args(['--format', 'docx', '--category-id', '9', '--events', 'e.json'])

        config = apply_args(load_config({}), args)

        assert config.output_format == 'docx'
        assert config.output_file == 'out/food-guide.docx'
        assert config.category_id == 9
        assert config.events_file == 'e.json'

    def test_explicit_output_kept_when_format_changes(self):
        args = parse_args(['--format', 'docx'])

        config = apply_args(load_config({'OUTPUT_FILE': 'guide.docx'}), args)

        assert config.output_file == 'guide.docx'


class TestGetRenderer:
    """Test cases for renderer selection."""

    def test_text_renderer(self):
        renderer = get_renderer(GuideConfig(wrap_width=60), FieldWidths())

        assert isinstance(renderer, TextRenderer)
        assert renderer.wrap_width == 60

    def test_docx_renderer_receives_field_widths(self):
        widths = FieldWidths(address=30)

        renderer = get_renderer(GuideConfig(output_format='docx'), widths)

        assert isinstance(renderer, DocxRenderer)
        assert renderer.field_widths is widths

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            get_renderer(GuideConfig(output_format='pdf'), FieldWidths())


class TestGenerateGuide:
    """Test cases for the full pipeline."""

    def test_text_guide_end_to_end(self, export_dir):
        config = config_for(export_dir)

        summary = generate_guide(config)

        assert summary.camps_loaded == 1
        assert summary.art_loaded == 0
        assert summary.events_read == 2
        assert summary.qualifying_events == 1
        assert summary.entries_written == 1
        assert summary.warnings == 0
        output = (export_dir / "out" / "food-guide.txt").read_text(encoding="utf-8")
        assert output == "8/28 8am - 9am\t3:00 & Esplanade\tCamp X\n\tPancakes: Fluffy.\n"

    def test_docx_guide_end_to_end(self, export_dir):
        output = export_dir / "out" / "food-guide.docx"
        config = config_for(export_dir, output_format='docx', output_file=str(output))

        summary = generate_guide(config)

        assert summary.entries_written == 1
        document = Document(str(output))
        bullets = [p for p in document.paragraphs if p.style.name == "List Bullet"]
        assert len(bullets) == 1
        assert bullets[0].text.startswith("Sunday 8/28 8am - 9am")

    @patch('food_guide.get_renderer')
    @patch('food_guide.EventProcessor')
    @patch('food_guide.BrcExportLoader')
    def test_stages_wired_in_order(
        self,
        mock_loader_class,
        mock_processor_class,
        mock_get_renderer,
        export_dir
    ):
        """Test that each stage receives the previous stage's output."""
        mock_loader = Mock()
        mock_loader.load_camps.return_value = []
        mock_loader.load_art.return_value = []
        mock_loader.iter_events.return_value = iter([])
        mock_loader_class.return_value = mock_loader

        mock_processor = Mock()
        mock_processor.process_events.return_value = []
        mock_processor.field_widths = FieldWidths()
        mock_processor.events_seen = 0
        mock_processor.qualifying_events = 0
        mock_processor.warnings = 0
        mock_processor_class.return_value = mock_processor

        mock_renderer = Mock()
        mock_renderer.render.return_value = 0
        mock_get_renderer.return_value = mock_renderer

        config = config_for(export_dir, category_id=11)
        summary = generate_guide(config)

        assert summary.entries_written == 0
        mock_processor_class.assert_called_once_with(category_id=11)
        mock_processor.process_events.assert_called_once()
        mock_get_renderer.assert_called_once_with(config, mock_processor.field_widths)
        mock_renderer.render.assert_called_once_with([], config.output_file)


class TestMain:
    """Test cases for the command-line entry point."""

    def test_success_returns_zero(self, mock_env, export_dir):
        assert main([]) == 0
        assert (export_dir / "out" / "food-guide.txt").exists()

    def test_malformed_timestamp_returns_one(self, mock_env, export_dir):
        write_json(export_dir / "events.json", [
            {
                "event_id": 3,
                "event_type": {"id": 5},
                "occurrence_set": [{"start_time": "not-a-date", "end_time": "not-a-date"}]
            }
        ])

        assert main([]) == 1
        assert not (export_dir / "out" / "food-guide.txt").exists()

    def test_missing_export_returns_one(self, mock_env, export_dir):
        (export_dir / "art.json").unlink()

        assert main([]) == 1

    def test_invalid_configuration_returns_one(self, mock_env):
        with patch.dict(os.environ, {'WRAP_WIDTH': 'wide'}):
            assert main([]) == 1

    def test_zero_entries_per_page_returns_one(self, mock_env, export_dir):
        with patch.dict(os.environ, {'ENTRIES_PER_PAGE': '0', 'OUTPUT_FORMAT': 'docx'}):
            assert main([]) == 1

        assert not (export_dir / "out").exists()

    def test_zero_wrap_width_leaves_output_untouched(self, mock_env, export_dir):
        output = export_dir / "out" / "food-guide.txt"
        output.parent.mkdir()
        output.write_text("previous guide\n", encoding="utf-8")

        with patch.dict(os.environ, {'WRAP_WIDTH': '0'}):
            assert main([]) == 1

        assert output.read_text(encoding="utf-8") == "previous guide\n"

    @patch('food_guide.setup_logging')
    def test_logging_output(self, mock_setup_logging, mock_env, caplog):
        """Test that progress messages are logged."""
        with caplog.at_level(logging.INFO):
            assert main([]) == 0

        log_messages = [record.message for record in caplog.records]
        assert any('Guide generation started' in msg for msg in log_messages)
        assert any('Parsing camps' in msg for msg in log_messages)
        assert any('Sorting' in msg for msg in log_messages)
        assert any('Complete! Wrote 1 entries' in msg for msg in log_messages)
        mock_setup_logging.assert_called_once_with('INFO')

    @patch('food_guide.setup_logging')
    def test_failure_is_logged(self, mock_setup_logging, mock_env, export_dir, caplog):
        (export_dir / "camps.json").write_text("{", encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger='food_guide'):
            assert main([]) == 1

        assert any('Guide generation failed' in r.message for r in caplog.records)


class TestSetupLogging:
    """Test cases for logging setup."""

    def test_setup_logging_default_level(self):
        """Test logging setup with default INFO level."""
        setup_logging()
        logger = logging.getLogger()
        assert logger.level == logging.INFO

    def test_setup_logging_debug_level(self):
        """Test logging setup with DEBUG level."""
        setup_logging('DEBUG')
        logger = logging.getLogger()
        assert logger.level == logging.DEBUG

    def test_json_formatter_output(self):
        """Test that records are rendered as JSON objects."""
        setup_logging('INFO')
        handler = logging.getLogger().handlers[0]
        record = logging.LogRecord(
            'processor.schedule', logging.WARNING, __file__, 1, 'No address found', None, None
        )

        data = json.loads(handler.format(record))

        assert data['level'] == 'WARNING'
        assert data['message'] == 'No address found'
        assert data['logger'] == 'processor.schedule'
