"""Tests for the rebuild-on-change watcher."""

import pytest
import os
from unittest.mock import Mock

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from quire_pkg.errors import ContentError
from quire_pkg.settings import SiteConfig
from quire_pkg.watch import RebuildHandler, watch


@pytest.fixture
def config(temp_dir):
    return SiteConfig(source_dir=temp_dir, output_dir=os.path.join(temp_dir, 'output'))


def make_handler(config, builder=None, rebuild_delay=0):
    return RebuildHandler(config, collect_errors=True, rebuild_delay=rebuild_delay,
                          builder=builder or Mock(return_value='built'))


class TestRebuildHandler:
    """Test cases for deciding when to rebuild."""

    @pytest.mark.parametrize('event_class', [FileCreatedEvent, FileModifiedEvent, FileDeletedEvent])
    def test_source_changes_trigger_rebuild(self, config, temp_dir, event_class):
        handler = make_handler(config)
        handler.on_any_event(event_class(os.path.join(temp_dir, 'pages', 'index.html')))
        handler.builder.assert_called_once_with(config, collect_errors=True)

    def test_move_into_source_dir(self, config, temp_dir):
        handler = make_handler(config)
        handler.on_any_event(FileMovedEvent(os.path.join(temp_dir, 'a.tmp'),
                                            os.path.join(temp_dir, 'pages', 'a.html')))
        assert handler.builder.call_count == 1

    def test_directory_events_ignored(self, config, temp_dir):
        handler = make_handler(config)
        handler.on_any_event(DirModifiedEvent(os.path.join(temp_dir, 'pages')))
        handler.builder.assert_not_called()

    def test_output_dir_ignored(self, config, temp_dir):
        handler = make_handler(config)
        handler.on_any_event(FileModifiedEvent(os.path.join(temp_dir, 'output', 'index.html')))
        handler.builder.assert_not_called()

    def test_sibling_with_output_prefix_is_not_ignored(self, config, temp_dir):
        handler = make_handler(config)
        handler.on_any_event(FileModifiedEvent(os.path.join(temp_dir, 'output-notes.md')))
        assert handler.builder.call_count == 1

    def test_events_within_delay_are_coalesced(self, config, temp_dir):
        handler = make_handler(config, rebuild_delay=60)
        path = os.path.join(temp_dir, 'pages', 'index.html')
        handler.on_any_event(FileModifiedEvent(path))
        handler.on_any_event(FileModifiedEvent(path))
        assert handler.builder.call_count == 1


class TestRebuildIsolation:
    """Test cases for keeping the watcher alive across failed builds."""

    def test_failed_build_is_logged(self, config, caplog):
        handler = make_handler(config, builder=Mock(side_effect=ContentError('posts/a.md', "Broken")))
        assert handler.rebuild() is None
        assert "Build failed: Broken: posts/a.md" in caplog.text

    def test_unexpected_error_is_logged(self, config, caplog):
        handler = make_handler(config, builder=Mock(side_effect=RuntimeError("boom")))
        assert handler.rebuild() is None
        assert "Unexpected error during build" in caplog.text

    def test_next_build_runs_after_failure(self, config, temp_dir):
        builder = Mock(side_effect=[ContentError('posts/a.md', "Broken"), 'built'])
        handler = make_handler(config, builder=builder)
        path = os.path.join(temp_dir, 'posts', 'a.md')

        handler.on_any_event(FileModifiedEvent(path))
        handler.on_any_event(FileModifiedEvent(path))

        assert builder.call_count == 2

    def test_real_build_after_fix(self, site_config, site_dir, output_dir, make_content):
        handler = RebuildHandler(site_config, rebuild_delay=0)
        post = os.path.join(site_dir, 'posts', 'third.md')
        make_content(post, {'route': 'blogpost', 'title': 'Third', 'excerpt': 'x'}, 'text')
        assert handler.rebuild() is None
        assert not os.path.exists(output_dir)

        make_content(post, {'route': 'blogpost', 'title': 'Third', 'excerpt': 'x', 'date': '2023/2/1'}, 'text')
        result = handler.rebuild()
        assert result is not None
        assert os.path.isfile(os.path.join(output_dir, 'blog', '2023', '02', 'third', 'index.html'))


class TestWatch:
    """Test cases for starting the observer."""

    def test_schedules_recursive_handler(self, config):
        observer = Mock()
        assert watch(config, observer=observer) is observer
        handler, path = observer.schedule.call_args[0]
        assert isinstance(handler, RebuildHandler)
        assert path == config.source_dir
        assert observer.schedule.call_args[1] == {'recursive': True}
        observer.start.assert_called_once_with()
