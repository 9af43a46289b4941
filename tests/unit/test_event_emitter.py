"""Tests for EventEmitter and logging helpers."""
import logging

import pytest

from archiveflow import setup_logging
from archiveflow.core.api.events import EventEmitter
from archiveflow.core.logging import get_logger, mask_secret


class TestEventEmitter:
    """Test suite for EventEmitter."""

    def test_emit_calls_handlers_in_order(self):
        emitter = EventEmitter()
        calls = []

        emitter.on('x', lambda v: calls.append(('a', v)))
        emitter.on('x', lambda v: calls.append(('b', v)))
        emitter.emit('x', 1)

        assert calls == [('a', 1), ('b', 1)]

    def test_emit_without_handlers(self):
        EventEmitter().emit('nothing')

    def test_on_returns_self(self):
        emitter = EventEmitter()

        assert emitter.on('x', print) is emitter

    def test_off_single(self):
        emitter = EventEmitter()
        calls = []
        handler = calls.append

        emitter.on('x', handler).on('x', lambda v: None)
        emitter.off('x', handler)
        emitter.emit('x', 1)

        assert calls == []
        assert emitter.listener_count('x') == 1

    def test_off_all(self):
        emitter = EventEmitter()
        emitter.on('x', print)
        emitter.off('x')

        assert emitter.listener_count('x') == 0

    def test_handler_may_unregister_itself(self):
        emitter = EventEmitter()
        calls = []

        def once(value):
            calls.append(value)
            emitter.off('x', once)

        emitter.on('x', once)
        emitter.emit('x', 1)
        emitter.emit('x', 2)

        assert calls == [1]

    def test_handler_errors_propagate(self):
        emitter = EventEmitter()

        def broken():
            raise RuntimeError("boom")

        emitter.on('x', broken)

        with pytest.raises(RuntimeError):
            emitter.emit('x')


class TestLogging:
    """Test suite for logging helpers."""

    def test_get_logger_propagates(self):
        logger = get_logger('archiveflow.test')

        assert logger.name == 'archiveflow.test'
        assert logger.propagate

    def test_setup_logging_level(self):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('archiveflow').level == logging.DEBUG
        setup_logging(logging.WARNING)

    def test_mask_secret(self):
        assert mask_secret("ABCDEFGH") == "ABCD****"
        assert mask_secret("ABC") == "***"
        assert mask_secret("") == ""
