"""Tests for ElasticLogger."""

import time
from datetime import datetime
from typing import Any

import pytest

from elastic_logger.config import ConfigurationError, ElasticLoggerOptions
from elastic_logger.index import format_date_yyyymmdd
from elastic_logger.logger import ElasticLogger, LogAdapter
from elastic_logger.records import Bindings, QueuedEntry
from elastic_logger.sinks.base import Sink, WriteResult
from elastic_logger.worker import SchedulerState


class MockSink(Sink):
    """Mock sink for testing."""

    def __init__(self):
        self.batches: list[list[QueuedEntry]] = []
        self.setup_called = False
        self.close_called = False

    def setup(self) -> None:
        self.setup_called = True

    def write_batch(self, entries: list[QueuedEntry]) -> WriteResult:
        self.batches.append(entries)
        return WriteResult.ok(len(entries))

    def close(self) -> None:
        self.close_called = True

    @property
    def total_records(self) -> int:
        return sum(len(batch) for batch in self.batches)

    @property
    def all_records(self) -> list[QueuedEntry]:
        return [r for batch in self.batches for r in batch]


class FakeClient:
    """Records bulk calls instead of talking to Elasticsearch."""

    def __init__(self):
        self.bulk_calls: list[dict[str, Any]] = []

    def options(self, **kwargs: Any) -> "FakeClient":
        return self

    def bulk(self, **kwargs: Any) -> dict[str, Any]:
        self.bulk_calls.append(kwargs)
        return {"errors": False, "items": []}

    def close(self) -> None:
        pass


BINDINGS = Bindings(node_id="node-1", namespace="prod", service="posts", version="2", module="posts")


def make_logger(sink: Sink | None = None, **kwargs: Any) -> ElasticLogger:
    kwargs.setdefault("client_options", {"hosts": ["http://localhost:9200"]})
    kwargs.setdefault("interval", 0)
    kwargs.setdefault("source", "test-source")
    kwargs.setdefault("hostname", "test-host")
    kwargs.setdefault("environment", None)
    return ElasticLogger(sink=sink or MockSink(), **kwargs)


class TestElasticLogger:
    """Tests for ElasticLogger basics."""

    def test_implements_log_adapter(self):
        """Test that the logger satisfies the capability interface."""
        assert isinstance(make_logger(), LogAdapter)

    def test_init_sets_up_sink_and_keeps_factory(self):
        """Test that init runs sink setup and stores the factory."""
        sink = MockSink()
        logger = make_logger(sink)
        factory = object()

        logger.init(factory)

        assert sink.setup_called
        assert logger.factory is factory
        logger.stop()

    def test_handler_queues_formatted_entry(self):
        """Test that a handler call produces a formatted queue entry."""
        sink = MockSink()
        logger = make_logger(sink, interval=60_000)
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            assert log is not None
            log("info", ["  User created ", {"id": 5}, 42])

            assert logger.queue_size == 1
            logger.flush()

            entry = sink.all_records[0]
            assert entry.message == 'User created {"id": 5} 42'
            assert entry.level == "info"
            assert entry.bindings == BINDINGS
            assert entry.source == "test-source"
            assert entry.hostname == "test-host"
        finally:
            logger.stop()

    def test_environment_becomes_tag(self):
        """Test that the environment is shipped as a tag."""
        sink = MockSink()
        logger = make_logger(sink, environment="production")
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            log("info", ["x"])
            assert sink.all_records[0].tags == ("production",)
        finally:
            logger.stop()

    def test_custom_object_printer(self):
        """Test that the configured object printer is used."""
        sink = MockSink()
        logger = make_logger(sink, object_printer=lambda obj: f"<{len(obj)} keys>")
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            log("info", ["Payload", {"a": 1, "b": 2}])
            assert sink.all_records[0].message == "Payload <2 keys>"
        finally:
            logger.stop()

    def test_options_object_with_overrides(self):
        """Test that keyword arguments override a given options object."""
        options = ElasticLoggerOptions(client_options={"hosts": ["http://es:9200"]}, index="a")
        logger = ElasticLogger(options, sink=MockSink(), index="b")

        assert logger.options.index == "b"
        assert logger.options.client_options == {"hosts": ["http://es:9200"]}

    def test_invalid_options_raise(self):
        """Test that invalid options are rejected at construction."""
        with pytest.raises(ConfigurationError):
            make_logger(interval=-1)


class TestLevelFiltering:
    """Tests for level thresholds."""

    def test_threshold_warn(self):
        """Test that only warn and more severe levels are queued."""
        sink = MockSink()
        logger = make_logger(sink, level="warn")
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            for level in ("trace", "debug", "info", "warn", "error", "fatal"):
                log(level, [f"{level} message"])

            levels = [r.level for r in sink.all_records]
            assert levels == ["warn", "error", "fatal"]
        finally:
            logger.stop()

    def test_unknown_level_dropped(self):
        """Test that unknown level names are dropped."""
        sink = MockSink()
        logger = make_logger(sink, level="trace")
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            log("verbose", ["x"])
            assert sink.total_records == 0
        finally:
            logger.stop()

    def test_level_string(self):
        """Test that a level name applies to every module."""
        logger = make_logger(level="debug")
        assert logger.get_log_level("broker") == "debug"
        assert logger.get_log_level(None) == "debug"

    def test_level_mapping(self):
        """Test exact, pattern and fallback lookups."""
        logger = make_logger(
            level={"broker": "warn", "svc-*": "debug", "registry": None, "*": "info"}
        )

        assert logger.get_log_level("broker") == "warn"
        assert logger.get_log_level("svc-posts") == "debug"
        assert logger.get_log_level("registry") is None
        assert logger.get_log_level("transit") == "info"

    def test_level_mapping_without_fallback(self):
        """Test that unmatched modules are disabled without a fallback."""
        logger = make_logger(level={"broker": "warn"})

        assert logger.get_log_level("transit") is None
        assert logger.get_log_handler(Bindings(module="transit")) is None

    def test_disabled_level_returns_no_handler(self):
        """Test that a falsy level disables logging."""
        logger = make_logger(level=None)
        assert logger.get_log_handler(BINDINGS) is None


class TestModuleExclusion:
    """Tests for excluded modules."""

    def test_excluded_module_gets_no_handler(self):
        """Test that excluded modules never get a handler."""
        sink = MockSink()
        logger = make_logger(sink, exclude_modules=["broker", "registry"])
        logger.init()

        try:
            assert logger.get_log_handler(Bindings(module="broker")) is None
            assert logger.get_log_handler(Bindings(module="registry")) is None
            assert logger.get_log_handler(Bindings(module="posts")) is not None
            assert sink.total_records == 0
        finally:
            logger.stop()

    def test_no_bindings_gets_no_handler(self):
        """Test that missing bindings produce no handler."""
        assert make_logger().get_log_handler(None) is None


class TestFlushScheduling:
    """Tests for batching and shutdown."""

    def test_zero_interval_flushes_every_call(self):
        """Test that disabling batching ships after every log call."""
        sink = MockSink()
        logger = make_logger(sink, interval=0)
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            log("info", ["one"])
            log("info", ["two"])

            assert [len(b) for b in sink.batches] == [1, 1]
            assert logger.state is SchedulerState.IDLE
        finally:
            logger.stop()

    def test_interval_batches_entries(self):
        """Test that entries are shipped together on the next tick."""
        sink = MockSink()
        logger = make_logger(sink, interval=100)
        logger.init()

        try:
            assert logger.state is SchedulerState.ARMED
            log = logger.get_log_handler(BINDINGS)
            for i in range(5):
                log("info", [f"message {i}"])

            assert sink.total_records == 0
            time.sleep(0.3)
            assert sink.total_records == 5
        finally:
            logger.stop()

    def test_stop_flushes_exactly_once(self):
        """Test that stop drains pending entries in one final flush."""
        sink = MockSink()
        logger = make_logger(sink, interval=60_000)
        logger.init()

        log = logger.get_log_handler(BINDINGS)
        for i in range(4):
            log("info", [f"message {i}"])

        logger.stop()

        assert len(sink.batches) == 1
        assert sink.total_records == 4
        assert sink.close_called
        assert logger.state is SchedulerState.STOPPED
        assert not logger.worker_alive

    def test_entries_after_stop_are_ignored(self):
        """Test that log calls after stop are not shipped."""
        sink = MockSink()
        logger = make_logger(sink, interval=50)
        logger.init()
        log = logger.get_log_handler(BINDINGS)

        logger.stop()
        log("info", ["late"])
        time.sleep(0.15)

        assert sink.total_records == 0
        assert logger.queue_size == 0

    def test_stop_is_idempotent(self):
        """Test that calling stop twice is safe."""
        sink = MockSink()
        logger = make_logger(sink)
        logger.init()
        logger.stop()
        logger.stop()

    def test_stop_without_init_flushes_queued_entries(self):
        """Test that entries queued before init are shipped by stop."""
        sink = MockSink()
        logger = make_logger(sink, interval=5000)

        log = logger.get_log_handler(BINDINGS)
        log("info", ["first"])
        log("info", ["second"])
        logger.stop()

        assert len(sink.batches) == 1
        assert [r.message for r in sink.all_records] == ["first", "second"]
        assert sink.close_called

    def test_init_after_stop_is_noop(self):
        """Test that a stopped logger cannot be re-armed."""
        sink = MockSink()
        logger = make_logger(sink, interval=50)
        logger.stop()
        logger.init()

        assert not sink.setup_called
        assert logger.state is SchedulerState.STOPPED
        assert not logger.worker_alive


class TestEndToEnd:
    """End-to-end tests through the Elasticsearch sink with a fake client."""

    def test_three_entries_one_bulk_request(self):
        """Test that three log calls and a manual flush make one bulk request."""
        client = FakeClient()
        logger = ElasticLogger(
            client=client,
            interval=60_000,
            pipeline="enrich",
            source="orders",
            hostname="web-1",
            environment="staging",
        )
        logger.init()

        try:
            log = logger.get_log_handler(BINDINGS)
            log("info", ["first"])
            log("warn", ["second", {"retry": True}])
            log("error", ["third"])

            assert logger.flush() == 3
        finally:
            logger.stop()

        assert len(client.bulk_calls) == 1
        call = client.bulk_calls[0]
        assert call["refresh"] is True

        operations = call["operations"]
        assert len(operations) == 6

        today = format_date_yyyymmdd(datetime.now().astimezone())
        actions = operations[0::2]
        documents = operations[1::2]

        for action in actions:
            assert action["index"]["_index"] == f"moleculer-{today}"
            assert action["index"]["pipeline"] == "enrich"

        assert [d["message"] for d in documents] == ["first", 'second {"retry": true}', "third"]
        assert [d["level"] for d in documents] == ["info", "warn", "error"]
        for doc in documents:
            assert doc["nodeID"] == "node-1"
            assert doc["namespace"] == "prod"
            assert doc["service"] == "posts"
            assert doc["version"] == "2"
            assert doc["module"] == "posts"
            assert doc["source"] == "orders"
            assert doc["hostname"] == "web-1"
            assert doc["tags"] == ["staging"]
            assert isinstance(doc["timestamp"], int)

    def test_empty_flush_sends_no_request(self):
        """Test that flushing with nothing queued makes no request."""
        client = FakeClient()
        logger = ElasticLogger(client=client, interval=60_000)
        logger.init()

        try:
            assert logger.flush() == 0
        finally:
            logger.stop()

        assert client.bulk_calls == []
