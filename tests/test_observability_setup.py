import json
import logging

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from pythonjsonlogger import jsonlogger

from demo_service.utils.logging import setup_logging
from shared.tracing import setup_tracing


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_json_logging(restore_root_logger, capsys):
    setup_logging("DEBUG")

    (handler,) = restore_root_logger.handlers
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.DEBUG

    logging.getLogger("demo").info("Application configured", extra={"metrics_path": "/metrics"})
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["message"] == "Application configured"
    assert record["name"] == "demo"
    assert record["levelname"] == "INFO"
    assert record["metrics_path"] == "/metrics"


def test_console_logging(restore_root_logger):
    setup_logging("warning", log_format="console")

    (handler,) = restore_root_logger.handlers
    assert not isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_unknown_level_falls_back_to_info(restore_root_logger):
    setup_logging("chatty")
    assert restore_root_logger.level == logging.INFO


def test_tracing_provider_carries_service_name():
    exporter = InMemorySpanExporter()
    provider = setup_tracing("demo-service", "http://localhost:4318/v1/traces", exporter=exporter)
    try:
        with provider.get_tracer(__name__).start_as_current_span("work"):
            pass
        provider.force_flush()

        (span,) = exporter.get_finished_spans()
        assert span.name == "work"
        assert span.resource.attributes["service.name"] == "demo-service"
    finally:
        provider.shutdown()
