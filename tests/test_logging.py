import structlog
from structlog.testing import capture_logs

from taskrelay.utils.logging import logging_context, setup_logging


def test_logging_context_binds_missing_keys():
    with logging_context(task_id="task-1"):
        assert structlog.contextvars.get_contextvars()["task_id"] == "task-1"
    assert "task_id" not in structlog.contextvars.get_contextvars()


def test_logging_context_keeps_existing_binding():
    with structlog.contextvars.bound_contextvars(task_id="outer"):
        with logging_context(task_id="inner", step="poll"):
            context = structlog.contextvars.get_contextvars()
            assert context["task_id"] == "outer"
            assert context["step"] == "poll"


def test_setup_logging_configures_structlog():
    try:
        setup_logging(level="debug", json_logs=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        with capture_logs() as logs:
            structlog.get_logger("taskrelay").info("configured", ok=True)
        assert logs == [{"event": "configured", "ok": True, "log_level": "info"}]
    finally:
        structlog.reset_defaults()
