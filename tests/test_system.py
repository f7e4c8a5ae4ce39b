import csv
import io
import logging
import sys
from unittest.mock import patch
from cmypy import __version__
from cmypy.kernel.system.config import APP_CONFIG
from cmypy.kernel.system.logging import get_logger, setup_logging
from cmypy.kernel.system.performance import get_perf_log_path, time_function


def test_version_is_read():
    assert isinstance(__version__, str)
    assert __version__


def test_setup_logging_is_idempotent():
    logger = setup_logging(logging.INFO)
    count = len(logger.handlers)
    again = setup_logging(logging.DEBUG)
    assert again is logger
    assert len(again.handlers) == count
    assert again.level == logging.DEBUG


def test_setup_logging_writes_to_given_stream():
    root = logging.getLogger("cmypy")
    saved = root.handlers[:]
    root.handlers.clear()
    stream = io.StringIO()
    try:
        setup_logging(logging.INFO, stream=stream)
        get_logger("session").info("Session image: print (40x30)")
        get_logger("session").debug("hidden")
    finally:
        root.handlers[:] = saved

    output = stream.getvalue()
    assert "INFO     cmypy.session: Session image: print (40x30)" in output
    assert "hidden" not in output


def test_setup_logging_defaults_to_stderr():
    root = logging.getLogger("cmypy")
    saved = root.handlers[:]
    root.handlers.clear()
    try:
        logger = setup_logging(logging.WARNING)
        assert logger.handlers[0].stream is sys.stderr
    finally:
        root.handlers[:] = saved


def test_get_logger_namespace():
    assert get_logger().name == "cmypy"
    assert get_logger("render").name == "cmypy.render"


def test_time_function_passes_result_through(tmp_path):
    @time_function
    def add(a, b):
        return a + b

    with patch.object(APP_CONFIG, "cache_dir", str(tmp_path)), patch.object(
        APP_CONFIG, "perf_logging", False
    ):
        assert add(2, 3) == 5
        assert not (tmp_path / "perf_stats.csv").exists()


def test_time_function_writes_csv_when_enabled(tmp_path):
    class Shaped:
        shape = (4, 4, 4)

    @time_function
    def identity(x):
        return x

    with patch.object(APP_CONFIG, "cache_dir", str(tmp_path)), patch.object(
        APP_CONFIG, "perf_logging", True
    ):
        identity(Shaped())
        with open(get_perf_log_path(), newline="") as f:
            rows = list(csv.reader(f))

    assert rows[0] == ["timestamp", "function", "duration_ms", "image_shape"]
    assert rows[1][1] == "identity"
    assert rows[1][3] == "(4, 4, 4)"
