import json
import logging

import pytest

from nativegen import logging as nativegen_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = nativegen_logging.get_logger()
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_get_logger_namespace():
    assert nativegen_logging.get_logger().name == "nativegen"
    assert nativegen_logging.get_logger("nativegen.resolver").name == "nativegen.resolver"
    assert nativegen_logging.get_logger("resolver").name == "nativegen.resolver"


def test_console_only_by_default():
    state = nativegen_logging.configure_logging({"logging": {"dir": ""}}, force_reconfigure=True)
    assert state.log_dir is None
    assert state.text_log_path is None
    assert state.console_level == logging.INFO
    assert nativegen_logging.is_configured()
    assert nativegen_logging.get_logging_state() is state


def test_file_and_jsonl_logs(tmp_path):
    state = nativegen_logging.configure_logging(
        {"logging": {"file_level": "DEBUG"}},
        console_level_override="ERROR",
        log_dir_override=str(tmp_path),
        enable_jsonl_override=True,
        force_reconfigure=True,
    )
    assert state.console_level == logging.ERROR

    logger = nativegen_logging.get_logger("generator")
    logger.debug("Generated %s", "GL15")
    for handler in nativegen_logging.get_logger().handlers:
        handler.flush()

    with open(state.text_log_path, encoding="utf-8") as f:
        assert "Generated GL15" in f.read()
    with open(state.jsonl_log_path, encoding="utf-8") as f:
        record = json.loads(f.readline())
    assert record["message"] == "Generated GL15"
    assert record["logger"] == "nativegen.generator"
    assert record["level"] == "DEBUG"


def test_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level: LOUD"):
        nativegen_logging.configure_logging({}, console_level_override="loud", force_reconfigure=True)


def test_generation_target(tmp_path):
    state = nativegen_logging.configure_logging(
        {},
        console_level_override="ERROR",
        log_dir_override=str(tmp_path),
        enable_jsonl_override=True,
        force_reconfigure=True,
    )
    logger = nativegen_logging.get_logger("emitter")

    with nativegen_logging.generation_target("GL15"):
        with nativegen_logging.generation_target("glBufferData"):
            assert nativegen_logging.current_target() == "GL15.glBufferData"
            logger.debug("Emitting variants")
        logger.debug("Emitting constants")
    assert nativegen_logging.current_target() is None

    for handler in nativegen_logging.get_logger().handlers:
        handler.flush()

    with open(state.text_log_path, encoding="utf-8") as f:
        text = f.read()
    assert "| [GL15.glBufferData] Emitting variants" in text
    assert "| [GL15] Emitting constants" in text

    with open(state.jsonl_log_path, encoding="utf-8") as f:
        records = [json.loads(line) for line in f]
    assert [record["target"] for record in records] == ["GL15.glBufferData", "GL15"]
