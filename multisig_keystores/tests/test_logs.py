import io
import logging

from multisig_keystores.logs import Logs


def test_get_logger_is_child_of_root() -> None:
    logs = Logs("test_logs_child")
    logger = logs.get_logger("policy")
    assert logger.name == "test_logs_child.policy"
    assert logger.parent is logs.root


def test_set_level() -> None:
    logs = Logs("test_logs_level")
    logs.set_level("debug")
    assert logs.is_debug_level()
    logs.set_level(logging.WARNING)
    assert logs.level() == logging.WARNING
    assert not logs.is_debug_level()


def test_stream_output() -> None:
    logs = Logs("test_logs_stream")
    logs.set_level("info")
    first_stream = io.StringIO()
    logs.set_stream_output(first_stream)
    logs.get_logger("config").info("first message")
    assert "first message" in first_stream.getvalue()

    second_stream = io.StringIO()
    logs.set_stream_output(second_stream)
    logs.get_logger("config").info("second message")
    assert "second message" in second_stream.getvalue()
    assert "second message" not in first_stream.getvalue()

    assert logs.stream_handler is not None
    logs.remove_handler(logs.stream_handler)
    logs.get_logger("config").info("third message")
    assert "third message" not in second_stream.getvalue()


def test_file_output(tmp_path) -> None:
    logs = Logs("test_logs_file")
    logs.set_level("info")
    path = tmp_path / "log.txt"
    logs.add_file_output(str(path))
    logs.get_logger("ledger").error("Policy registrations did not match")
    for handler in logs.root.handlers:
        handler.flush()
    assert "Policy registrations did not match" in path.read_text()

    for handler in list(logs.root.handlers):
        logs.remove_handler(handler)
        handler.close()
