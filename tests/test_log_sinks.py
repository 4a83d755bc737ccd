import logging

import pytest

from gengine.console import Console
from gengine.cvar import CVarSystem
from gengine.log_sinks import ConsoleHandler, init_logging, make_universal_logger


@pytest.fixture
def console():
    return Console(CVarSystem())


@pytest.fixture
def default_logger(console, tmp_path):
    logger = init_logging(console, tmp_path)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_console_handler_writes_message(console):
    logger = logging.getLogger("test_console_handler")
    logger.propagate = False
    handler = ConsoleHandler(console)
    logger.addHandler(handler)
    try:
        logger.warning("something %d", 5)
    finally:
        logger.removeHandler(handler)
    assert console.entries[-1].text == "something 5"


def test_console_handler_keeps_percent_signs(console):
    handler = ConsoleHandler(console)
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "100%s done", None, None)
    handler.emit(record)
    assert console.entries[-1].text == "100%s done"


def test_default_logger_writes_everywhere(console, default_logger, tmp_path):
    default_logger.info("hello sinks")
    for handler in default_logger.handlers:
        handler.flush()
    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert files[0].name.startswith("Log ") and files[0].suffix == ".txt"
    assert "hello sinks" in files[0].read_text(encoding="utf-8")
    assert "hello sinks" in console.entries[-1].text
    assert "[default]" in console.entries[-1].text


def test_default_logger_level_is_debug(default_logger):
    assert default_logger.level == logging.DEBUG
    assert default_logger.name == "default"


def test_commands_registered(console, default_logger):
    assert console.get_command_description("PrintLogLevels") == "- Prints all logger warning levels."
    assert console.get_command_description("SetFileSinkLevel") == "- Sets the warning level of the file sink."


def test_print_log_levels(console, default_logger):
    console.execute_command("PrintLogLevels")
    text = console.entries[-1].text
    assert text.splitlines()[0] == "TRACE: 0"
    assert text.splitlines()[-1] == "OFF: 6"
    assert len(text.splitlines()) == 7


def test_console_sink_level_filters(console, default_logger):
    console.execute_command("SetConsoleSinkLevel 4")
    count = len(console.entries)
    default_logger.info("quiet message")
    assert len(console.entries) == count
    default_logger.error("loud message")
    assert "loud message" in console.entries[-1].text


def test_level_command_usage(console, default_logger):
    console.execute_command("SetStdoutSinkLevel banana")
    assert console.entries[-1].text == "Usage: SetStdoutSinkLevel <int>"


def test_make_universal_logger_shares_sinks(default_logger):
    other = make_universal_logger("other")
    try:
        assert set(other.handlers) == set(default_logger.handlers)
        assert other.propagate is False
    finally:
        for handler in list(other.handlers):
            other.removeHandler(handler)