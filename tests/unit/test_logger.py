"""
Unit tests for the logging helpers.
"""

import json
import logging

from principia.utils.logger import (
    JSONFormatter,
    get_performance_logger,
    get_trading_logger,
    setup_logging,
)


def test_json_formatter_includes_trading_extras():
    record = logging.LogRecord(
        name="principia.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Decision: BUY SOL-USDC",
        args=(),
        exc_info=None,
    )
    record.pair = "SOL-USDC"
    record.action = "buy"
    record.force = 0.45

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["message"] == "Decision: BUY SOL-USDC"
    assert entry["pair"] == "SOL-USDC"
    assert entry["action"] == "buy"
    assert entry["force"] == 0.45


def test_trade_event_levels(caplog):
    trading_logger = get_trading_logger("principia.test.trades")

    with caplog.at_level(logging.INFO, logger="principia.test.trades"):
        trading_logger.trade_event("SOL-USDC", "buy", True, True)
        trading_logger.trade_event("SOL-USDC", "sell", False, False, reason="Real trade execution not implemented")

    executed, refused = caplog.records
    assert executed.levelno == logging.INFO
    assert "DRY RUN" in executed.getMessage()
    assert refused.levelno == logging.WARNING
    assert "not implemented" in refused.getMessage()
    assert refused.side == "sell"


def test_performance_timer_logs_duration(caplog):
    performance = get_performance_logger("principia.test.perf")

    with caplog.at_level(logging.DEBUG, logger="principia.test.perf"):
        with performance.timer("cycle", pair="SOL-USDC"):
            pass

    assert caplog.records[0].pair == "SOL-USDC"
    assert caplog.records[0].execution_time >= 0


def test_setup_logging_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "bot.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        setup_logging("DEBUG", log_file=str(log_file), json_format=True)
        logging.getLogger("principia.test.file").info("hello")
        for handler in root.handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "hello"
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)


def test_risk_alert_severity_sets_level(caplog):
    trading_logger = get_trading_logger("principia.test.risk")

    with caplog.at_level(logging.INFO, logger="principia.test.risk"):
        trading_logger.risk_alert("execution_failed", "high", "quote timed out", pair="SOL-USDC")
        trading_logger.risk_alert("position_limit", "medium", "position at limit", pair="SOL-USDC")

    failed, limit = caplog.records
    assert failed.levelno == logging.ERROR
    assert "Risk Alert [execution_failed]" in failed.getMessage()
    assert failed.alert_type == "execution_failed"
    assert failed.pair == "SOL-USDC"
    assert limit.levelno == logging.WARNING
    assert limit.severity == "medium"
