from __future__ import annotations

import logging

from logging_config import ContextualFormatter, build_logging_config


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.pipeline",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg="Device reading not localized",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extras_in_order() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    line = formatter.format(_record(outcome="out_of_bounds", device_id="DEV001", ignored="x"))

    assert line == "Device reading not localized | device_id=DEV001 outcome=out_of_bounds"


def test_formatter_skips_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(level_id=None)) == "Device reading not localized"


def test_logging_config_uses_requested_level() -> None:
    config = build_logging_config("DEBUG")

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["default"]["formatter"] == "contextual"
