from __future__ import annotations

import logging

from stockdrop.core.logging import LOG_FORMAT, configure_logging


def test_configure_logging_is_idempotent():
    first = configure_logging("debug")
    second = configure_logging("warning")

    assert first is second
    assert len(second.handlers) == 1
    assert second.handlers[0].formatter._fmt == LOG_FORMAT
    assert second.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
