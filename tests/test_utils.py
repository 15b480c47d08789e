"""
Test suite for logging helpers.
"""
import logging

from x402_pinion.utils import logger, mask_secret, setup_logger


def test_setup_logger_does_not_duplicate_handlers():
    before = list(logger.handlers)
    try:
        setup_logger("debug")
        setup_logger("warning")
        added = [h for h in logger.handlers if h not in before]
        assert len(added) <= 1
        assert logger.level == logging.WARNING
    finally:
        for handler in [h for h in logger.handlers if h not in before]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_mask_secret():
    assert mask_secret("pk_live_1234567890") == "pk_live_..."
    assert mask_secret(None) == ""
    assert mask_secret("abcdef", visible=2) == "ab..."
