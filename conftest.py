import logging

import pytest

from core.logging import LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """Drop handlers installed by configure_logging so caplog sees records."""
    yield
    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
