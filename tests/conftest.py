"""Shared pytest fixtures."""

import logging

import pytest

from src.utils import logging_config


@pytest.fixture
def restore_logging():
    """Undo setup_logging() side effects on the root logger."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_pil_level = logging.getLogger("PIL").level

    yield root

    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
    logging.getLogger("PIL").setLevel(saved_pil_level)
    logging.captureWarnings(False)
    logging_config.pop_context()
    logging_config._configured = False
