"""Pytest configuration for local package import resolution."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    # Ensure tests can import `catalog_sync` and the runner without installation.
    sys.path.insert(0, project_root_str)


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo `configure_logging` so later tests see default propagation."""
    yield
    logger = logging.getLogger("catalog_sync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
