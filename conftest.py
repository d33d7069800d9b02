import pytest

from slotvm import logging as slog
from slotvm.config import load_config


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """Drop cached env config and bound log fields between tests."""
    load_config.cache_clear()
    slog.clear_context()
    yield
    load_config.cache_clear()
    slog.clear_context()
