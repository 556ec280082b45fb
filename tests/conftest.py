import logging
import os
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True)
def isolate_structured_logger(monkeypatch):
    """Keep test runs from creating logs/ in the working tree; records still reach caplog."""
    from signage_client.monitoring.structured_logger import structured_logger

    test_logger = logging.getLogger("signage.tests")
    test_logger.setLevel(logging.DEBUG)
    monkeypatch.setattr(structured_logger, "_logger", test_logger)
    yield


@pytest.fixture
def blacklist_path(tmp_path):
    return tmp_path / "library" / "blacklist.xml"
