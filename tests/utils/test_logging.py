"""
Tests for logging setup.
"""

import io
import logging

import pytest

from shipmail.utils import logging as shipmail_logging


@pytest.fixture
def fresh_root(monkeypatch):
    """Unconfigured logging state, restored afterwards."""
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.setattr(shipmail_logging, "_logging_configured", False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging in local mode."""

    def test_writes_to_given_stream(self, fresh_root):
        stream = io.StringIO()

        shipmail_logging.setup_logging(stream=stream)
        logging.getLogger("shipmail.test").info(
            "Extracted", extra={"json_fields": {"results": 2}}
        )

        output = stream.getvalue()
        assert "Extracted" in output
        assert '"results": 2' in output
        assert fresh_root.level == logging.INFO

    def test_debug_level(self, fresh_root):
        shipmail_logging.setup_logging(debug=True, stream=io.StringIO())

        assert fresh_root.level == logging.DEBUG

    def test_configures_once(self, fresh_root):
        shipmail_logging.setup_logging(stream=io.StringIO())
        count = len(fresh_root.handlers)

        shipmail_logging.setup_logging(stream=io.StringIO())

        assert len(fresh_root.handlers) == count
