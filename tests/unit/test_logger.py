import logging

import pytest

from extractdesk.logging.logger import Log


class TestLog:
    def test_context_appended(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="extractdesk"):
            Log.info("Extraction complete", document_id="d-1", fields=3)
        assert "Extraction complete [document_id=d-1 fields=3]" in caplog.text

    def test_plain_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="extractdesk"):
            Log.warning("Region analysis failed")
        assert caplog.records[-1].getMessage() == "Region analysis failed"

    def test_below_level_not_emitted(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="extractdesk"):
            Log.debug("prompt text")
        assert "prompt text" not in caplog.text

    def test_configure_is_idempotent(self) -> None:
        Log.configure("info")
        Log.configure("debug")
        logger = logging.getLogger("extractdesk")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        Log.configure("info")
