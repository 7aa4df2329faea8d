"""Tests for logging setup and secret redaction."""

import structlog

from sessiongate.logging import REDACTED, redact_sensitive, setup_logging


class TestRedactSensitive:
    """Tests for the redaction processor."""

    def test_sensitive_keys_masked(self):
        """Test that tokens, cookies, passwords and keys never reach the renderer."""
        event = redact_sensitive(
            None,
            "info",
            {
                "event": "login_succeeded",
                "token": "abc.def.ghi",
                "cookie": "session=abc",
                "password": "wonderland",
                "session_secret_key": "x" * 32,
                "subject_id": "alice",
            },
        )
        assert event["token"] == event["cookie"] == event["password"] == event["session_secret_key"] == REDACTED
        assert event["subject_id"] == "alice"
        assert event["event"] == "login_succeeded"

    def test_key_match_is_case_insensitive(self):
        """Test that upper-case variants are masked too."""
        assert redact_sensitive(None, "info", {"Token": "abc"})["Token"] == REDACTED

    def test_nested_mappings_masked(self):
        """Test that secrets inside nested dicts are masked."""
        event = redact_sensitive(None, "info", {"request": {"password": "wonderland", "path": "/login"}})
        assert event["request"] == {"password": REDACTED, "path": "/login"}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_redaction_runs_before_rendering(self):
        """Test that the processor chain masks secrets ahead of the renderer."""
        setup_logging(debug=False)
        try:
            processors = structlog.get_config()["processors"]
            assert redact_sensitive in processors
            assert processors.index(redact_sensitive) < len(processors) - 1
        finally:
            structlog.reset_defaults()
