# ============================================================================
# Tests for Settings and log formatting
# ============================================================================
"""Unit tests for configuration validation and structured logs."""

import json
import logging

import pytest
from pydantic import ValidationError

from polyclinic.config.settings import Settings
from polyclinic.core.container import ServiceContainer
from polyclinic.core.shared.logger import (
    ColoredFormatter,
    JSONFormatter,
    reset_correlation_id,
    set_correlation_id,
)


class TestSettings:
    """Tests for Settings."""

    def test_breaker_thresholds_reach_container(self, settings: Settings) -> None:
        """Should build breakers from the configured thresholds."""
        tuned = settings.model_copy(update={"BREAKER_MINIMUM_CALLS": 4, "BREAKER_WAIT_DURATION_OPEN_SECONDS": 30.0})
        container = ServiceContainer(tuned)

        breaker = container.peer("results", "client-service").breaker

        assert breaker.name == "results.client-service"
        assert breaker.config.minimum_calls == 4
        assert breaker.config.wait_duration_open == 30.0

    def test_unknown_service_rejected(self) -> None:
        """Should refuse to mount a service that does not exist."""
        with pytest.raises(ValidationError, match="Unknown services: pharmacy"):
            Settings(_env_file=None, ENABLED_SERVICES=["clients", "pharmacy"])

    def test_peer_timeout_shorter_than_open_wait(self) -> None:
        """Should refuse a peer timeout that outlasts the open breaker."""
        with pytest.raises(ValidationError, match="PEER_TIMEOUT_SECONDS"):
            Settings(_env_file=None, PEER_TIMEOUT_SECONDS=90.0, BREAKER_WAIT_DURATION_OPEN_SECONDS=60.0)


class TestFormatters:
    """Tests for log formatters."""

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord("polyclinic.test", logging.WARNING, __file__, 1, "breaker opened", (), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_keeps_extra(self) -> None:
        """Should render extra fields under extra_data."""
        payload = json.loads(JSONFormatter().format(self._record(circuit_breaker="clients.database")))

        assert payload["level"] == "WARNING"
        assert payload["message"] == "breaker opened"
        assert payload["extra_data"] == {"circuit_breaker": "clients.database"}
        assert "correlation_id" not in payload

    def test_json_formatter_adds_correlation_id(self) -> None:
        """Should tag records logged while a request is served."""
        token = set_correlation_id("c0ffee42")
        try:
            payload = json.loads(JSONFormatter().format(self._record()))
        finally:
            reset_correlation_id(token)

        assert payload["correlation_id"] == "c0ffee42"

    def test_colored_formatter_restores_level(self) -> None:
        """Should not leak color codes into the record."""
        record = self._record()
        output = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[33m" in output
        assert record.levelname == "WARNING"
