"""Tests for logging helpers."""

from app.config import settings
from app.infra.logging import add_service_context


def test_service_context_added():
    event = add_service_context(None, "info", {"event": "Product created"})

    assert event["service"] == settings.service_name
    assert event["env"] == settings.environment


def test_service_context_does_not_override():
    event = add_service_context(None, "info", {"event": "x", "service": "worker"})

    assert event["service"] == "worker"
