"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Webhook payloads: message_payload, mixed_event_payload, attachment_payload
2. Infrastructure: mock_settings, mock_logfire, logfire_capture
"""

import os
import pytest
from unittest.mock import MagicMock, Mock, patch

try:
    import logfire
except ImportError:
    logfire = None

# Allow logfire calls in tests without a configured project
if logfire is not None:
    os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")


def build_messaging(
    sender_id: str = "user-456",
    text: str | None = "Hello",
    **extra,
) -> dict:
    """Build one message event dict as the platform sends it."""
    event = {
        "sender": {"id": sender_id},
        "recipient": {"id": "page-123"},
        "timestamp": 1458692752478,
    }
    if text is not None:
        event["message"] = {"mid": f"mid.{sender_id}.{text}", "seq": 73, "text": text}
    event.update(extra)
    return event


@pytest.fixture
def message_payload():
    """Two entries, each with two text messages (a, b then c, d)."""
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-123",
                "time": 1458692752478,
                "messaging": [
                    build_messaging(sender_id="100", text="a"),
                    build_messaging(sender_id="101", text="b"),
                ],
            },
            {
                "id": "page-123",
                "time": 1458692752480,
                "messaging": [
                    build_messaging(sender_id="200", text="c"),
                    build_messaging(sender_id="201", text="d"),
                ],
            },
        ],
    }


@pytest.fixture
def attachment_payload():
    """One message event carrying an image and an audio attachment."""
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-123",
                "time": 1458692752478,
                "messaging": [
                    {
                        "sender": {"id": "user-456"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1458692752478,
                        "message": {
                            "mid": "mid.1457764197618:41d102a3e1ae206a38",
                            "attachments": [
                                {
                                    "type": "image",
                                    "title": "Cat",
                                    "payload": {"url": "https://example.com/cat.png"},
                                    "url": "https://example.com/cat.png",
                                },
                                {
                                    "type": "audio",
                                    "payload": {"url": "https://example.com/a.mp3"},
                                },
                            ],
                        },
                    }
                ],
            }
        ],
    }


@pytest.fixture
def mixed_event_payload():
    """One entry with a message, a postback, an optin and a read receipt."""
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-123",
                "time": 1458692752478,
                "messaging": [
                    build_messaging(sender_id="100", text="hi"),
                    {
                        "sender": {"id": "200"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1458692752479,
                        "postback": {
                            "title": "Get Started",
                            "payload": "GET_STARTED",
                            "referral": {
                                "ref": "promo",
                                "source": "SHORTLINK",
                                "type": "OPEN_THREAD",
                            },
                        },
                    },
                    {
                        "sender": {"id": "300"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1458692752480,
                        "optin": {"ref": "PASS_THROUGH_PARAM"},
                    },
                    {
                        "sender": {"id": "400"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1458692752481,
                        "read": {"watermark": 1458668856253},
                    },
                ],
            }
        ],
    }


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings."""
    from src.config import Settings

    settings = Settings(
        env="local",
        log_level="DEBUG",
        logfire_token=None,
        max_webhook_body_bytes=4096,
    )

    monkeypatch.setattr("src.config.get_settings", lambda: settings)
    # Patch where get_settings is used so request handlers see the mock
    monkeypatch.setattr("src.api.webhook.get_settings", lambda: settings)
    monkeypatch.setattr("src.logging_config.get_settings", lambda: settings)
    return settings


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    if logfire is None:
        pytest.skip("logfire not available")

    captured_logs = []

    original_debug = logfire.debug
    original_warn = logfire.warn

    def capture_debug(*args, **kwargs):
        captured_logs.append(("debug", args, kwargs))
        return original_debug(*args, **kwargs)

    def capture_warn(*args, **kwargs):
        captured_logs.append(("warn", args, kwargs))
        return original_warn(*args, **kwargs)

    with (
        patch("logfire.debug", side_effect=capture_debug),
        patch("logfire.warn", side_effect=capture_warn),
    ):
        yield captured_logs


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Useful for tests that don't need to verify logging behavior.
    """
    mock_logfire_module = MagicMock()
    mock_logfire_module.debug = Mock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    # Patch module-level imports in our code (only modules that use logfire)
    monkeypatch.setattr("src.services.payload_decoder.logfire", mock_logfire_module)
    monkeypatch.setattr("src.api.webhook.logfire", mock_logfire_module)
    monkeypatch.setattr("src.logging_config.logfire", mock_logfire_module)

    return mock_logfire_module
