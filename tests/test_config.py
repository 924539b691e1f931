import pytest
from pydantic import ValidationError

from agentarium_client.config import Settings, websocket_url_for


def test_defaults():
    settings = Settings()

    assert settings.api_url == "http://localhost:8000"
    assert settings.ws_url == "ws://localhost:8000/ws"
    assert settings.max_reconnect_attempts == 5
    assert settings.reconnect_delay == 2.0


@pytest.mark.parametrize("api_url,expected", [
    ("http://localhost:8000", "ws://localhost:8000/ws"),
    ("https://example.com/", "wss://example.com/ws"),
    ("example.com", "example.com/ws"),
])
def test_websocket_url_for(api_url, expected):
    assert websocket_url_for(api_url) == expected


def test_from_env_empty():
    assert Settings.from_env({}) == Settings()


def test_from_env_api_url_derives_websocket():
    settings = Settings.from_env({"AGENTARIUM_URL": "http://10.0.0.5:9000/"})

    assert settings.api_url == "http://10.0.0.5:9000"
    assert settings.ws_url == "ws://10.0.0.5:9000/ws"


def test_from_env_overrides():
    settings = Settings.from_env({
        "AGENTARIUM_URL": "http://host:8000",
        "AGENTARIUM_WS_URL": "ws://other:1234/stream",
        "AGENTARIUM_MAX_RECONNECT_ATTEMPTS": "8",
        "AGENTARIUM_RECONNECT_DELAY": "0.5",
    })

    assert settings.ws_url == "ws://other:1234/stream"
    assert settings.max_reconnect_attempts == 8
    assert settings.reconnect_delay == 0.5


def test_from_env_invalid_number():
    with pytest.raises(ValidationError):
        Settings.from_env({"AGENTARIUM_MAX_RECONNECT_ATTEMPTS": "many"})
