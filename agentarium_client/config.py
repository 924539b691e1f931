import os
from typing import Mapping, Optional

from pydantic import BaseModel

DEFAULT_API_URL = "http://localhost:8000"


def websocket_url_for(api_url: str) -> str:
    """Derive the /ws endpoint from the HTTP base URL"""
    base = api_url.rstrip("/")
    if base.startswith("https://"):
        return "wss://" + base[len("https://"):] + "/ws"
    if base.startswith("http://"):
        return "ws://" + base[len("http://"):] + "/ws"
    return base + "/ws"


class Settings(BaseModel):
    """Client configuration"""
    api_url: str = DEFAULT_API_URL
    ws_url: str = websocket_url_for(DEFAULT_API_URL)
    max_reconnect_attempts: int = 5
    reconnect_delay: float = 2.0
    request_timeout: float = 5.0
    activity_log_size: int = 10
    tool_icon_duration: float = 2.0
    thought_duration: float = 5.0
    loading_hide_delay: float = 0.8

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        AGENTARIUM_URL is shared with the Claude hook script, so pointing both
        at another host only needs one variable.
        """
        env = os.environ if environ is None else environ
        values = {}

        api_url = env.get("AGENTARIUM_URL")
        if api_url:
            values["api_url"] = api_url.rstrip("/")
            values["ws_url"] = websocket_url_for(api_url)

        if env.get("AGENTARIUM_WS_URL"):
            values["ws_url"] = env["AGENTARIUM_WS_URL"]
        if env.get("AGENTARIUM_MAX_RECONNECT_ATTEMPTS"):
            values["max_reconnect_attempts"] = env["AGENTARIUM_MAX_RECONNECT_ATTEMPTS"]
        if env.get("AGENTARIUM_RECONNECT_DELAY"):
            values["reconnect_delay"] = env["AGENTARIUM_RECONNECT_DELAY"]

        return cls(**values)
