from typing import Optional


class AgentariumError(Exception):
    """Base class for client errors"""


class MessageDecodeError(AgentariumError):
    """A WebSocket frame could not be decoded into a known message"""


class UnknownMessageType(MessageDecodeError):
    """Envelope was well formed but its type tag is not recognized"""

    def __init__(self, message_type: str):
        super().__init__(f"Unknown message type: {message_type}")
        self.message_type = message_type


class ApiError(AgentariumError):
    """HTTP request to the Agentarium API failed"""

    def __init__(self, status_code: Optional[int], detail: str):
        super().__init__(f"{status_code}: {detail}" if status_code else detail)
        self.status_code = status_code
        self.detail = detail
