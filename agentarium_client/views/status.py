from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StatusIndicator:
    """Connection badge shown in the window corner"""
    is_connected: bool
    error: Optional[str] = None

    @property
    def text(self) -> str:
        if self.is_connected:
            return "CONNECTED"
        if self.error:
            return f"ERROR: {self.error}"
        return "DISCONNECTED"

    @property
    def color(self) -> str:
        return "green" if self.is_connected else "red"
