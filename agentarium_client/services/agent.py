"""
Agent state for the Agentarium client.

Tracks what each agent on screen is doing: where it is, where it is heading,
and which tool or thought is displayed above it. The scene's AgentNode drives
its animations from this state.
"""

import logging
from collections import deque
from enum import Enum
from pathlib import PurePosixPath
from typing import Deque, Optional, Tuple

from agentarium_client.schemas.filesystem import Position

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float, float]

DEFAULT_AGENT_COLOR = "#c08060"
WALK_SPEED = 10.0  # units per second
MIN_MOVE_DURATION = 0.2
MAX_MOVE_DURATION = 1.5

TOOL_ICONS = {
    "read": "📖",
    "write": "✏️",
    "edit": "🔧",
    "bash": "⚡",
    "grep": "🔍",
    "glob": "📁",
}
DEFAULT_TOOL_ICON = "🔨"

EVENT_ICONS = {
    **TOOL_ICONS,
    "move": "🚶",
    "idle": "💭",
}
DEFAULT_EVENT_ICON = "•"


class AgentMode(str, Enum):
    IDLE = "idle"
    WALKING = "walking"


class AgentState:
    """
    Represents the state of a single agent on screen.

    Movement requests are queued and consumed strictly in arrival order, with
    at most one move in flight.
    """

    def __init__(self, agent_id: str, position: Optional[Position] = None, color: str = DEFAULT_AGENT_COLOR):
        self.agent_id = agent_id
        self.position = position or Position(x=0.0, y=0.0, z=0.0)
        self.color = color
        self.mode = AgentMode.IDLE
        self.movement_queue: Deque[Position] = deque()
        self.current_target: Optional[Position] = None
        self.target_path: Optional[str] = None
        self.tool_name: Optional[str] = None
        self.thought: Optional[str] = None

    @property
    def is_moving(self) -> bool:
        return self.current_target is not None

    def enqueue_move(self, position: Position) -> Optional[Position]:
        """
        Queue a destination.

        Returns:
            The destination to start moving to now, or None when a move is
            already in flight.
        """
        if self.is_moving:
            self.movement_queue.append(position)
            logger.debug(f"Agent {self.agent_id} queued move ({len(self.movement_queue)} pending)")
            return None

        self.current_target = position
        self.mode = AgentMode.WALKING
        return position

    def arrive(self) -> Optional[Position]:
        """
        Record arrival at the current target.

        Returns:
            The next queued destination, or None when the agent goes idle.
        """
        if self.current_target is not None:
            self.position = self.current_target

        if self.movement_queue:
            self.current_target = self.movement_queue.popleft()
            return self.current_target

        self.current_target = None
        self.mode = AgentMode.IDLE
        return None

    def clear_movement(self):
        self.movement_queue.clear()
        self.current_target = None
        self.mode = AgentMode.IDLE


def movement_duration(start: Position, end: Position) -> float:
    """Seconds to walk between two points, clamped so short hops stay visible"""
    duration = start.distance_to(end) / WALK_SPEED
    return max(MIN_MOVE_DURATION, min(duration, MAX_MOVE_DURATION))


def icon_for_tool(tool_name: Optional[str]) -> str:
    if not tool_name:
        return DEFAULT_TOOL_ICON
    return TOOL_ICONS.get(tool_name.lower(), DEFAULT_TOOL_ICON)


def icon_for_event(event_type: str) -> str:
    return EVENT_ICONS.get(event_type, DEFAULT_EVENT_ICON)


def file_name(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return PurePosixPath(path).name or path


def parse_color(hex_string: str) -> Color:
    """
    Parse '#rrggbb' into RGBA floats.

    Anything that is not valid hex parses as black.
    """
    hex_digits = "".join(c for c in hex_string if c.isalnum())
    try:
        value = int(hex_digits, 16) if hex_digits else 0
    except ValueError:
        logger.warning(f"Invalid color: {hex_string}")
        value = 0

    r = ((value >> 16) & 0xFF) / 255.0
    g = ((value >> 8) & 0xFF) / 255.0
    b = (value & 0xFF) / 255.0
    return (r, g, b, 1.0)


def darken(color: Color, factor: float) -> Color:
    r, g, b, a = color
    return (r * factor, g * factor, b * factor, a)


def with_alpha(color: Color, alpha: float) -> Color:
    return (color[0], color[1], color[2], alpha)
