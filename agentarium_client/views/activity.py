import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

from agentarium_client.schemas.events import AgentEvent
from agentarium_client.services.agent import file_name, icon_for_event

NO_FILE = "—"


@dataclass
class ActivityEntry:
    """One line of the activity log"""
    icon: str
    message: str
    target_path: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_event(cls, event: AgentEvent) -> "ActivityEntry":
        return cls(
            icon=icon_for_event(event.event_type),
            message=cls._format_message(event),
            target_path=event.target_path,
        )

    @staticmethod
    def _format_message(event: AgentEvent) -> str:
        if event.thought:
            return event.thought
        if event.target_path:
            return f"{event.event_type} {file_name(event.target_path)}"
        return event.event_type


class ActivityLog:
    """Most recent agent activity, oldest entries dropped first"""

    def __init__(self, max_entries: int = 10):
        self.max_entries = max_entries
        self._entries: Deque[ActivityEntry] = deque(maxlen=max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[ActivityEntry]:
        return list(self._entries)

    def add(self, entry: ActivityEntry) -> ActivityEntry:
        self._entries.append(entry)
        return entry

    def add_event(self, event: AgentEvent) -> ActivityEntry:
        return self.add(ActivityEntry.from_event(event))

    def clear(self):
        self._entries.clear()

    @property
    def current_file(self) -> Optional[str]:
        """Most recent target path in the log"""
        for entry in reversed(self._entries):
            if entry.target_path is not None:
                return entry.target_path
        return None

    @property
    def current_file_name(self) -> str:
        return file_name(self.current_file) or NO_FILE
