from dataclasses import dataclass
from typing import Optional

WAITING_MESSAGE = "Waiting for Claude Code..."
BUILDING_MESSAGE = "Building world..."


@dataclass
class WorldLoadingOverlay:
    """Banner shown while the backend scans and the terrain rises"""
    visible: bool = False
    message: str = WAITING_MESSAGE
    cwd: Optional[str] = None
    folder_count: Optional[int] = None
    file_count: Optional[int] = None

    @property
    def subtitle(self) -> Optional[str]:
        if self.folder_count is None or self.file_count is None:
            return None
        return f"({self.folder_count} folders, {self.file_count} files)"

    def show(self, message: str, cwd: Optional[str] = None):
        self.visible = True
        self.message = message
        self.cwd = cwd
        self.folder_count = None
        self.file_count = None

    def set_counts(self, folder_count: int, file_count: int):
        self.folder_count = folder_count
        self.file_count = file_count

    def hide(self):
        self.visible = False
