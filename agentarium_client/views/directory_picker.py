import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

NO_SELECTION = "No directory selected"


class DirectoryPicker:
    """Holds the codebase directory chosen by the user"""

    def __init__(self, on_select: Optional[Callable[[str], None]] = None):
        self.selected_path: Optional[str] = None
        self.on_select = on_select

    @property
    def display_text(self) -> str:
        return self.selected_path or NO_SELECTION

    def select(self, path: str) -> str:
        """
        Select a directory.

        Raises:
            ValueError: path is missing or not a directory
        """
        directory = Path(path).expanduser()
        if not directory.is_dir():
            raise ValueError(f"Invalid directory: {path}")

        self.selected_path = str(directory.resolve())
        logger.info(f"Selected directory: {self.selected_path}")
        if self.on_select:
            self.on_select(self.selected_path)
        return self.selected_path
