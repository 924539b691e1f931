"""
Terrain hierarchy index for Agentarium.

Builds path-keyed lookups over a filesystem layout so the scene can answer
hierarchy questions (parents, ancestors, descendants, depth waves) without
walking the flat folder and file lists on every hover.
"""

import logging
import math
from collections import defaultdict, deque
from typing import Dict, List, Optional

from agentarium_client.schemas.filesystem import File, FilesystemLayout, Folder

logger = logging.getLogger(__name__)


def calculate_base_size(file_count: int) -> float:
    """
    Width of a folder pyramid base; grows slowly with the number of files.

    Formula: base = 2.0 + log(file_count + 1)
    """
    return 2.0 + math.log(file_count + 1)


def parent_path(path: str) -> str:
    """Parent directory of a path, '' at the top"""
    return "/".join(path.rstrip("/").rsplit("/", 1)[:-1])


class TerrainIndex:
    """Parent/child relationships of every folder and file in a layout"""

    def __init__(self, root: str):
        self.root = root
        self.folders: Dict[str, Folder] = {}
        self.files: Dict[str, File] = {}
        self._parents: Dict[str, str] = {}
        self._children: Dict[str, List[str]] = defaultdict(list)

    @classmethod
    def from_layout(cls, layout: FilesystemLayout) -> "TerrainIndex":
        index = cls(layout.root)

        for folder in layout.folders:
            if folder.path in index.folders:
                logger.warning(f"Duplicate folder in layout: {folder.path}")
            index.folders[folder.path] = folder

        for file in layout.files:
            if file.path in index.files:
                logger.warning(f"Duplicate file in layout: {file.path}")
            index.files[file.path] = file

        # Parents are resolved once all folders are known. A folder for the
        # scan root itself is the top of the tree and has no parent.
        for path in index.folders:
            if path.rstrip("/") == layout.root.rstrip("/"):
                continue
            parent = parent_path(path)
            if parent not in index.folders:
                parent = layout.root
            index._link(parent, path)

        for path, file in index.files.items():
            parent = file.folder if file.folder in index.folders else layout.root
            index._link(parent, path)

        return index

    def _link(self, parent: str, child: str):
        self._parents[child] = parent
        self._children[parent].append(child)

    def __contains__(self, path: str) -> bool:
        return path in self.folders or path in self.files

    def parent(self, path: str) -> Optional[str]:
        return self._parents.get(path)

    def children(self, path: str) -> List[str]:
        return list(self._children.get(path, []))

    def ancestors(self, path: str) -> List[str]:
        """Folders above path, nearest first; the root itself is not included"""
        result = []
        current = self._parents.get(path)
        while current is not None and current != self.root and current in self.folders:
            result.append(current)
            current = self._parents.get(current)
        return result

    def descendants(self, path: str) -> List[str]:
        """Every folder and file below path, breadth-first"""
        result = []
        seen = {path}
        queue = deque(self._children.get(path, []))
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            queue.extend(self._children.get(current, []))
        return result

    def folder_for_path(self, path: Optional[str]) -> Optional[Folder]:
        """
        Folder a path belongs to.

        Folders map to themselves, files to their containing folder, and
        unknown paths to the nearest folder above them.
        """
        if not path:
            return None
        if path in self.folders:
            return self.folders[path]
        if path in self.files:
            return self.folders.get(self.files[path].folder)

        current = parent_path(path)
        while current:
            if current in self.folders:
                return self.folders[current]
            current = parent_path(current)
        return None

    def depth_of(self, path: str) -> int:
        if path in self.folders:
            return self.folders[path].depth
        if path in self.files:
            folder = self.folders.get(self.files[path].folder)
            return folder.depth + 1 if folder else 1
        return 0

    def waves(self) -> List[List[str]]:
        """Paths grouped by depth, shallowest first"""
        by_depth: Dict[int, List[str]] = defaultdict(list)
        for path in self.folders:
            by_depth[self.depth_of(path)].append(path)
        for path in self.files:
            by_depth[self.depth_of(path)].append(path)
        return [by_depth[depth] for depth in sorted(by_depth)]
