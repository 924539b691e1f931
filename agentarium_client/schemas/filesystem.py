import math
from typing import Optional

from pydantic import BaseModel


class Position(BaseModel):
    """3D position in space"""
    x: float
    y: float
    z: float

    def distance_to(self, other: "Position") -> float:
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


ORIGIN = Position(x=0.0, y=0.0, z=0.0)


class Folder(BaseModel):
    """Folder in filesystem layout"""
    path: str
    name: str
    depth: int
    file_count: int
    position: Optional[Position] = None
    height: Optional[float] = None


class File(BaseModel):
    """File in filesystem layout"""
    path: str
    name: str
    folder: str
    size: int
    position: Optional[Position] = None


class FilesystemLayout(BaseModel):
    """Complete filesystem layout, replaces any previous snapshot"""
    root: str
    folders: list[Folder]
    files: list[File]
    scanned_at: str
