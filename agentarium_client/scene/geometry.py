"""
Geometry and materials for scene nodes.

These are plain descriptions; a renderer turns them into meshes. Line
geometry is built procedurally as numpy vertex and index arrays.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

Color = Tuple[float, float, float, float]

TERRAIN_GREEN: Color = (0.0, 1.0, 0x88 / 255.0, 1.0)  # #00ff88
GRID_CYAN: Color = (0.0, 1.0, 1.0, 0.4)  # #00ffff at 40%
BACKGROUND: Color = (0x0a / 255.0, 0x0a / 255.0, 0x12 / 255.0, 1.0)  # #0a0a12
WHITE: Color = (1.0, 1.0, 1.0, 1.0)
BLACK: Color = (0.0, 0.0, 0.0, 1.0)
DARK_GRAY: Color = (1 / 3, 1 / 3, 1 / 3, 1.0)


@dataclass
class Material:
    diffuse: Color = WHITE
    emission: Optional[Color] = None
    lighting_model: str = "blinn"
    double_sided: bool = False
    blend_mode: str = "alpha"
    transparency: float = 1.0


@dataclass
class Geometry:
    materials: List[Material] = field(default_factory=list)

    @property
    def material(self) -> Optional[Material]:
        return self.materials[0] if self.materials else None

    def bounding_radius(self) -> float:
        return 0.0


@dataclass
class Box(Geometry):
    width: float = 1.0
    height: float = 1.0
    length: float = 1.0
    chamfer_radius: float = 0.0

    def bounding_radius(self) -> float:
        return float(np.linalg.norm([self.width, self.height, self.length]) / 2)


@dataclass
class Plane(Geometry):
    width: float = 1.0
    height: float = 1.0
    corner_radius: float = 0.0

    def bounding_radius(self) -> float:
        return float(np.hypot(self.width, self.height) / 2)


@dataclass
class Text(Geometry):
    string: str = ""
    font_size: float = 12.0
    monospaced: bool = True
    extrusion_depth: float = 0.1

    @property
    def lines(self) -> List[str]:
        return self.string.split("\n")

    @property
    def width(self) -> float:
        # Monospaced glyphs are roughly 0.6em wide
        return max((len(line) for line in self.lines), default=0) * self.font_size * 0.6

    @property
    def height(self) -> float:
        return len(self.lines) * self.font_size * 1.2


@dataclass
class Lines(Geometry):
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int32))

    @property
    def segment_count(self) -> int:
        return len(self.indices) // 2

    def bounding_radius(self) -> float:
        if len(self.vertices) == 0:
            return 0.0
        return float(np.max(np.linalg.norm(self.vertices, axis=1)))


def wireframe_pyramid(base_size: float, height: float, material: Material) -> Lines:
    """Square-based pyramid edges: four base edges and four to the apex"""
    half = base_size / 2.0
    vertices = np.array([
        [-half, 0.0, -half],
        [half, 0.0, -half],
        [half, 0.0, half],
        [-half, 0.0, half],
        [0.0, height, 0.0],
    ])
    indices = np.array([
        0, 1, 1, 2, 2, 3, 3, 0,
        0, 4, 1, 4, 2, 4, 3, 4,
    ], dtype=np.int32)
    return Lines(materials=[material], vertices=vertices, indices=indices)


def grid_lines(size: int, spacing: float, material: Material) -> Lines:
    """Floor grid centered on the origin, lines parallel to X and Z"""
    half = size / 2.0
    offsets = np.arange(int(size // spacing) + 1) * spacing - half
    count = len(offsets)

    along_x = np.empty((count * 2, 3))
    along_x[0::2] = np.column_stack([np.full(count, -half), np.zeros(count), offsets])
    along_x[1::2] = np.column_stack([np.full(count, half), np.zeros(count), offsets])

    along_z = np.empty((count * 2, 3))
    along_z[0::2] = np.column_stack([offsets, np.zeros(count), np.full(count, -half)])
    along_z[1::2] = np.column_stack([offsets, np.zeros(count), np.full(count, half)])

    vertices = np.vstack([along_x, along_z])
    indices = np.arange(len(vertices), dtype=np.int32)
    return Lines(materials=[material], vertices=vertices, indices=indices)


@dataclass
class Light:
    type: str
    color: Color = WHITE
    intensity: float = 1.0
