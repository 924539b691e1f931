import math
from typing import Iterable, Optional, Tuple

import numpy as np

from agentarium_client.scene.node import SceneNode


class Camera(SceneNode):
    """Perspective camera used for hover picking"""

    def __init__(
        self,
        position=(0.0, 60.0, 100.0),
        target=(0.0, 0.0, 0.0),
        field_of_view: float = 60.0,
        z_near: float = 0.1,
        z_far: float = 1000.0,
        viewport: Tuple[float, float] = (1280.0, 800.0),
    ):
        super().__init__(name="camera", position=position)
        self.field_of_view = field_of_view
        self.z_near = z_near
        self.z_far = z_far
        self.viewport = viewport
        self.target = np.zeros(3)
        self.look_at(target)

    def look_at(self, target):
        self.target = np.asarray(target, dtype=float)

    def _basis(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        forward = self.target - self.world_position
        forward = forward / np.linalg.norm(forward)
        up = np.array([0.0, 1.0, 0.0])
        if abs(np.dot(forward, up)) > 0.999:
            up = np.array([0.0, 0.0, -1.0])
        right = np.cross(forward, up)
        right = right / np.linalg.norm(right)
        true_up = np.cross(right, forward)
        return forward, right, true_up

    @property
    def _focal(self) -> float:
        return 1.0 / math.tan(math.radians(self.field_of_view) / 2)

    def project(self, point) -> Optional[Tuple[float, float]]:
        """
        World point to view coordinates (origin top-left).

        Returns None for points behind the camera.
        """
        forward, right, up = self._basis()
        relative = np.asarray(point, dtype=float) - self.world_position
        depth = float(np.dot(relative, forward))
        if depth <= self.z_near:
            return None

        width, height = self.viewport
        aspect = width / height
        ndc_x = float(np.dot(relative, right)) * self._focal / (depth * aspect)
        ndc_y = float(np.dot(relative, up)) * self._focal / depth
        return ((ndc_x + 1) * width / 2, (1 - ndc_y) * height / 2)

    def ray(self, x: float, y: float) -> Tuple[np.ndarray, np.ndarray]:
        """Ray from the camera through a view coordinate"""
        forward, right, up = self._basis()
        width, height = self.viewport
        aspect = width / height
        ndc_x = 2 * x / width - 1
        ndc_y = 1 - 2 * y / height
        direction = forward + right * (ndc_x * aspect / self._focal) + up * (ndc_y / self._focal)
        return self.world_position, direction / np.linalg.norm(direction)

    def pick(self, candidates: Iterable[Tuple[SceneNode, float]], x: float, y: float) -> Optional[SceneNode]:
        """
        Closest node whose bounding sphere the view ray hits.

        Args:
            candidates: (node, radius) pairs
            x, y: View coordinates
        """
        origin, direction = self.ray(x, y)
        best: Optional[SceneNode] = None
        best_distance = math.inf

        for node, radius in candidates:
            if node.hidden or node.parent is None:
                continue
            center = node.pick_center
            along = float(np.dot(center - origin, direction))
            if along < self.z_near or along > self.z_far:
                continue
            closest = origin + direction * along
            if np.linalg.norm(center - closest) <= radius and along < best_distance:
                best, best_distance = node, along

        return best
