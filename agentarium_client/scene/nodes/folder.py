import numpy as np

from agentarium_client.scene.geometry import TERRAIN_GREEN, Material, wireframe_pyramid
from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.nodes.label import LabelNode
from agentarium_client.schemas.filesystem import Folder
from agentarium_client.services.agent import with_alpha
from agentarium_client.services.terrain import calculate_base_size

DEFAULT_FOLDER_HEIGHT = 3.0
DIMMED_OPACITY = 0.25


class FolderNode(SceneNode):
    """Folder rendered as a glowing wireframe pyramid with its name above"""

    def __init__(self, folder: Folder):
        position = folder.position.as_tuple() if folder.position else (0.0, 0.0, 0.0)
        super().__init__(name=folder.path, position=position)
        self.folder = folder
        self.highlighted = False
        self.dimmed = False

        self.base_size = calculate_base_size(folder.file_count)
        self.height = folder.height if folder.height is not None else DEFAULT_FOLDER_HEIGHT

        self.material = Material(
            diffuse=TERRAIN_GREEN,
            emission=with_alpha(TERRAIN_GREEN, 0.3),
            lighting_model="constant",
            double_sided=True,
        )
        self.pyramid = SceneNode(
            name="pyramid",
            geometry=wireframe_pyramid(self.base_size, self.height, self.material),
        )
        self.add_child(self.pyramid)

        self.label = LabelNode(folder.name, y_offset=self.height + 1.0)
        self.add_child(self.label)

    @property
    def path(self) -> str:
        return self.folder.path

    @property
    def pick_center(self) -> np.ndarray:
        # Pyramid rises from the node origin, so the middle is half its height up
        return self.world_position + np.array([0.0, self.height / 2 * self.world_scale, 0.0])

    @property
    def pick_radius(self) -> float:
        return max(self.base_size / 2, self.height / 2)

    def set_highlighted(self, highlighted: bool):
        self.highlighted = highlighted
        self.dimmed = False
        self.material.emission = with_alpha(TERRAIN_GREEN, 0.9 if highlighted else 0.3)
        self.pyramid.opacity = 1.0

    def set_dimmed(self, dimmed: bool):
        self.dimmed = dimmed
        self.highlighted = False
        self.material.emission = with_alpha(TERRAIN_GREEN, 0.3)
        self.pyramid.opacity = DIMMED_OPACITY if dimmed else 1.0
