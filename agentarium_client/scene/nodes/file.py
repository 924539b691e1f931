from typing import Optional

from agentarium_client.scene.geometry import TERRAIN_GREEN, Box, Material
from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.nodes.label import LabelNode
from agentarium_client.schemas.filesystem import File, Position
from agentarium_client.services.agent import with_alpha

CUBE_SIZE = 0.3
FILE_OPACITY = 0.6
DIMMED_OPACITY = 0.2


class FileNode(SceneNode):
    """File rendered as a small translucent cube; its label shows on hover"""

    def __init__(self, file: File, fallback_position: Optional[Position] = None):
        position = file.position or fallback_position
        super().__init__(
            name=file.path,
            position=position.as_tuple() if position else (0.0, 0.0, 0.0),
        )
        self.file = file
        self.highlighted = False
        self.dimmed = False

        self.material = Material(
            diffuse=with_alpha(TERRAIN_GREEN, FILE_OPACITY),
            lighting_model="blinn",
            transparency=FILE_OPACITY,
        )
        self.geometry = Box(
            materials=[self.material],
            width=CUBE_SIZE,
            height=CUBE_SIZE,
            length=CUBE_SIZE,
        )

        self.label = LabelNode(file.name, y_offset=0.6)
        self.label.hidden = True
        self.add_child(self.label)

    @property
    def path(self) -> str:
        return self.file.path

    @property
    def pick_radius(self) -> float:
        return 0.5

    def set_highlighted(self, highlighted: bool):
        self.highlighted = highlighted
        self.dimmed = False
        self.material.emission = with_alpha(TERRAIN_GREEN, 0.8) if highlighted else None
        self.material.transparency = 1.0 if highlighted else FILE_OPACITY

    def set_dimmed(self, dimmed: bool):
        self.dimmed = dimmed
        self.highlighted = False
        self.material.emission = None
        self.material.transparency = DIMMED_OPACITY if dimmed else FILE_OPACITY
