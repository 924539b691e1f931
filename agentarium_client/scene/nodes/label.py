from agentarium_client.scene.geometry import TERRAIN_GREEN, Material, Text
from agentarium_client.scene.node import SceneNode

LABEL_FONT_SIZE = 12.0
# Text geometry is authored in points; scale it down to world units
POINTS_TO_UNITS = 0.05


class LabelNode(SceneNode):
    """Billboard text label that always faces the camera around the Y axis"""

    def __init__(self, text: str, y_offset: float = 1.0, color=TERRAIN_GREEN):
        super().__init__(name="label", position=(0.0, y_offset, 0.0))
        self.billboard = True
        self.color = color
        self.text_node = SceneNode(name="label_text")
        self.add_child(self.text_node)
        self.update_text(text)

    @property
    def text(self) -> str:
        return self.text_node.geometry.string

    def update_text(self, text: str):
        geometry = Text(
            materials=[Material(diffuse=self.color, lighting_model="constant")],
            string=text,
            font_size=LABEL_FONT_SIZE,
            monospaced=True,
            extrusion_depth=0.1,
        )
        self.text_node.geometry = geometry
        self.text_node.scale = POINTS_TO_UNITS
        # Centered horizontally over the anchor
        self.text_node.position[0] = -geometry.width * POINTS_TO_UNITS / 2
