from agentarium_client.scene.geometry import GRID_CYAN, Material, grid_lines
from agentarium_client.scene.node import SceneNode


class GridNode(SceneNode):
    """Floor grid of cyan lines"""

    def __init__(self, size: int = 200, spacing: float = 10.0):
        material = Material(diffuse=GRID_CYAN, lighting_model="constant", double_sided=True)
        super().__init__(name="grid", geometry=grid_lines(size, spacing, material))
        self.size = size
        self.spacing = spacing
