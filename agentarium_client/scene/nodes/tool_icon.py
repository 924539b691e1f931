import math
from typing import Callable, Optional

from agentarium_client.scene import actions
from agentarium_client.scene.actions import TimingMode
from agentarium_client.scene.geometry import WHITE, Material, Text
from agentarium_client.scene.node import SceneNode
from agentarium_client.services.agent import icon_for_tool

ICON_Y_OFFSET = 3.0
ICON_SIZE = 1.5
ICON_FONT_SIZE = 48.0


class ToolIconNode(SceneNode):
    """Spinning emoji above an agent showing the tool it is using"""

    def __init__(self, tool_name: str):
        super().__init__(name="tool_icon", position=(0.0, ICON_Y_OFFSET, 0.0))
        self.tool_name = tool_name
        self.emoji = icon_for_tool(tool_name)
        self.billboard = True
        self.opacity = 0.0

        text = Text(
            materials=[Material(diffuse=WHITE, lighting_model="constant")],
            string=self.emoji,
            font_size=ICON_FONT_SIZE,
            monospaced=False,
            extrusion_depth=0.05,
        )
        text_node = SceneNode(name="tool_icon_text", geometry=text)
        # Emoji glyphs are about one em square
        text_node.scale = ICON_SIZE / ICON_FONT_SIZE
        text_node.position = text_node.position + (-ICON_SIZE / 2, -ICON_SIZE / 2, 0.0)
        self.add_child(text_node)

        self.run_action(
            actions.repeat_forever(actions.rotate_by((0.0, math.pi * 2, 0.0), 3.0)),
            key="rotate",
        )
        self.run_action(
            actions.repeat_forever(actions.sequence([
                actions.move_by((0.0, 0.1, 0.0), 0.8, TimingMode.EASE_IN_OUT),
                actions.move_by((0.0, -0.1, 0.0), 0.8, TimingMode.EASE_IN_OUT),
            ])),
            key="bob",
        )

    def fade_in(self, duration: float = 0.3):
        self.run_action(actions.fade_in(duration), key="fade")

    def fade_out(self, duration: float = 0.3, completion: Optional[Callable[[], None]] = None):
        self.run_action(actions.fade_out(duration), key="fade", completion=completion)
