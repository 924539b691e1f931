import textwrap
from typing import Callable, Optional

from agentarium_client.scene import actions
from agentarium_client.scene.geometry import DARK_GRAY, WHITE, Material, Plane, Text
from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.nodes.label import POINTS_TO_UNITS
from agentarium_client.services.agent import with_alpha

BUBBLE_Y_OFFSET = 2.8
MAX_WIDTH = 200.0
PADDING = 12.0
FONT_SIZE = 10.0
AUTO_FADE_SECONDS = 5.0


def wrap_text(text: str, max_width: float = MAX_WIDTH - PADDING * 2, font_size: float = FONT_SIZE) -> str:
    """Word-wrap text to fit max_width points of monospaced glyphs"""
    columns = max(1, int(max_width // (font_size * 0.6)))
    return "\n".join(textwrap.wrap(text, width=columns, break_long_words=False)) or text


class ThoughtBubbleNode(SceneNode):
    """Speech-bubble style text above an agent that fades out on its own"""

    def __init__(self, text: str, auto_fade: float = AUTO_FADE_SECONDS):
        super().__init__(name="thought_bubble", position=(0.0, BUBBLE_Y_OFFSET, 0.0))
        self.billboard = True
        self.auto_fade = auto_fade
        self.text_node: Optional[SceneNode] = None
        self.background_node: Optional[SceneNode] = None
        self._setup_bubble(text)
        self._schedule_auto_fade()

    @property
    def text(self) -> str:
        return self.text_node.geometry.string

    def _setup_bubble(self, text: str):
        geometry = Text(
            materials=[Material(diffuse=DARK_GRAY, lighting_model="constant")],
            string=wrap_text(text),
            font_size=FONT_SIZE,
            extrusion_depth=0.1,
        )
        bg_width = geometry.width + PADDING * 2
        bg_height = geometry.height + PADDING * 2

        background = Plane(
            materials=[Material(diffuse=with_alpha(WHITE, 0.9), lighting_model="constant", double_sided=True)],
            width=bg_width,
            height=bg_height,
            corner_radius=bg_height / 6,
        )
        self.background_node = SceneNode(
            name="bubble_background",
            geometry=background,
            position=(geometry.width / 2 * POINTS_TO_UNITS, geometry.height / 2 * POINTS_TO_UNITS, -0.05),
        )
        self.background_node.scale = POINTS_TO_UNITS
        self.add_child(self.background_node)

        self.text_node = SceneNode(
            name="bubble_text",
            geometry=geometry,
            position=(PADDING * POINTS_TO_UNITS, PADDING * POINTS_TO_UNITS, 0.0),
        )
        self.text_node.scale = POINTS_TO_UNITS
        self.add_child(self.text_node)

    def update_text(self, text: str):
        self.remove_action("fade")
        self.remove_all_children()
        self._setup_bubble(text)
        self.opacity = 1.0
        self._schedule_auto_fade()

    def _schedule_auto_fade(self):
        self.run_action(
            actions.sequence([actions.wait(self.auto_fade), actions.run(self.fade_out)]),
            key="auto_fade",
        )

    def fade_out(self, completion: Optional[Callable[[], None]] = None):
        self.remove_action("auto_fade")
        self.run_action(
            actions.sequence([actions.fade_out(0.5), actions.remove_from_parent()]),
            key="fade",
            completion=completion,
        )
