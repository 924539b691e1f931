import logging
import math
from typing import Callable, List, Optional

from agentarium_client.scene import actions
from agentarium_client.scene.actions import TimingMode
from agentarium_client.scene.geometry import BLACK, Box, Material, Plane
from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.nodes.label import LabelNode
from agentarium_client.scene.nodes.thought_bubble import AUTO_FADE_SECONDS, ThoughtBubbleNode
from agentarium_client.scene.nodes.tool_icon import ToolIconNode
from agentarium_client.schemas.filesystem import Position
from agentarium_client.services.agent import (
    DEFAULT_AGENT_COLOR, AgentMode, AgentState, darken, file_name, movement_duration,
    parse_color, with_alpha,
)

logger = logging.getLogger(__name__)

LEG_HEIGHT = 0.3
BODY_REST = (0.0, 0.5 + LEG_HEIGHT, 0.0)
LEG_Y = 0.075
LEG_SPACING = 0.35
FOOT_REST = [(-LEG_SPACING, LEG_Y, 0.0), (LEG_SPACING, LEG_Y, 0.0)]
TOOL_ICON_SECONDS = 2.0


class AgentNode(SceneNode):
    """
    Blocky mascot that represents one agent.

    Walks (body bob and alternating feet) while a move is in flight and
    breathes while idle. Queued moves come from the AgentState.
    """

    def __init__(
        self,
        agent_id: str,
        color: str = DEFAULT_AGENT_COLOR,
        position: Optional[Position] = None,
        tool_icon_duration: float = TOOL_ICON_SECONDS,
        thought_duration: float = AUTO_FADE_SECONDS,
    ):
        super().__init__(name=agent_id, position=position.as_tuple() if position else (0.0, 0.0, 0.0))
        self.state = AgentState(agent_id, position=position, color=color)
        self.tool_icon_duration = tool_icon_duration
        self.thought_duration = thought_duration

        self.thought_bubble: Optional[ThoughtBubbleNode] = None
        self.tool_icon: Optional[ToolIconNode] = None
        self.path_label: Optional[LabelNode] = None
        self.is_walking = False
        self.is_idling = False
        self.despawning = False

        body_color = parse_color(color)
        limb_color = darken(body_color, 0.75)

        self.body_node = self._setup_body(body_color)
        self._setup_eyes()
        self.arm_nodes = self._setup_arms(limb_color)
        self.leg_nodes = self._setup_legs(limb_color)
        self.glow_node = self._setup_glow(body_color)

        self.start_idle_animation()

    @property
    def agent_id(self) -> str:
        return self.state.agent_id

    @property
    def mode(self) -> AgentMode:
        return self.state.mode

    # Setup

    def _setup_body(self, color) -> SceneNode:
        material = Material(diffuse=color, emission=with_alpha(color, 0.15), lighting_model="physically_based")
        body = SceneNode(
            name="body",
            geometry=Box(materials=[material], width=1.4, height=1.0, length=0.8, chamfer_radius=0.05),
            position=BODY_REST,
        )
        return self.add_child(body)

    def _setup_eyes(self):
        material = Material(diffuse=BLACK, lighting_model="constant")
        for x in (-0.25, 0.25):
            eye = SceneNode(
                name="eye",
                geometry=Box(materials=[material], width=0.15, height=0.15, length=0.05),
                position=(x, 0.2, 0.41),
            )
            self.body_node.add_child(eye)

    def _setup_arms(self, color) -> List[SceneNode]:
        material = Material(diffuse=color, lighting_model="physically_based")
        arms = []
        for x in (-0.775, 0.775):
            arm = SceneNode(
                name="arm",
                geometry=Box(materials=[material], width=0.15, height=0.25, length=0.2, chamfer_radius=0.02),
                position=(x, 0.0, 0.0),
            )
            arms.append(self.body_node.add_child(arm))
        return arms

    def _setup_legs(self, color) -> List[SceneNode]:
        material = Material(diffuse=color, lighting_model="physically_based")
        legs = []
        for position in FOOT_REST:
            leg = SceneNode(
                name="leg",
                geometry=Box(materials=[material], width=0.2, height=0.15, length=0.25, chamfer_radius=0.02),
                position=position,
            )
            legs.append(self.add_child(leg))
        return legs

    def _setup_glow(self, color) -> SceneNode:
        material = Material(
            diffuse=with_alpha(color, 0.3),
            lighting_model="constant",
            double_sided=True,
            blend_mode="add",
        )
        glow = SceneNode(
            name="glow",
            geometry=Plane(materials=[material], width=2.0, height=2.0, corner_radius=1.0),
            position=(0.0, 0.05, 0.0),
        )
        # Lie flat under the agent
        glow.euler_angles[0] = -math.pi / 2
        return self.add_child(glow)

    # Animations

    def start_walk_animation(self):
        if self.is_walking:
            return
        self.is_walking = True
        self.stop_idle_animation()

        bob = actions.sequence([
            actions.move_by((0.0, 0.08, 0.0), 0.15),
            actions.move_by((0.0, -0.08, 0.0), 0.15),
        ])
        self.body_node.run_action(actions.repeat_forever(bob), key="walk_bob")

        leg_up = actions.move_by((0.0, 0.08, 0.0), 0.15)
        leg_down = actions.move_by((0.0, -0.08, 0.0), 0.15)
        self.leg_nodes[0].run_action(actions.repeat_forever(actions.sequence([leg_up, leg_down])), key="walk_leg")
        self.leg_nodes[1].run_action(actions.repeat_forever(actions.sequence([leg_down, leg_up])), key="walk_leg")

    def stop_walk_animation(self):
        if not self.is_walking:
            return
        self.is_walking = False

        self.body_node.remove_action("walk_bob")
        self.body_node.run_action(actions.move_to(BODY_REST, 0.1), key="walk_reset")
        for leg, rest in zip(self.leg_nodes, FOOT_REST):
            leg.remove_action("walk_leg")
            leg.run_action(actions.move_to(rest, 0.1), key="walk_reset")

        self.start_idle_animation()

    def start_idle_animation(self):
        if self.is_idling or self.is_walking:
            return
        self.is_idling = True

        breath = actions.sequence([
            actions.scale_to(1.02, 1.0, TimingMode.EASE_IN_OUT),
            actions.scale_to(1.0, 1.0, TimingMode.EASE_IN_OUT),
        ])
        self.body_node.run_action(actions.repeat_forever(breath), key="idle_breath")

    def stop_idle_animation(self):
        if not self.is_idling:
            return
        self.is_idling = False
        self.body_node.remove_action("idle_breath")
        self.body_node.scale = 1.0

    # Movement

    def move_to(self, position: Position):
        """Queue a move; it starts once every earlier move has arrived"""
        destination = self.state.enqueue_move(position)
        if destination is not None:
            self._start_move(destination)

    def _start_move(self, destination: Position):
        start = Position(x=self.position[0], y=self.position[1], z=self.position[2])
        duration = movement_duration(start, destination)
        logger.debug(f"Agent {self.agent_id} walking to {destination} over {duration:.2f}s")

        self.start_walk_animation()
        self.run_action(
            actions.move_to(destination.as_tuple(), duration, TimingMode.EASE_IN_OUT),
            key="agent_move",
            completion=self._arrived,
        )

    def _arrived(self):
        next_destination = self.state.arrive()
        if next_destination is not None:
            self._start_move(next_destination)
        else:
            self.stop_walk_animation()

    def ensure_idle(self):
        if not self.state.is_moving:
            self.stop_walk_animation()
            self.start_idle_animation()

    # Overlays

    def update_file_path(self, path: Optional[str]):
        self.state.target_path = path
        name = file_name(path)
        if name:
            if self.path_label is None:
                self.path_label = LabelNode(name, y_offset=-0.5)
                self.add_child(self.path_label)
            else:
                self.path_label.update_text(name)
        elif self.path_label is not None:
            self.path_label.remove_from_parent()
            self.path_label = None

    def update_thought(self, text: str):
        self.state.thought = text
        if self.thought_bubble is None or self.thought_bubble.parent is None:
            self.thought_bubble = ThoughtBubbleNode(text, auto_fade=self.thought_duration)
            self.add_child(self.thought_bubble)
        else:
            self.thought_bubble.update_text(text)

    def show_tool_icon(self, tool_name: str):
        """Show the tool icon; it hides itself after tool_icon_duration"""
        self.state.tool_name = tool_name
        if self.tool_icon is not None:
            self.tool_icon.remove_from_parent()

        self.tool_icon = ToolIconNode(tool_name)
        self.add_child(self.tool_icon)
        self.tool_icon.fade_in()
        self.run_action(
            actions.sequence([actions.wait(self.tool_icon_duration), actions.run(self.hide_tool_icon)]),
            key="tool_icon_hide",
        )

    def hide_tool_icon(self):
        self.state.tool_name = None
        self.remove_action("tool_icon_hide")
        icon = self.tool_icon
        if icon is None:
            return
        self.tool_icon = None
        icon.fade_out(completion=icon.remove_from_parent)

    # Despawn

    def despawn(self, completion: Optional[Callable[[], None]] = None):
        """Fade out, then leave the scene"""
        self.despawning = True
        self.state.clear_movement()
        self.remove_action("agent_move")
        self.run_action(
            actions.sequence([actions.fade_out(0.5), actions.remove_from_parent()]),
            key="despawn",
            completion=completion,
        )
