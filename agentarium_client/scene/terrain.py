"""
Terrain scene for Agentarium.

Owns every node on screen: the grid floor, camera and lights, one node per
folder and file of the current snapshot, and one node per live agent. All
methods are meant to be called from the event loop that runs the render loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from agentarium_client.scene import actions
from agentarium_client.scene.actions import TimingMode
from agentarium_client.scene.camera import Camera
from agentarium_client.scene.geometry import BACKGROUND, Light
from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.nodes.agent import AgentNode
from agentarium_client.scene.nodes.file import FileNode
from agentarium_client.scene.nodes.folder import FolderNode
from agentarium_client.scene.nodes.grid import GridNode
from agentarium_client.schemas.events import AgentDespawn, AgentEvent, AgentSpawn
from agentarium_client.schemas.filesystem import FilesystemLayout, Position
from agentarium_client.services.terrain import TerrainIndex

logger = logging.getLogger(__name__)

RISE_DISTANCE = 2.0
RISE_DURATION = 0.4


@dataclass
class NodeInfo:
    path: str
    name: str
    is_folder: bool


@dataclass
class TerrainAnimation:
    """How a new snapshot rises into place"""
    mode: str = "stagger"  # "stagger" or "wave"
    batch_size: int = 50
    stagger: float = 0.01
    batch_delay: float = 0.05
    wave_delay: float = 0.25
    rise_duration: float = RISE_DURATION


TerrainNode = Union[FolderNode, FileNode]


class TerrainScene:
    def __init__(self, tool_icon_duration: float = 2.0, thought_duration: float = 5.0):
        self.root_node = SceneNode(name="root")
        self.background = BACKGROUND
        self.tool_icon_duration = tool_icon_duration
        self.thought_duration = thought_duration

        self.terrain_node = self.root_node.add_child(SceneNode(name="terrain"))
        self.agents_node = self.root_node.add_child(SceneNode(name="agents"))

        self.folder_nodes: Dict[str, FolderNode] = {}
        self.file_nodes: Dict[str, FileNode] = {}
        self.agents: Dict[str, AgentNode] = {}
        self.index: Optional[TerrainIndex] = None
        self.layout: Optional[FilesystemLayout] = None
        self.highlighted_paths: set = set()

        self._generation = 0
        self._setup_scene()

    def _setup_scene(self):
        self.grid_node = self.root_node.add_child(GridNode())

        self.camera = Camera(position=(0.0, 60.0, 100.0), target=(0.0, 0.0, 0.0), z_near=0.1, z_far=1000.0)
        self.root_node.add_child(self.camera)

        ambient = SceneNode(name="ambient_light")
        ambient.light = Light(type="ambient", color=(0.3, 0.3, 0.3, 1.0))
        self.root_node.add_child(ambient)

        directional = SceneNode(name="directional_light", position=(10.0, 20.0, 10.0))
        directional.light = Light(type="directional", color=(0.5, 0.5, 0.5, 1.0))
        self.root_node.add_child(directional)

    def update(self, dt: float):
        """Advance every running action by dt seconds"""
        self.root_node.update(dt)

    # Terrain

    def update_terrain(self, layout: FilesystemLayout) -> List[TerrainNode]:
        """
        Replace all folder and file nodes with the snapshot's.

        The swap happens in one step: once this returns no node from the
        previous snapshot is left in the scene.
        """
        self._generation += 1
        self.clear_terrain()

        self.layout = layout
        self.index = TerrainIndex.from_layout(layout)

        created: List[TerrainNode] = []
        for path, folder in self.index.folders.items():
            node = FolderNode(folder)
            self.folder_nodes[path] = node
            self.terrain_node.add_child(node)
            created.append(node)

        for path, file in self.index.files.items():
            parent = self.index.folders.get(file.folder)
            node = FileNode(file, fallback_position=parent.position if parent else None)
            self.file_nodes[path] = node
            self.terrain_node.add_child(node)
            created.append(node)

        logger.info(f"Terrain updated: {len(self.folder_nodes)} folders, {len(self.file_nodes)} files")
        return created

    async def update_terrain_with_animation(
        self,
        layout: FilesystemLayout,
        animation: Optional[TerrainAnimation] = None,
    ) -> bool:
        """
        Replace the terrain and let the new nodes rise into place.

        Nodes are swapped in immediately but start below their final position
        and transparent. They are released in batches (or one depth level per
        wave) with a yield between batches so large trees do not stall the
        loop. A newer snapshot stops an older one's remaining batches.

        Returns:
            False when a newer snapshot replaced this one before it finished
        """
        animation = animation or TerrainAnimation()
        created = self.update_terrain(layout)
        generation = self._generation

        for node in created:
            node.position = node.position - (0.0, RISE_DISTANCE, 0.0)
            node.opacity = 0.0

        if animation.mode == "wave":
            by_path = {node.name: node for node in created}
            batches = [[by_path[p] for p in wave if p in by_path] for wave in self.index.waves()]
            pause = animation.wave_delay
        else:
            size = max(1, animation.batch_size)
            batches = [created[i:i + size] for i in range(0, len(created), size)]
            pause = animation.batch_delay

        for batch_number, batch in enumerate(batches):
            if generation != self._generation:
                logger.debug("Terrain animation superseded by a newer snapshot")
                return False
            for position, node in enumerate(batch):
                delay = position * animation.stagger if animation.mode != "wave" else 0.0
                self._rise(node, delay, animation.rise_duration)
            if batch_number < len(batches) - 1:
                await asyncio.sleep(pause)

        # Let the last batch finish rising
        last = len(batches[-1]) if batches else 0
        tail = animation.rise_duration + (last * animation.stagger if animation.mode != "wave" else 0.0)
        await asyncio.sleep(tail)
        return generation == self._generation

    def _rise(self, node: TerrainNode, delay: float, duration: float):
        rise = actions.group([
            actions.move_by((0.0, RISE_DISTANCE, 0.0), duration, TimingMode.EASE_IN_OUT),
            actions.fade_in(duration),
        ])
        node.run_action(actions.sequence([actions.wait(delay), rise]), key="rise")

    def clear_terrain(self):
        for node in list(self.folder_nodes.values()) + list(self.file_nodes.values()):
            node.remove_from_parent()
        self.folder_nodes.clear()
        self.file_nodes.clear()
        self.highlighted_paths.clear()
        self.index = None
        self.layout = None

    # Hover

    def node_info(self, path: Optional[str]) -> Optional[NodeInfo]:
        if not path:
            return None
        if path in self.folder_nodes:
            return NodeInfo(path=path, name=self.folder_nodes[path].folder.name, is_folder=True)
        if path in self.file_nodes:
            return NodeInfo(path=path, name=self.file_nodes[path].file.name, is_folder=False)
        return None

    def node_info_at(self, x: float, y: float) -> Optional[NodeInfo]:
        """Folder or file under a view coordinate"""
        candidates = [(node, node.pick_radius) for node in self._terrain_nodes()]
        hit = self.camera.pick(candidates, x, y)
        return self.node_info(hit.name) if hit is not None else None

    def _terrain_nodes(self) -> Iterable[TerrainNode]:
        yield from self.folder_nodes.values()
        yield from self.file_nodes.values()

    def highlight_hierarchy(self, folder_path: str):
        """
        Highlight a folder with its ancestors and everything below it.

        All other folders and files are dimmed.
        """
        if self.index is None or folder_path not in self.folder_nodes:
            self.clear_all_highlights()
            return

        related = {folder_path}
        related.update(self.index.ancestors(folder_path))
        related.update(self.index.descendants(folder_path))

        for node in self._terrain_nodes():
            if node.name in related:
                node.set_highlighted(True)
            else:
                node.set_dimmed(True)
        self.highlighted_paths = related

    def clear_all_highlights(self):
        for node in self._terrain_nodes():
            node.set_highlighted(False)
        self.highlighted_paths = set()

    def show_label_for(self, path: Optional[str]):
        """Show the hover label of a file; other file labels are hidden"""
        for file_path, node in self.file_nodes.items():
            node.label.hidden = file_path != path

    def hide_all_labels(self):
        for node in self.file_nodes.values():
            node.label.hidden = True

    def highlight_agent_target(self, path: Optional[str]) -> Optional[Position]:
        """
        Highlight the folder an agent is working in.

        Returns:
            Position of that folder, or None for paths outside the terrain
        """
        if self.index is None:
            return None
        folder = self.index.folder_for_path(path)
        if folder is None:
            return None

        self.highlight_hierarchy(folder.path)
        node = self.folder_nodes[folder.path]
        return Position(x=node.position[0], y=node.position[1], z=node.position[2])

    # Agents

    def spawn_agent(self, spawn: AgentSpawn) -> Optional[AgentNode]:
        if spawn.agent_id in self.agents:
            logger.debug(f"Agent {spawn.agent_id} already spawned")
            return None

        agent = AgentNode(
            spawn.agent_id,
            color=spawn.color,
            position=spawn.position,
            tool_icon_duration=self.tool_icon_duration,
            thought_duration=self.thought_duration,
        )
        agent.opacity = 0.0
        agent.run_action(actions.fade_in(0.3), key="spawn")
        self.agents[spawn.agent_id] = agent
        self.agents_node.add_child(agent)
        logger.info(f"Agent spawned: {spawn.agent_id}")
        return agent

    def despawn_agent(self, despawn: AgentDespawn) -> bool:
        agent = self.agents.pop(despawn.agent_id, None)
        if agent is None:
            logger.debug(f"Despawn for unknown agent: {despawn.agent_id}")
            return False

        agent.despawn()
        logger.info(f"Agent despawned: {despawn.agent_id}")
        return True

    def move_agent(self, agent_id: str, position: Position) -> bool:
        agent = self.agents.get(agent_id)
        if agent is None:
            logger.warning(f"Move for unknown agent: {agent_id}")
            return False
        agent.move_to(position)
        return True

    def handle_agent_event(self, event: AgentEvent) -> bool:
        """
        Apply an agent event to its agent.

        Returns:
            False when the agent is unknown and the event was dropped
        """
        agent = self.agents.get(event.agent_id)
        if agent is None:
            logger.warning(f"Event for unknown agent: {event.agent_id}")
            return False

        if event.event_type == "move":
            if event.target_position is None:
                logger.warning(f"Move event without target position for {event.agent_id}, skipping move")
            else:
                agent.move_to(event.target_position)

        if event.event_type == "idle":
            agent.hide_tool_icon()
            agent.ensure_idle()
        elif event.tool_name:
            agent.show_tool_icon(event.tool_name)

        if event.thought:
            agent.update_thought(event.thought)

        if event.target_path is not None:
            agent.update_file_path(event.target_path)

        return True
