"""
Tests for the terrain scene: snapshots, rise animation, hover and agents.
"""

import asyncio

import pytest

from agentarium_client.scene.terrain import TerrainAnimation, TerrainScene
from agentarium_client.schemas.events import AgentDespawn, AgentEvent, AgentSpawn
from agentarium_client.schemas.filesystem import FilesystemLayout, Folder, Position

from backend import SAMPLE_LAYOUT

SMALL_LAYOUT = {
    "root": "/other",
    "folders": [
        {"path": "/other/lib", "name": "lib", "depth": 1, "file_count": 1},
    ],
    "files": [
        {"path": "/other/lib/util.py", "name": "util.py", "folder": "/other/lib", "size": 10},
    ],
    "scanned_at": "2025-01-15T11:00:00+00:00",
}


@pytest.fixture
def layout():
    return FilesystemLayout.model_validate(SAMPLE_LAYOUT)


@pytest.fixture
def scene(layout):
    scene = TerrainScene()
    scene.update_terrain(layout)
    return scene


def event(**kwargs):
    values = {"agent_id": "agent-1", "event_type": "think", "timestamp": 1}
    values.update(kwargs)
    return AgentEvent(**values)


class TestSnapshots:
    """Tests for replacing the terrain"""

    def test_one_node_per_entry(self, scene):
        assert set(scene.folder_nodes) == {"/test/src", "/test/src/components", "/test/docs"}
        assert len(scene.file_nodes) == 4
        assert len(scene.terrain_node.children) == 7

    def test_scene_has_floor_camera_and_lights(self):
        scene = TerrainScene()

        assert scene.grid_node.parent is scene.root_node
        assert scene.camera.parent is scene.root_node
        lights = [node.light.type for node in scene.root_node.children if node.light is not None]
        assert lights == ["ambient", "directional"]

    def test_new_snapshot_replaces_old(self, scene):
        """No node from the previous snapshot survives a swap"""
        old_nodes = list(scene.terrain_node.children)

        scene.update_terrain(FilesystemLayout.model_validate(SMALL_LAYOUT))

        assert all(node.parent is None for node in old_nodes)
        assert set(scene.folder_nodes) == {"/other/lib"}
        assert set(scene.file_nodes) == {"/other/lib/util.py"}
        assert len(scene.terrain_node.children) == 2

    def test_folder_placed_at_position(self, scene):
        node = scene.folder_nodes["/test/src"]

        assert tuple(node.position) == (10.0, 3.0, 5.0)
        assert node.height == 2.5
        assert node.label.text == "src"

    def test_missing_positions_fall_back(self):
        """Unpositioned files sit on their folder; unpositioned folders at the origin"""
        scene = TerrainScene()
        layout = FilesystemLayout.model_validate({
            "root": "/r",
            "folders": [
                {"path": "/r/a", "name": "a", "depth": 1, "file_count": 1,
                 "position": {"x": 4.0, "y": 1.0, "z": -2.0}},
                {"path": "/r/b", "name": "b", "depth": 1, "file_count": 0},
            ],
            "files": [{"path": "/r/a/x", "name": "x", "folder": "/r/a", "size": 1}],
            "scanned_at": "now",
        })

        scene.update_terrain(layout)

        assert tuple(scene.file_nodes["/r/a/x"].position) == (4.0, 1.0, -2.0)
        assert tuple(scene.folder_nodes["/r/b"].position) == (0.0, 0.0, 0.0)
        assert scene.folder_nodes["/r/b"].height == 3.0

    def test_clear_terrain(self, scene):
        scene.clear_terrain()

        assert scene.terrain_node.children == []
        assert scene.index is None


class TestRiseAnimation:
    """Tests for the animated snapshot swap"""

    @pytest.mark.asyncio
    async def test_nodes_end_in_place(self, layout):
        scene = TerrainScene()
        animation = TerrainAnimation(batch_size=2, stagger=0.0, batch_delay=0.0, rise_duration=0.01)

        await scene.update_terrain_with_animation(layout, animation)
        scene.update(1.0)

        node = scene.folder_nodes["/test/src"]
        assert node.position[1] == pytest.approx(3.0)
        assert node.opacity == pytest.approx(1.0)
        assert all(not n.has_action("rise") for n in scene.terrain_node.children)

    @pytest.mark.asyncio
    async def test_nodes_start_below_and_transparent(self, layout):
        scene = TerrainScene()
        animation = TerrainAnimation(batch_size=1, batch_delay=10.0)

        task = asyncio.create_task(scene.update_terrain_with_animation(layout, animation))
        await asyncio.sleep(0)

        node = scene.folder_nodes["/test/docs"]
        assert node.position[1] == pytest.approx(1.0)
        assert node.opacity == 0.0

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_wave_releases_shallow_nodes_first(self, layout):
        scene = TerrainScene()
        animation = TerrainAnimation(mode="wave", wave_delay=10.0)

        task = asyncio.create_task(scene.update_terrain_with_animation(layout, animation))
        await asyncio.sleep(0)

        assert scene.folder_nodes["/test/src"].has_action("rise")
        assert scene.file_nodes["/test/README.md"].has_action("rise")
        assert not scene.folder_nodes["/test/src/components"].has_action("rise")
        assert not scene.file_nodes["/test/src/index.ts"].has_action("rise")

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_newer_snapshot_supersedes_animation(self, layout):
        """Remaining batches of an older snapshot are dropped"""
        scene = TerrainScene()
        animation = TerrainAnimation(mode="wave", wave_delay=0.01, rise_duration=0.01)

        task = asyncio.create_task(scene.update_terrain_with_animation(layout, animation))
        await asyncio.sleep(0)
        deeper = scene.folder_nodes["/test/src/components"]

        scene.update_terrain(FilesystemLayout.model_validate(SMALL_LAYOUT))
        await asyncio.wait_for(task, 1.0)

        assert deeper.parent is None
        assert not deeper.has_action("rise")
        assert set(scene.folder_nodes) == {"/other/lib"}
        assert not scene.folder_nodes["/other/lib"].has_action("rise")


class TestHover:
    """Tests for picking, highlights and labels"""

    def test_highlight_folder_hierarchy(self, scene):
        scene.highlight_hierarchy("/test/src")

        assert scene.highlighted_paths == {
            "/test/src",
            "/test/src/components",
            "/test/src/index.ts",
            "/test/src/app.ts",
            "/test/src/components/button.tsx",
        }
        assert scene.folder_nodes["/test/src"].highlighted
        assert scene.file_nodes["/test/src/components/button.tsx"].highlighted
        assert scene.folder_nodes["/test/docs"].dimmed
        assert scene.folder_nodes["/test/docs"].pyramid.opacity == 0.25
        assert scene.file_nodes["/test/README.md"].dimmed

    def test_highlight_includes_ancestors(self, scene):
        scene.highlight_hierarchy("/test/src/components")

        assert scene.folder_nodes["/test/src"].highlighted
        assert scene.file_nodes["/test/src/components/button.tsx"].highlighted
        assert scene.file_nodes["/test/src/index.ts"].dimmed

    def test_clear_all_highlights(self, scene):
        scene.highlight_hierarchy("/test/src")

        scene.clear_all_highlights()

        assert scene.highlighted_paths == set()
        nodes = list(scene.folder_nodes.values()) + list(scene.file_nodes.values())
        assert not any(node.dimmed or node.highlighted for node in nodes)

    def test_highlight_unknown_folder_clears(self, scene):
        scene.highlight_hierarchy("/test/src")

        scene.highlight_hierarchy("/nowhere")

        assert scene.highlighted_paths == set()

    def test_node_info_at_folder(self, scene):
        x, y = scene.camera.project(scene.folder_nodes["/test/docs"].world_position)

        info = scene.node_info_at(x, y)

        assert info.path == "/test/docs"
        assert info.name == "docs"
        assert info.is_folder

    def test_node_info_at_empty_space(self, scene):
        assert scene.node_info_at(0.0, 0.0) is None

    def test_node_info(self, scene):
        info = scene.node_info("/test/src/app.ts")

        assert info.name == "app.ts"
        assert not info.is_folder
        assert scene.node_info("/nowhere") is None
        assert scene.node_info(None) is None

    def test_file_label_shown_on_hover(self, scene):
        scene.show_label_for("/test/src/app.ts")

        assert not scene.file_nodes["/test/src/app.ts"].label.hidden
        assert scene.file_nodes["/test/src/index.ts"].label.hidden

        scene.hide_all_labels()

        assert scene.file_nodes["/test/src/app.ts"].label.hidden

    def test_agent_target_highlights_folder(self, scene):
        position = scene.highlight_agent_target("/test/src/index.ts")

        assert position == Position(x=10.0, y=3.0, z=5.0)
        assert scene.folder_nodes["/test/src"].highlighted

    def test_agent_target_outside_terrain(self, scene):
        assert scene.highlight_agent_target("/elsewhere/x.py") is None
        assert scene.highlight_agent_target(None) is None

    def test_root_folder_highlights_whole_tree(self, layout):
        """A snapshot that lists its root as a folder highlights and hovers like any other"""
        rooted = layout.model_copy(update={
            "folders": [Folder(path="/test", name="test", depth=0, file_count=1,
                               position=Position(x=0.0, y=0.0, z=0.0))] + layout.folders,
        })
        scene = TerrainScene()
        scene.update_terrain(rooted)

        position = scene.highlight_agent_target("/test/README.md")

        assert position == Position(x=0.0, y=0.0, z=0.0)
        assert len(scene.highlighted_paths) == 8
        assert not scene.folder_nodes["/test/docs"].dimmed

    def test_pick_upper_half_of_tall_pyramid(self):
        """Hovering near the apex of a tall folder still finds it"""
        scene = TerrainScene()
        scene.update_terrain(FilesystemLayout(
            root="/r",
            folders=[Folder(path="/r/tall", name="tall", depth=1, file_count=0,
                            position=Position(x=0.0, y=0.0, z=0.0), height=10.0)],
            files=[],
            scanned_at="now",
        ))

        x, y = scene.camera.project((0.0, 8.0, 0.0))
        info = scene.node_info_at(x, y)

        assert info is not None
        assert info.path == "/r/tall"


class TestAgents:
    """Tests for agent lifecycle and events"""

    @pytest.fixture
    def spawned(self, scene):
        scene.spawn_agent(AgentSpawn(agent_id="agent-1", position=Position(x=0, y=0, z=0)))
        return scene

    def test_spawn_adds_agent(self, spawned):
        agent = spawned.agents["agent-1"]

        assert agent.parent is spawned.agents_node
        assert agent.opacity == 0.0

        spawned.update(0.3)
        assert agent.opacity == pytest.approx(1.0)

    def test_spawn_is_idempotent(self, spawned):
        again = spawned.spawn_agent(AgentSpawn(agent_id="agent-1", position=Position(x=5, y=0, z=5)))

        assert again is None
        assert len(spawned.agents_node.children) == 1

    def test_despawn(self, spawned):
        agent = spawned.agents["agent-1"]

        assert spawned.despawn_agent(AgentDespawn(agent_id="agent-1"))
        assert "agent-1" not in spawned.agents

        spawned.update(1.0)
        assert agent.parent is None

    def test_despawn_unknown_is_noop(self, spawned):
        assert not spawned.despawn_agent(AgentDespawn(agent_id="ghost"))
        assert len(spawned.agents) == 1

    def test_event_for_unknown_agent_dropped(self, spawned):
        assert not spawned.handle_agent_event(event(agent_id="ghost"))

    def test_move_event(self, spawned):
        target = Position(x=10.0, y=0.0, z=0.0)

        spawned.handle_agent_event(event(event_type="move", target_position=target))

        assert spawned.agents["agent-1"].state.current_target == target

    def test_move_without_target_is_skipped(self, spawned):
        spawned.handle_agent_event(event(event_type="move"))

        assert not spawned.agents["agent-1"].state.is_moving

    def test_tool_event_shows_icon(self, spawned):
        spawned.handle_agent_event(event(event_type="read", tool_name="Read", target_path="/test/src/app.ts"))
        agent = spawned.agents["agent-1"]

        assert agent.tool_icon.emoji == "📖"
        assert agent.path_label.text == "app.ts"

    def test_idle_hides_tool_icon(self, spawned):
        spawned.handle_agent_event(event(event_type="bash", tool_name="Bash"))
        spawned.handle_agent_event(event(event_type="idle"))

        assert spawned.agents["agent-1"].tool_icon is None

    def test_thought_event(self, spawned):
        spawned.handle_agent_event(event(thought="Looking around"))

        assert spawned.agents["agent-1"].thought_bubble.text == "Looking around"

    def test_move_unknown_agent(self, spawned):
        assert not spawned.move_agent("ghost", Position(x=1, y=0, z=0))
