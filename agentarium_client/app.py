"""
Agentarium client application.

Wires the WebSocket client and HTTP API to the terrain scene and the window's
view models, and drives the scene's render loop. Everything here runs on a
single event loop; WebSocket callbacks are plain synchronous calls on it.
"""

import asyncio
import logging
import time
from typing import Coroutine, Optional, Set

from agentarium_client.api import ApiClient
from agentarium_client.config import Settings
from agentarium_client.errors import ApiError
from agentarium_client.scene.terrain import TerrainAnimation, TerrainScene
from agentarium_client.schemas.events import (
    AgentDespawn, AgentEvent, AgentSpawn, TerrainComplete, TerrainLoading
)
from agentarium_client.schemas.filesystem import FilesystemLayout
from agentarium_client.views.activity import ActivityLog
from agentarium_client.views.directory_picker import DirectoryPicker
from agentarium_client.views.loading import BUILDING_MESSAGE, WorldLoadingOverlay
from agentarium_client.views.status import StatusIndicator
from agentarium_client.views.tooltip import Tooltip
from agentarium_client.websocket import WebSocketClient

logger = logging.getLogger(__name__)

API_OFFLINE_MESSAGE = "API not running"


class AgentariumApp:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        api: Optional[ApiClient] = None,
        client: Optional[WebSocketClient] = None,
        scene: Optional[TerrainScene] = None,
        animation: Optional[TerrainAnimation] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.api = api or ApiClient.from_settings(self.settings)
        self.client = client or WebSocketClient.from_settings(self.settings)
        self.scene = scene or TerrainScene(
            tool_icon_duration=self.settings.tool_icon_duration,
            thought_duration=self.settings.thought_duration,
        )
        self.animation = animation or TerrainAnimation()

        self.api_status = "Checking..."
        self.error_message: Optional[str] = None
        self.loading = WorldLoadingOverlay()
        self.activity = ActivityLog(max_entries=self.settings.activity_log_size)
        self.tooltip: Optional[Tooltip] = None
        self.directory_picker = DirectoryPicker(on_select=self._directory_selected)

        self._last_hovered_path: Optional[str] = None
        self._tasks: Set[asyncio.Task] = set()
        self._stopped = asyncio.Event()

    @property
    def status(self) -> StatusIndicator:
        return StatusIndicator(is_connected=self.client.is_connected, error=self.client.last_error)

    # Lifecycle

    async def start(self):
        """Check the API and open the WebSocket"""
        await self.check_health()
        self.setup_websocket()
        self.client.connect()

    async def check_health(self) -> bool:
        try:
            health = await self.api.health()
        except ApiError as e:
            logger.warning(f"Health check failed: {e}")
            self.api_status = "offline"
            self.error_message = API_OFFLINE_MESSAGE
            return False

        self.api_status = health.status
        self.error_message = None
        return True

    def setup_websocket(self):
        self.client.on_terrain_loading = self.handle_terrain_loading
        self.client.on_filesystem_update = self.handle_filesystem_update
        self.client.on_terrain_complete = self.handle_terrain_complete
        self.client.on_agent_spawn = self.handle_agent_spawn
        self.client.on_agent_despawn = self.handle_agent_despawn
        self.client.on_agent_event = self.handle_agent_event

    async def run(self, fps: float = 60.0):
        """Start, then advance the scene every frame until stop() is called"""
        await self.start()
        frame = 1.0 / fps
        last = time.monotonic()

        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=frame)
            except asyncio.TimeoutError:
                pass
            now = time.monotonic()
            self.scene.update(now - last)
            last = now

        await self.shutdown()

    def stop(self):
        self._stopped.set()

    async def shutdown(self):
        await self.client.disconnect()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.api.close()

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    # WebSocket handlers

    def handle_terrain_loading(self, loading: TerrainLoading):
        self.loading.show(loading.message, cwd=loading.cwd)

    def handle_filesystem_update(self, layout: FilesystemLayout):
        self._spawn(self.rebuild_terrain(layout))

    def handle_terrain_complete(self, complete: TerrainComplete):
        self.loading.set_counts(complete.folder_count, complete.file_count)
        self._spawn(self._hide_loading_after(self.settings.loading_hide_delay))

    def handle_agent_spawn(self, spawn: AgentSpawn):
        self.scene.spawn_agent(spawn)

    def handle_agent_despawn(self, despawn: AgentDespawn):
        self.scene.despawn_agent(despawn)

    def handle_agent_event(self, event: AgentEvent):
        self.scene.handle_agent_event(event)
        self.activity.add_event(event)

        folder_position = self.scene.highlight_agent_target(event.target_path)
        # Events without coordinates still walk the agent to the folder it works in
        if folder_position is not None and event.target_position is None and event.event_type != "idle":
            self.scene.move_agent(event.agent_id, folder_position)

    # Terrain

    async def rebuild_terrain(self, layout: FilesystemLayout):
        self.loading.visible = True
        self.loading.message = BUILDING_MESSAGE
        self.loading.set_counts(len(layout.folders), len(layout.files))

        # A newer snapshot owns the overlay once it replaces this one
        if await self.scene.update_terrain_with_animation(layout, self.animation):
            self.loading.hide()

    async def _hide_loading_after(self, delay: float):
        await asyncio.sleep(delay)
        self.loading.hide()

    async def load_directory(self, path: str) -> bool:
        """Scan a directory through the API and show it as the terrain"""
        self.loading.show("Creating world...", cwd=path)
        try:
            layout = await self.api.get_filesystem(path)
        except ApiError as e:
            logger.error(f"Failed to load filesystem at {path}: {e}")
            self.error_message = e.detail
            self.loading.hide()
            return False

        await self.rebuild_terrain(layout)
        return True

    def _directory_selected(self, path: str):
        self._spawn(self.load_directory(path))

    # Hover

    def mouse_moved(self, x: float, y: float):
        info = self.scene.node_info_at(x, y)
        self.scene.show_label_for(info.path if info else None)

        if info is None:
            self.tooltip = None
            if self._last_hovered_path is not None:
                self._last_hovered_path = None
                self.scene.clear_all_highlights()
            return

        self.tooltip = Tooltip(name=info.name, path=info.path)
        if info.path == self._last_hovered_path:
            return

        self._last_hovered_path = info.path
        if info.is_folder:
            self.scene.highlight_hierarchy(info.path)
        else:
            self.scene.clear_all_highlights()

    def mouse_exited(self):
        self._last_hovered_path = None
        self.tooltip = None
        self.scene.clear_all_highlights()
        self.scene.hide_all_labels()
