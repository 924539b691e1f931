from typing import Literal, Optional
from pydantic import BaseModel

from agentarium_client.schemas.filesystem import Position


class AgentEvent(BaseModel):
    """Agent activity pushed by the API"""
    type: Literal["agent_event"] = "agent_event"
    agent_id: str
    event_type: str
    target_path: Optional[str] = None
    target_position: Optional[Position] = None
    thought: Optional[str] = None
    tool_name: Optional[str] = None
    timestamp: int


class AgentSpawn(BaseModel):
    """Agent spawn event"""
    type: Literal["agent_spawn"] = "agent_spawn"
    agent_id: str
    position: Position
    color: str = "#e07850"


class AgentDespawn(BaseModel):
    """Agent despawn event"""
    type: Literal["agent_despawn"] = "agent_despawn"
    agent_id: str


class TerrainLoading(BaseModel):
    """Backend started scanning a directory"""
    type: Literal["terrain_loading"] = "terrain_loading"
    session_id: Optional[str] = None
    cwd: Optional[str] = None
    message: str = "Creating world..."


class TerrainComplete(BaseModel):
    """Backend finished scanning and sent the layout"""
    type: Literal["terrain_complete"] = "terrain_complete"
    session_id: Optional[str] = None
    folder_count: int
    file_count: int


class HealthResponse(BaseModel):
    """Response from the health endpoint"""
    status: str
