"""
WebSocket envelope decoding.

Every frame pushed by the API is a JSON object of the form
``{"type": <tag>, "data": <payload>}``. The tag selects the payload model.
"""

import json
from enum import Enum
from typing import Any, Dict, NamedTuple, Type, Union

from pydantic import BaseModel, ValidationError

from agentarium_client.errors import MessageDecodeError, UnknownMessageType
from agentarium_client.schemas.events import (
    AgentEvent, AgentSpawn, AgentDespawn, TerrainLoading, TerrainComplete
)
from agentarium_client.schemas.filesystem import FilesystemLayout


class MessageType(str, Enum):
    FILESYSTEM = "filesystem"
    AGENT_EVENT = "agent_event"
    AGENT_SPAWN = "agent_spawn"
    AGENT_DESPAWN = "agent_despawn"
    TERRAIN_LOADING = "terrain_loading"
    TERRAIN_COMPLETE = "terrain_complete"


MESSAGE_MODELS: Dict[MessageType, Type[BaseModel]] = {
    MessageType.FILESYSTEM: FilesystemLayout,
    MessageType.AGENT_EVENT: AgentEvent,
    MessageType.AGENT_SPAWN: AgentSpawn,
    MessageType.AGENT_DESPAWN: AgentDespawn,
    MessageType.TERRAIN_LOADING: TerrainLoading,
    MessageType.TERRAIN_COMPLETE: TerrainComplete,
}


class Message(NamedTuple):
    type: MessageType
    payload: BaseModel


def decode_message(raw: Union[str, bytes]) -> Message:
    """
    Decode a raw frame into a typed message.

    Args:
        raw: Text frame, or binary frame holding UTF-8 JSON

    Returns:
        Message with the tag and validated payload

    Raises:
        UnknownMessageType: envelope is valid but the tag is not known
        MessageDecodeError: anything else wrong with the frame
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MessageDecodeError(f"Frame is not valid UTF-8: {e}") from e

    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MessageDecodeError(f"Frame is not valid JSON: {e}") from e

    if not isinstance(envelope, dict):
        raise MessageDecodeError("Invalid message format: envelope is not an object")

    tag = envelope.get("type")
    if not isinstance(tag, str) or "data" not in envelope:
        raise MessageDecodeError("Invalid message format: missing type or data")

    try:
        message_type = MessageType(tag)
    except ValueError:
        raise UnknownMessageType(tag) from None

    try:
        payload = MESSAGE_MODELS[message_type].model_validate(envelope["data"])
    except ValidationError as e:
        raise MessageDecodeError(f"Invalid {tag} payload: {e}") from e

    return Message(message_type, payload)


def encode_message(message_type: Union[MessageType, str], data: Dict[str, Any]) -> str:
    """Serialize a payload into the same envelope the API broadcasts"""
    tag = message_type.value if isinstance(message_type, MessageType) else message_type
    return json.dumps({"type": tag, "data": data}, default=str)
