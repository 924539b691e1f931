from agentarium_client.scene.nodes.agent import AgentNode
from agentarium_client.scene.nodes.file import FileNode
from agentarium_client.scene.nodes.folder import FolderNode
from agentarium_client.scene.nodes.grid import GridNode
from agentarium_client.scene.nodes.label import LabelNode
from agentarium_client.scene.nodes.thought_bubble import ThoughtBubbleNode
from agentarium_client.scene.nodes.tool_icon import ToolIconNode

__all__ = [
    "AgentNode",
    "FileNode",
    "FolderNode",
    "GridNode",
    "LabelNode",
    "ThoughtBubbleNode",
    "ToolIconNode",
]
