from agentarium_client.scene.node import SceneNode
from agentarium_client.scene.terrain import NodeInfo, TerrainAnimation, TerrainScene

__all__ = ["SceneNode", "NodeInfo", "TerrainAnimation", "TerrainScene"]
