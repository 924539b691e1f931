"""
Agentarium client.

Connects to the Agentarium API, turns its pushed filesystem and agent events
into a 3D scene graph and keeps the window's view models in sync.
"""

__version__ = "0.1.0"
