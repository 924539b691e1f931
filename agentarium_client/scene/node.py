import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

import numpy as np

from agentarium_client.scene.actions import Action, ActionRunner
from agentarium_client.scene.geometry import Geometry, Light

logger = logging.getLogger(__name__)

_anonymous_keys = itertools.count()


@dataclass
class _RunningAction:
    runner: ActionRunner
    completion: Optional[Callable[[], None]]


class SceneNode:
    """
    A node in the scene graph.

    Positions are relative to the parent; only translation and uniform
    scale are composed into world coordinates.
    """

    def __init__(self, name: Optional[str] = None, geometry: Optional[Geometry] = None, position=(0.0, 0.0, 0.0)):
        self.name = name
        self.geometry = geometry
        self.position = np.asarray(position, dtype=float)
        self.euler_angles = np.zeros(3)
        self.scale = 1.0
        self.opacity = 1.0
        self.hidden = False
        self.light: Optional[Light] = None
        self.billboard = False
        self.parent: Optional["SceneNode"] = None
        self.children: List["SceneNode"] = []
        self._actions: Dict[str, _RunningAction] = {}

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name!r}>"

    # Hierarchy

    def add_child(self, node: "SceneNode") -> "SceneNode":
        if node.parent is not None:
            node.remove_from_parent()
        node.parent = self
        self.children.append(node)
        return node

    def remove_from_parent(self):
        if self.parent is not None:
            if self in self.parent.children:
                self.parent.children.remove(self)
            self.parent = None

    def remove_all_children(self):
        for child in list(self.children):
            child.remove_from_parent()

    def child_nodes(self) -> Iterator["SceneNode"]:
        """Every node below this one, depth-first"""
        for child in self.children:
            yield child
            yield from child.child_nodes()

    def child_named(self, name: str) -> Optional["SceneNode"]:
        for node in self.child_nodes():
            if node.name == name:
                return node
        return None

    @property
    def world_position(self) -> np.ndarray:
        if self.parent is None:
            return self.position.copy()
        return self.parent.world_position + self.position * self.parent.world_scale

    @property
    def pick_center(self) -> np.ndarray:
        """Center of the bounding sphere used for hover picking"""
        return self.world_position

    @property
    def world_scale(self) -> float:
        if self.parent is None:
            return self.scale
        return self.parent.world_scale * self.scale

    @property
    def presented_opacity(self) -> float:
        """Opacity after multiplying in every ancestor"""
        opacity = self.opacity
        node = self.parent
        while node is not None:
            opacity *= node.opacity
            node = node.parent
        return opacity

    # Actions

    def run_action(self, action: Action, key: Optional[str] = None, completion: Optional[Callable[[], None]] = None):
        """Run an action; a keyed action replaces any running one with the same key"""
        if key is None:
            key = f"_action_{next(_anonymous_keys)}"
        self._actions[key] = _RunningAction(action.runner(self), completion)

    def has_action(self, key: str) -> bool:
        return key in self._actions

    def remove_action(self, key: str):
        self._actions.pop(key, None)

    def remove_all_actions(self):
        self._actions.clear()

    @property
    def action_keys(self) -> List[str]:
        return list(self._actions)

    def update(self, dt: float):
        """Advance running actions on this node and its subtree"""
        for key, running in list(self._actions.items()):
            if self._actions.get(key) is not running:
                continue
            running.runner.advance(dt)
            if running.runner.done:
                if self._actions.get(key) is running:
                    del self._actions[key]
                if running.completion is not None:
                    running.completion()

        for child in list(self.children):
            child.update(dt)
