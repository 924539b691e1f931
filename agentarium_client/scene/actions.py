"""
Timed actions that animate scene nodes.

Actions are reusable templates: running one on a node creates a runner that
holds the per-run state. Runners are advanced by SceneNode.update(dt) and hand
back any time they did not use, so a long frame can finish several steps of a
sequence at once.
"""

import math
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from agentarium_client.scene.node import SceneNode


class TimingMode(str, Enum):
    LINEAR = "linear"
    EASE_IN_OUT = "ease_in_out"


def apply_timing(mode: TimingMode, t: float) -> float:
    if mode == TimingMode.EASE_IN_OUT:
        return 0.5 - 0.5 * math.cos(math.pi * t)
    return t


class ActionRunner:
    done = False

    def advance(self, dt: float) -> float:
        """Advance by dt seconds and return the unused remainder"""
        raise NotImplementedError


class Action:
    """Interpolates a node property over duration seconds"""

    def __init__(self, duration: float = 0.0, timing_mode: TimingMode = TimingMode.LINEAR):
        self.duration = max(0.0, duration)
        self.timing_mode = timing_mode

    def runner(self, node: "SceneNode") -> ActionRunner:
        return _TimedRunner(self, node)

    def begin(self, node: "SceneNode"):
        return None

    def apply(self, node: "SceneNode", state, t: float, previous_t: float):
        pass


class _TimedRunner(ActionRunner):
    def __init__(self, action: Action, node: "SceneNode"):
        self.action = action
        self.node = node
        self.elapsed = 0.0
        self.progress = 0.0
        self.started = False
        self.state = None

    def advance(self, dt: float) -> float:
        if self.done:
            return dt
        if not self.started:
            self.state = self.action.begin(self.node)
            self.started = True

        duration = self.action.duration
        if duration <= 0:
            self._apply(1.0)
            self.done = True
            return dt

        step = min(dt, duration - self.elapsed)
        self.elapsed += step
        self._apply(apply_timing(self.action.timing_mode, min(1.0, self.elapsed / duration)))
        if self.elapsed >= duration:
            self.done = True
        return dt - step

    def _apply(self, t: float):
        self.action.apply(self.node, self.state, t, self.progress)
        self.progress = t


class MoveTo(Action):
    def __init__(self, target, duration: float, timing_mode: TimingMode = TimingMode.LINEAR):
        super().__init__(duration, timing_mode)
        self.target = np.asarray(target, dtype=float)

    def begin(self, node):
        return node.position.copy()

    def apply(self, node, start, t, previous_t):
        node.position = start + (self.target - start) * t


class MoveBy(Action):
    """Relative move; deltas add up so it composes with other moves"""

    def __init__(self, delta, duration: float, timing_mode: TimingMode = TimingMode.LINEAR):
        super().__init__(duration, timing_mode)
        self.delta = np.asarray(delta, dtype=float)

    def apply(self, node, state, t, previous_t):
        node.position = node.position + self.delta * (t - previous_t)


class FadeTo(Action):
    def __init__(self, opacity: float, duration: float, timing_mode: TimingMode = TimingMode.LINEAR):
        super().__init__(duration, timing_mode)
        self.opacity = opacity

    def begin(self, node):
        return node.opacity

    def apply(self, node, start, t, previous_t):
        node.opacity = start + (self.opacity - start) * t


class ScaleTo(Action):
    def __init__(self, scale: float, duration: float, timing_mode: TimingMode = TimingMode.LINEAR):
        super().__init__(duration, timing_mode)
        self.scale = scale

    def begin(self, node):
        return node.scale

    def apply(self, node, start, t, previous_t):
        node.scale = start + (self.scale - start) * t


class RotateBy(Action):
    def __init__(self, angles, duration: float, timing_mode: TimingMode = TimingMode.LINEAR):
        super().__init__(duration, timing_mode)
        self.angles = np.asarray(angles, dtype=float)

    def apply(self, node, state, t, previous_t):
        node.euler_angles = node.euler_angles + self.angles * (t - previous_t)


class Wait(Action):
    pass


class Run(Action):
    """Calls block once, instantly"""

    def __init__(self, block: Callable[[], None]):
        super().__init__(0.0)
        self.block = block

    def apply(self, node, state, t, previous_t):
        self.block()


class RemoveFromParent(Action):
    def apply(self, node, state, t, previous_t):
        node.remove_from_parent()


class SequenceAction(Action):
    """Runs actions one after another; leftover time flows into the next"""

    def __init__(self, actions: Sequence[Action]):
        super().__init__(sum(a.duration for a in actions))
        self.actions = list(actions)

    def runner(self, node):
        return _SequenceRunner(self.actions, node)


class _SequenceRunner(ActionRunner):
    def __init__(self, actions: List[Action], node: "SceneNode"):
        self.actions = actions
        self.node = node
        self.index = 0
        self.current: Optional[ActionRunner] = None

    def advance(self, dt: float) -> float:
        while self.index < len(self.actions):
            if self.current is None:
                self.current = self.actions[self.index].runner(self.node)
            dt = self.current.advance(dt)
            if not self.current.done:
                return 0.0
            self.index += 1
            self.current = None
        self.done = True
        return dt


class Group(Action):
    """Runs actions side by side; finishes with the longest"""

    def __init__(self, actions: Sequence[Action]):
        super().__init__(max((a.duration for a in actions), default=0.0))
        self.actions = list(actions)

    def runner(self, node):
        return _GroupRunner([a.runner(node) for a in self.actions])


class _GroupRunner(ActionRunner):
    def __init__(self, runners: List[ActionRunner]):
        self.runners = runners

    def advance(self, dt: float) -> float:
        leftover = dt
        for runner in self.runners:
            if not runner.done:
                leftover = min(leftover, runner.advance(dt))
        if all(r.done for r in self.runners):
            self.done = True
            return leftover
        return 0.0


class RepeatForever(Action):
    def __init__(self, action: Action):
        super().__init__(action.duration)
        self.action = action

    def runner(self, node):
        return _RepeatRunner(self.action, node)


class _RepeatRunner(ActionRunner):
    def __init__(self, action: Action, node: "SceneNode"):
        self.action = action
        self.node = node
        self.current = action.runner(node)

    def advance(self, dt: float) -> float:
        dt = self.current.advance(dt)
        # Zero-length cycles run once per frame instead of spinning
        while self.current.done:
            self.current = self.action.runner(self.node)
            if self.action.duration <= 0 or dt <= 0:
                break
            dt = self.current.advance(dt)
        return 0.0


def move_to(target, duration: float, timing_mode: TimingMode = TimingMode.LINEAR) -> Action:
    return MoveTo(target, duration, timing_mode)


def move_by(delta, duration: float, timing_mode: TimingMode = TimingMode.LINEAR) -> Action:
    return MoveBy(delta, duration, timing_mode)


def fade_to(opacity: float, duration: float) -> Action:
    return FadeTo(opacity, duration)


def fade_in(duration: float) -> Action:
    return FadeTo(1.0, duration)


def fade_out(duration: float) -> Action:
    return FadeTo(0.0, duration)


def scale_to(scale: float, duration: float, timing_mode: TimingMode = TimingMode.LINEAR) -> Action:
    return ScaleTo(scale, duration, timing_mode)


def rotate_by(angles, duration: float) -> Action:
    return RotateBy(angles, duration)


def wait(duration: float) -> Action:
    return Wait(duration)


def run(block: Callable[[], None]) -> Action:
    return Run(block)


def remove_from_parent() -> Action:
    return RemoveFromParent()


def sequence(actions: Sequence[Action]) -> Action:
    return SequenceAction(actions)


def group(actions: Sequence[Action]) -> Action:
    return Group(actions)


def repeat_forever(action: Action) -> Action:
    return RepeatForever(action)
