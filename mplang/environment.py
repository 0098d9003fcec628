from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import UndefinedVariable


@dataclass
class Variable:
    """A variable binding; functions are bound directly, without this wrapper."""
    value: Any


@dataclass
class Frame:
    parent: Optional[int]
    bindings: Dict[str, Any] = field(default_factory=dict)
    # Variable lookups stop after an isolated frame (function call frames).
    isolated: bool = False


class Environment:
    """Scope chain stored as an arena of frames.

    Frame 0 is the root and holds the built-ins. Entering a scope appends a
    frame whose parent is the current one (or an explicit index, for
    function calls); leaving it truncates the arena back, so frames are
    released in LIFO order. Writes always go to the current frame.
    """
    def __init__(self):
        self.frames: List[Frame] = [Frame(None)]
        self.current = 0

    def push_scope(self, parent: Optional[int] = None, isolated: bool = False) -> int:
        """Enter a new frame and return the index to hand back to `pop_scope`."""
        previous = self.current
        if parent is None:
            parent = self.current
        self.frames.append(Frame(parent, isolated=isolated))
        self.current = len(self.frames) - 1
        return previous

    def pop_scope(self, previous: int):
        del self.frames[self.current:]
        self.current = previous

    def define(self, name: str, value: Any):
        self.frames[self.current].bindings[name] = Variable(value)

    def define_function(self, name: str, func: Any):
        self.frames[self.current].bindings[name] = func

    def get(self, name: str) -> Any:
        index: Optional[int] = self.current
        while index is not None:
            frame = self.frames[index]
            if name in frame.bindings:
                binding = frame.bindings[name]
                if isinstance(binding, Variable):
                    return binding.value
                raise UndefinedVariable(name)
            if frame.isolated:
                break
            index = frame.parent
        raise UndefinedVariable(name)

    def get_function(self, name: str) -> Any:
        index: Optional[int] = self.current
        while index is not None:
            frame = self.frames[index]
            if name in frame.bindings:
                binding = frame.bindings[name]
                if isinstance(binding, Variable):
                    raise UndefinedVariable(name)
                return binding
            index = frame.parent
        raise UndefinedVariable(name)
