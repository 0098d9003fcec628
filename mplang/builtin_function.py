from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from mplang.errors import InvalidOperation


@dataclass
class BuiltinFunction:
    name: str
    arity: Optional[int]  # None means variadic
    fn: Callable[[List[Any]], Any]

    def __call__(self, args: List[Any]) -> Any:
        if self.arity is not None and len(args) != self.arity:
            raise InvalidOperation(f"{self.name} expects {self.arity} arguments, got {len(args)}")
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
