from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass(frozen=True)
class NativeFunction:
    """Opaque handle to a host function callable from scripts by name.

    `fn` receives the list of evaluated arguments and returns a value, or
    raises a QueryError.
    """
    name: str
    fn: Callable[[List[Any]], Any]

    def __call__(self, args: List[Any]) -> Any:
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<native {self.name}>"
