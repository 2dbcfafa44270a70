"""Native functions available to every QueryScript program."""

from typing import Callable, Dict, Mapping, Optional

from queryscript.builtin_function import NativeFunction
from .io import BufferSink, ConsoleSink, populate_io_natives


def as_native(name: str, fn: Callable) -> NativeFunction:
    if isinstance(fn, NativeFunction):
        return fn
    return NativeFunction(name, fn)


def standard_natives(sink, extra: Optional[Mapping[str, Callable]] = None) -> Dict[str, NativeFunction]:
    """Build the name -> native table injected into a fresh environment.

    `extra` holds host supplied functions; they are registered after the
    standard ones and may shadow them.
    """
    natives: Dict[str, NativeFunction] = {}
    natives.update(populate_io_natives(sink))
    for name, fn in (extra or {}).items():
        natives[name] = as_native(name, fn)
    return natives


__all__ = ['BufferSink', 'ConsoleSink', 'as_native', 'standard_natives']
