import logging
from typing import Any, Dict, List

from .basic_io import BufferSink, ConsoleSink
from queryscript.builtin_function import NativeFunction
from queryscript.types import NoneVal, to_string

logger = logging.getLogger(__name__)


def populate_io_natives(sink) -> Dict[str, NativeFunction]:
    """Return the natives that write to the diagnostic `sink`."""

    def std_print(args: List[Any]) -> Any:
        logger.debug("print %d value(s)", len(args))
        for arg in args:
            sink.emit(to_string(arg))
        return NoneVal()

    return {
        'print': NativeFunction('print', std_print),
    }


__all__ = ['BufferSink', 'ConsoleSink', 'populate_io_natives']
