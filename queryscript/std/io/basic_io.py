import sys
from typing import List, Optional, TextIO


class ConsoleSink:
    """Writes each rendering as one line to a text stream.

    The stream defaults to whatever `sys.stdout` is at the time of writing.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def emit(self, text: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(text + '\n')
        stream.flush()


class BufferSink:
    """Keeps every rendering in memory."""

    def __init__(self):
        self.lines: List[str] = []

    def emit(self, text: str) -> None:
        self.lines.append(text)
