"""writer.py - Adapt a line-emitting function into a binary stream.

``make_line_writer`` lets any function taking one line of text act as a
writable byte sink. This is how output from code that only knows how to write
to a stream (subprocess pipes, ``shutil.copyfileobj``) ends up in the log::

    log = contrail.new("worker")
    out = contrail.make_line_writer(log.info)
    out.write(b"first\\nsecond\\n")   # -> log.info("first"), log.info("second"), log.info("")

Each ``write()`` call is split on its own; a line spread over two writes is
emitted as two partial lines. To use ``print(file=...)``, wrap the writer in
``io.TextIOWrapper(io.BufferedWriter(writer), line_buffering=True)`` so that
every write ends on a line boundary.
"""

import io
from typing import Callable

Emit = Callable[[str], None]


class LineWriter(io.RawIOBase):
    """Writable raw stream that calls ``emit`` once per newline-separated fragment.

    Splitting follows ``bytes.split(b"\\n")``: a trailing newline produces a
    trailing empty fragment, which is delivered as ``""``. Fragments are
    decoded as UTF-8 with undecodable bytes replaced.

    ``write()`` always reports the full buffer as written. Exceptions raised
    by ``emit`` propagate unchanged.

    Attributes:
        emit: The callable receiving each decoded line.
    """

    def __init__(self, emit: Emit, encoding: str = "utf-8") -> None:
        super().__init__()
        self.emit = emit
        self._encoding = encoding

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        data = bytes(b)
        for fragment in data.split(b"\n"):
            self.emit(fragment.decode(self._encoding, "replace"))
        return len(data)


def make_line_writer(emit: Emit) -> LineWriter:
    """Return a ``LineWriter`` that forwards each written line to ``emit``."""
    return LineWriter(emit)
