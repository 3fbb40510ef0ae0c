"""engine.py - Tag handles and glog-style line output on top of stdlib logging.

This module is the leveled-logging engine that contrail loggers delegate to.
It is a thin layer over the standard ``logging`` package:

    Destination:  A ``logging.Logger`` owning exactly one ``DestinationHandler``.
                  It is the shared resource behind a family of tags; a parent
                  tag and every tag derived from it write through the same
                  handler and therefore the same lock and stream.

    Tag:          A handle binding a rendered tag text to a destination. Every
                  line written through a Tag carries the text right after the
                  call-site header. ``Tag.new()`` derives a sibling handle with
                  different text on the same destination.

    Verbose:      A V-gated view of a Tag exposing only the info methods.

Line format produced by ``GlogFormatter``::

    I0102 15:04:05.123456 1402342 server.py:42] ctx="api" trace="a1b2"] started
    ^^^^^ ^^^^^^^^^^^^^^^ ^^^^^^^ ^^^^^^^^^^^^  ^^^^^^^^^^^^^^^^^^^^^  ^^^^^^^
    level+date  time      thread   call site    tag                    message

Thread-safety:
    ``logging.Handler.handle()`` serialises ``emit()`` with the handler's
    RLock, and ``DestinationHandler.emit()`` performs a single
    ``stream.write()`` per record, so the header, tag and message of one call
    are never interleaved with another call's output.
"""

import io
import logging
import os
import sys
import threading
from datetime import datetime
from typing import Any, Mapping, Optional

from .verbosity import Verbosity, get_verbosity

DEFAULT_DESTINATION = "contrail"

FATAL = logging.CRITICAL
FATAL_EXIT_CODE = 255

LEVEL_LETTERS = {
    logging.DEBUG: "D",
    logging.INFO: "I",
    logging.WARNING: "W",
    logging.ERROR: "E",
    FATAL: "F",
}

# Frames between logging.Logger.log() and user code: Tag._emit, the public
# method (Tag.info, Verbose.info, ...), then the caller.
_CALLER = 3

_default_lock = threading.Lock()


# ---------------------------------------------------------------------------
# Formatting and output
# ---------------------------------------------------------------------------


class GlogFormatter(logging.Formatter):
    """Render records as ``<header>] <tag>] <message>`` lines.

    The tag is read from the ``contrail_tag`` record attribute set by
    ``Tag._emit``. Records without one (e.g. from a plain stdlib logger
    sharing the handler) are rendered without the tag segment.

    A single trailing newline on the message is dropped, since the handler
    already terminates every record with one.
    """

    def format_header(self, record: logging.LogRecord) -> str:
        """Return ``Lmmdd hh:mm:ss.uuuuuu threadid file:line] ``."""
        when = datetime.fromtimestamp(record.created)
        letter = LEVEL_LETTERS.get(record.levelno) or record.levelname[:1]
        return (
            f"{letter}{when:%m%d %H:%M:%S}.{when.microsecond:06d} "
            f"{record.thread or 0:7d} {record.filename}:{record.lineno}] "
        )

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if message.endswith("\n"):
            message = message[:-1]

        tag = getattr(record, "contrail_tag", None)
        if tag is None:
            line = f"{self.format_header(record)}{message}"
        else:
            line = f"{self.format_header(record)}{tag}] {message}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if record.stack_info:
            line = f"{line}\n{self.formatStack(record.stack_info)}"
        return line


def _is_binary(stream: Any) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    return "b" in getattr(stream, "mode", "")


class DestinationHandler(logging.StreamHandler):
    """StreamHandler that accepts text or binary streams.

    Text streams receive the formatted line as ``str``; binary streams
    (``io.BytesIO``, socket files, ``LineWriter``) receive it encoded.

    Args:
        stream: Any writable file-like object. Defaults to ``sys.stderr``.
        encoding: Encoding used for binary streams. Defaults to ``"utf-8"``.
    """

    def __init__(self, stream=None, encoding: str = "utf-8") -> None:
        super().__init__(stream)
        self.encoding = encoding
        self.setFormatter(GlogFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + self.terminator
            stream = self.stream
            if _is_binary(stream):
                stream.write(line.encode(self.encoding, "replace"))
            else:
                stream.write(line)
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


# ---------------------------------------------------------------------------
# Destinations
# ---------------------------------------------------------------------------


def default_destination() -> logging.Logger:
    """Return the shared ``"contrail"`` logger, installing its handler once.

    The logger does not propagate, so application-level logging setup never
    duplicates contrail lines.
    """
    logger = logging.getLogger(DEFAULT_DESTINATION)
    if not logger.handlers:
        with _default_lock:
            if not logger.handlers:
                logger.addHandler(DestinationHandler())
                logger.setLevel(logging.INFO)
                logger.propagate = False
    return logger


def set_default_stream(stream) -> None:
    """Point the default destination at ``stream`` (``None`` for stderr).

    Only the contrail ``DestinationHandler`` is redirected; handlers an
    application attached to the ``"contrail"`` logger itself are left alone,
    and a ``DestinationHandler`` is added next to them when none is present.
    """
    logger = default_destination()
    if stream is None:
        stream = sys.stderr
    for handler in logger.handlers:
        if isinstance(handler, DestinationHandler):
            handler.setStream(stream)
            return
    logger.addHandler(DestinationHandler(stream))


def writer_destination(name: str, stream) -> logging.Logger:
    """Create a private destination that writes every record to ``stream``.

    The logger is deliberately not registered with ``logging.getLogger`` so
    that it lives exactly as long as the tags that reference it.
    """
    logger = logging.Logger(f"{DEFAULT_DESTINATION}.{name}", logging.INFO)
    logger.propagate = False
    logger.addHandler(DestinationHandler(stream))
    return logger


# ---------------------------------------------------------------------------
# Tag handle
# ---------------------------------------------------------------------------


def _join(args) -> str:
    return " ".join(str(arg) for arg in args)


class _Printf:
    """Message that renders ``format % args`` when the record is formatted.

    Unlike a plain ``(msg, args)`` record, the format string is always
    processed, so ``infof("100%% done")`` writes ``100% done``. A single
    non-empty mapping argument is used for ``%(name)s`` lookups, as in
    ``logging``.
    """

    __slots__ = ("format", "args")

    def __init__(self, format: str, args: tuple) -> None:
        if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
            args = args[0]
        self.format = format
        self.args = args

    def __str__(self) -> str:
        return self.format % self.args


class Tag:
    """A handle that prefixes every line it writes with a fixed tag text.

    Attributes:
        _text (str): Rendered tag, e.g. ``ctx="api" trace="a1b2"``.
        _destination (logging.Logger): Shared destination logger.
        _verbosity (Verbosity): Threshold consulted by ``v()`` views.
    """

    __slots__ = ("_text", "_destination", "_verbosity")

    def __init__(
        self,
        text: str,
        destination: Optional[logging.Logger] = None,
        verbosity: Optional[Verbosity] = None,
    ) -> None:
        self._text = text
        self._destination = destination if destination is not None else default_destination()
        self._verbosity = verbosity if verbosity is not None else get_verbosity()

    def new(self, text: str) -> "Tag":
        """Derive a Tag with ``text`` that shares this Tag's destination."""
        return Tag(text, self._destination, self._verbosity)

    @property
    def text(self) -> str:
        return self._text

    @property
    def destination(self) -> logging.Logger:
        return self._destination

    @property
    def verbosity(self) -> Verbosity:
        return self._verbosity

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:  # pragma: no cover
        return f"Tag({self._text!r})"

    def v(self, level: int) -> "Verbose":
        """Return a view whose info methods only emit at verbosity >= level."""
        return Verbose(self, level)

    # -- info ---------------------------------------------------------------

    def info(self, *args: Any) -> None:
        self._emit(logging.INFO, _join(args))

    def infoln(self, *args: Any) -> None:
        self._emit(logging.INFO, _join(args) + "\n")

    def infof(self, format: str, *args: Any) -> None:
        self._emit(logging.INFO, _Printf(format, args))

    # -- warning ------------------------------------------------------------

    def warning(self, *args: Any) -> None:
        self._emit(logging.WARNING, _join(args))

    def warningln(self, *args: Any) -> None:
        self._emit(logging.WARNING, _join(args) + "\n")

    def warningf(self, format: str, *args: Any) -> None:
        self._emit(logging.WARNING, _Printf(format, args))

    # -- error --------------------------------------------------------------

    def error(self, *args: Any) -> None:
        self._emit(logging.ERROR, _join(args))

    def errorln(self, *args: Any) -> None:
        self._emit(logging.ERROR, _join(args) + "\n")

    def errorf(self, format: str, *args: Any) -> None:
        self._emit(logging.ERROR, _Printf(format, args))

    # -- fatal --------------------------------------------------------------

    def fatal(self, *args: Any) -> None:
        """Log at FATAL with the current stack, then end the process with status 255."""
        self._fatal(_join(args))

    def fatalln(self, *args: Any) -> None:
        self._fatal(_join(args) + "\n")

    def fatalf(self, format: str, *args: Any) -> None:
        self._fatal(_Printf(format, args))

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _emit(
        self,
        level: int,
        msg: Any,
        stacklevel: int = _CALLER,
        stack_info: bool = False,
    ) -> None:
        self._destination.log(
            level,
            msg,
            extra={"contrail_tag": self._text},
            stacklevel=stacklevel,
            stack_info=stack_info,
        )

    def _fatal(self, msg: Any) -> None:
        self._emit(FATAL, msg, stacklevel=_CALLER + 1, stack_info=True)
        for handler in self._destination.handlers:
            handler.flush()
        if threading.current_thread() is not threading.main_thread():
            # SystemExit would only end this thread.
            os._exit(FATAL_EXIT_CODE)
        raise SystemExit(FATAL_EXIT_CODE)


class Verbose:
    """Info-only view of a Tag gated on the ambient verbosity.

    The threshold is checked on every call, against the source file of the
    caller, so a view obtained before the threshold changes still honours the
    new value. A ``Verbose`` is truthy iff it would currently emit::

        if log.v(2):
            log.v(2).info("cache state", dump_cache())
    """

    __slots__ = ("_tag", "_level")

    def __init__(self, tag: Tag, level: int) -> None:
        if level < 0:
            raise ValueError(f"verbosity level must be >= 0, got {level}")
        self._tag = tag
        self._level = level

    @property
    def level(self) -> int:
        return self._level

    def _enabled(self) -> bool:
        # _enabled <- public method or __bool__ <- caller
        caller = sys._getframe(2).f_code.co_filename
        return self._tag.verbosity.enabled(self._level, caller)

    def __bool__(self) -> bool:
        return self._enabled()

    def info(self, *args: Any) -> None:
        if self._enabled():
            self._tag._emit(logging.INFO, _join(args))

    def infoln(self, *args: Any) -> None:
        if self._enabled():
            self._tag._emit(logging.INFO, _join(args) + "\n")

    def infof(self, format: str, *args: Any) -> None:
        if self._enabled():
            self._tag._emit(logging.INFO, _Printf(format, args))
