"""contrail/__init__.py - Public API for the contrail package.

contrail is a thin layer over Python's ``logging`` that stamps every line with
the subsystem it came from and, optionally, the request it belongs to. Lines
use a fixed glog-style layout that log scrapers can match on::

    I1019 09:12:01.532114 1402342 server.py:18] ctx="api" trace="a1b2c3d4"] GET /orders

Quick start:
    import contrail

    log = contrail.new("api")                 # writes to stderr
    log.info("listening on", port)

    req = log.new_trace(request_id)            # same ctx, adds trace="..."
    req.warningf("slow query: %.1fms", elapsed)

    log.v(2).info("cache stats", stats)        # only when verbosity >= 2

    # Route lines somewhere else
    log = contrail.new_writer("worker", open("worker.log", "a"))

    # Feed stream output into the log, one call per line
    sink = contrail.make_line_writer(log.info)

Configuration:
    contrail.configure(verbosity=2, vmodule="db=3", stream=sys.stdout)
    # or via the environment: CONTRAIL_V=2 CONTRAIL_VMODULE=db=3

Exported names:
    new:              Logger on the default destination.
    new_writer:       Logger on a caller-supplied stream.
    Logger:           Context-tagged logger (``new_trace``, ``header_tag``, ``v``).
    InfoLogger:       Protocol for the info-only method set.
    LeveledLogger:    Protocol for the full method set.
    make_line_writer: Wrap a line-emitting function as a binary stream.
    LineWriter:       The stream type returned by ``make_line_writer``.
    format_tag:       Render ``ctx="..."[ trace="..."]``.
    new_trace_id:     Generate a short random trace id.
    Verbosity:        Threshold and per-module overrides for ``v()``.
    get_verbosity:    The process-wide Verbosity.
    configure:        Adjust verbosity and the default destination.
"""

from typing import Optional

from .engine import GlogFormatter, Tag, Verbose, set_default_stream
from .logger import InfoLogger, LeveledLogger, Logger, new, new_writer
from .tag import format_tag, new_trace_id
from .verbosity import Verbosity, get_verbosity
from .writer import LineWriter, make_line_writer


def configure(
    verbosity: Optional[int] = None,
    vmodule: Optional[str] = None,
    stream=None,
) -> None:
    """Adjust the process-wide settings, leaving unspecified ones unchanged.

    Args:
        verbosity: Global threshold for ``v()`` views.
        vmodule: ``pattern=N,...`` per-module overrides; replaces any
            existing overrides. Pass ``""`` to clear them.
        stream: New stream for the default destination used by ``new()``.

    Raises:
        ValueError: If ``verbosity`` is negative or ``vmodule`` is malformed.
    """
    settings = get_verbosity()
    if verbosity is not None:
        settings.set(verbosity)
    if vmodule is not None:
        settings.set_vmodule(vmodule)
    if stream is not None:
        set_default_stream(stream)


__all__ = [
    "new",
    "new_writer",
    "Logger",
    "InfoLogger",
    "LeveledLogger",
    "Tag",
    "Verbose",
    "GlogFormatter",
    "make_line_writer",
    "LineWriter",
    "format_tag",
    "new_trace_id",
    "Verbosity",
    "get_verbosity",
    "configure",
]
__version__ = "0.1.0"
