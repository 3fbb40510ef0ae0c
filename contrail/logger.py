"""logger.py - Context-tagged loggers with trace derivation.

A ``Logger`` binds a context name to a ``Tag`` handle. Every line it writes
carries ``ctx="<name>"``; loggers derived with ``new_trace()`` additionally
carry ``trace="<id>"`` and write to the same destination as their parent::

    log = contrail.new("billing")
    log.info("service up")
    # I1019 09:12:01.532114 1402342 app.py:3] ctx="billing"] service up

    req = log.new_trace("r-42")
    req.warningf("retrying charge %s", charge_id)
    # W1019 09:12:02.100233 1402342 app.py:6] ctx="billing" trace="r-42"] retrying charge ch_1

The leveled methods are not reimplemented here: a Logger exposes its Tag's
bound methods directly through class-level delegating attributes, so the call
site recorded in each line is always the caller's own.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .engine import Tag, writer_destination
from .tag import format_tag, new_trace_id
from .verbosity import Verbosity


@runtime_checkable
class InfoLogger(Protocol):
    """The info-only method set, as returned by ``Logger.v()``."""

    def info(self, *args: Any) -> None: ...

    def infoln(self, *args: Any) -> None: ...

    def infof(self, format: str, *args: Any) -> None: ...


@runtime_checkable
class LeveledLogger(InfoLogger, Protocol):
    """The full method set supported by every contrail logger."""

    def header_tag(self) -> str: ...

    def v(self, level: int) -> InfoLogger: ...

    def warning(self, *args: Any) -> None: ...

    def warningln(self, *args: Any) -> None: ...

    def warningf(self, format: str, *args: Any) -> None: ...

    def error(self, *args: Any) -> None: ...

    def errorln(self, *args: Any) -> None: ...

    def errorf(self, format: str, *args: Any) -> None: ...

    def fatal(self, *args: Any) -> None: ...

    def fatalln(self, *args: Any) -> None: ...

    def fatalf(self, format: str, *args: Any) -> None: ...


class _Delegated:
    """Class attribute resolving to the Tag method of the same name.

    Returns the Tag's bound method itself, so no extra frame sits between the
    caller and the Tag and the recorded call site stays the caller's.
    """

    def __set_name__(self, owner, name: str) -> None:
        self._attr = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return getattr(obj._tag, self._attr)


class Logger:
    """A named logger that tags every line with ``ctx="<name>"``.

    Attributes:
        _name (str): The context name, kept apart from the rendered tag so
            that ``new_trace()`` can re-render from it.
        _tag (Tag): Handle that owns the tag text and shared destination.
    """

    __slots__ = ("_name", "_tag")

    v = _Delegated()
    info = _Delegated()
    infoln = _Delegated()
    infof = _Delegated()
    warning = _Delegated()
    warningln = _Delegated()
    warningf = _Delegated()
    error = _Delegated()
    errorln = _Delegated()
    errorf = _Delegated()
    fatal = _Delegated()
    fatalln = _Delegated()
    fatalf = _Delegated()

    def __init__(self, name: str, tag: Tag) -> None:
        self._name = name
        self._tag = tag

    @property
    def name(self) -> str:
        return self._name

    @property
    def tag(self) -> Tag:
        return self._tag

    def header_tag(self) -> str:
        """Return the tag text this logger writes, e.g. ``ctx="api"``."""
        return str(self._tag)

    def new_trace(self, trace_id: Optional[str] = None) -> "Logger":
        """Return a logger for the same context that also logs ``trace="<trace_id>"``.

        The new tag is rendered from this logger's context name, so calling
        ``new_trace`` on an already traced logger replaces its trace id rather
        than appending a second one. The parent is left untouched and both
        keep writing to the same destination.

        Args:
            trace_id: Correlation id for one logical operation. A fresh
                8-character id is generated when omitted.
        """
        if trace_id is None:
            trace_id = new_trace_id()
        return Logger(self._name, self._tag.new(format_tag(self._name, trace_id)))

    def __repr__(self) -> str:  # pragma: no cover
        return f"Logger({self.header_tag()})"


def new(name: str, verbosity: Optional[Verbosity] = None) -> Logger:
    """Return a logger writing to the default destination with ``ctx="<name>"``."""
    return Logger(name, Tag(format_tag(name), verbosity=verbosity))


def new_writer(name: str, w, verbosity: Optional[Verbosity] = None) -> Logger:
    """Return a logger writing every line to ``w`` with ``ctx="<name>"``.

    Args:
        name: Context name.
        w: Any writable file-like object, text or binary: ``io.StringIO``,
            ``sys.stderr``, ``io.BytesIO``, a socket file, a ``LineWriter``.
        verbosity: Threshold for ``v()`` views. Defaults to the process-wide
            ``Verbosity``.
    """
    return Logger(name, Tag(format_tag(name), writer_destination(name, w), verbosity))
