"""verbosity.py - Ambient verbosity threshold for V-gated logging.

A ``Verbosity`` holds the process-wide threshold that ``Logger.v(level)``
checks against, plus optional per-module overrides in glog's ``-vmodule``
syntax::

    verbosity = Verbosity(level=1, vmodule="db=3,http_*=2")

Lines logged through ``log.v(n)`` are emitted iff the threshold that applies
to the calling source file is ``>= n``. The threshold is consulted on every
call, so changing it takes effect immediately for gated views that were
obtained earlier.

The process-wide instance returned by ``get_verbosity()`` is created lazily
from the ``CONTRAIL_V`` and ``CONTRAIL_VMODULE`` environment variables.
"""

import fnmatch
import os
import threading
from typing import Mapping, Optional, Tuple

ENV_LEVEL = "CONTRAIL_V"
ENV_VMODULE = "CONTRAIL_VMODULE"

ModuleRule = Tuple[str, int]


def _check_level(level: int) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise TypeError(f"verbosity level must be an int, got {level!r}")
    if level < 0:
        raise ValueError(f"verbosity level must be >= 0, got {level}")
    return level


def parse_vmodule(spec: str) -> Tuple[ModuleRule, ...]:
    """Parse a ``pattern=N[,pattern=N...]`` string into override rules.

    Patterns are ``fnmatch`` globs matched against the caller's source file
    name without its ``.py`` suffix. A pattern containing ``/`` is matched
    against the full path instead of the base name.

    Raises:
        ValueError: If an entry is not ``pattern=N`` with a non-negative N.

    Example:
        >>> parse_vmodule("db=3, http_*=1")
        (('db', 3), ('http_*', 1))
    """
    rules = []
    for entry in spec.split(","):
        entry = entry.strip()
        if not entry:
            continue
        pattern, sep, value = entry.partition("=")
        pattern = pattern.strip()
        if not sep or not pattern:
            raise ValueError(f"malformed vmodule entry {entry!r}, want pattern=N")
        try:
            level = int(value.strip())
        except ValueError:
            raise ValueError(
                f"malformed vmodule entry {entry!r}: {value.strip()!r} is not an integer"
            ) from None
        rules.append((pattern, _check_level(level)))
    return tuple(rules)


def _module_key(filename: str, match_path: bool) -> str:
    path = filename if match_path else os.path.basename(filename)
    root, ext = os.path.splitext(path)
    return root if ext == ".py" else path


class Verbosity:
    """Thread-safe holder for the verbosity threshold and module overrides.

    Writers take a lock; readers take a single atomic snapshot of the
    ``(level, rules)`` pair, so ``enabled()`` never sees a half-applied update.

    Example:
        >>> v = Verbosity(level=1)
        >>> v.enabled(1), v.enabled(2)
        (True, False)
        >>> v.set(2)
        >>> v.enabled(2)
        True
    """

    def __init__(self, level: int = 0, vmodule: str = "") -> None:
        self._lock = threading.Lock()
        self._state: Tuple[int, Tuple[ModuleRule, ...]] = (
            _check_level(level),
            parse_vmodule(vmodule),
        )

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Verbosity":
        """Build a Verbosity from ``CONTRAIL_V`` / ``CONTRAIL_VMODULE``.

        Unset or empty variables fall back to level 0 and no overrides.

        Raises:
            ValueError: If either variable holds an invalid value.
        """
        if environ is None:
            environ = os.environ
        raw_level = environ.get(ENV_LEVEL, "").strip()
        try:
            level = int(raw_level) if raw_level else 0
            return cls(level=level, vmodule=environ.get(ENV_VMODULE, ""))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid {ENV_LEVEL}/{ENV_VMODULE} setting: {exc}") from exc

    @property
    def level(self) -> int:
        """The global threshold."""
        return self._state[0]

    @property
    def vmodule(self) -> str:
        """The module overrides rendered back to ``pattern=N`` form."""
        return ",".join(f"{pattern}={level}" for pattern, level in self._state[1])

    def set(self, level: int) -> None:
        """Replace the global threshold."""
        level = _check_level(level)
        with self._lock:
            self._state = (level, self._state[1])

    def set_vmodule(self, spec: str) -> None:
        """Replace all module overrides with those parsed from ``spec``."""
        rules = parse_vmodule(spec)
        with self._lock:
            self._state = (self._state[0], rules)

    def threshold(self, filename: Optional[str] = None) -> int:
        """Return the threshold that applies to code in ``filename``.

        The first matching module rule wins; without a match (or without a
        filename) the global threshold applies.
        """
        level, rules = self._state
        if filename and rules:
            for pattern, rule_level in rules:
                if fnmatch.fnmatchcase(_module_key(filename, "/" in pattern), pattern):
                    return rule_level
        return level

    def enabled(self, level: int, filename: Optional[str] = None) -> bool:
        """True if a message at ``level`` from ``filename`` should be emitted."""
        return self.threshold(filename) >= level

    def __repr__(self) -> str:  # pragma: no cover
        return f"Verbosity(level={self.level}, vmodule={self.vmodule!r})"


_default: Optional[Verbosity] = None
_default_lock = threading.Lock()


def get_verbosity() -> Verbosity:
    """Return the process-wide Verbosity, creating it from the environment once."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Verbosity.from_environ()
    return _default
