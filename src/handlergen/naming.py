"""
Scope identifiers for generated code.

Every invocation wraps its output in a constant whose name must be unique
within the compilation unit. Names are derived from a hash of the target
type and its handler method names, so identical input given to a fresh
unit always produces identical output. A per-unit counter disambiguates
the case where the same name would be issued twice, e.g. two impl blocks
for the same type with the same handler names.

Invocations that do not pass a unit share the process-wide unit for their
prefix (see get_default_unit), so their names never collide.

Example:
    >>> unit = CompilationUnit()
    >>> name = unit.scope_name(PathType(path=Path.parse("Server")), ["start", "stop"])
    >>> name.startswith("_impl_handlers_"), name.endswith("_Server")
    (True, True)
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections.abc import Iterable

from handlergen.syntax import PathType, Type

logger = logging.getLogger(__name__)

DEFAULT_SCOPE_PREFIX = "_impl_handlers"

# Used when the target type has no path to take a name from
FALLBACK_TYPE_NAME = "handlers"


def type_name(target_type: Type) -> str:
    """Return the last path segment of the target type, or a fixed fallback."""
    if isinstance(target_type, PathType):
        return target_type.path.last.ident
    return FALLBACK_TYPE_NAME


def scope_digest(target_type: Type, handler_names: Iterable[str]) -> str:
    """Hash the rendered target type and the sorted handler names to 8 hex digits."""
    hasher = hashlib.sha256()
    hasher.update(target_type.render().encode())
    for name in sorted(handler_names):
        hasher.update(b"\x00")
        hasher.update(name.encode())
    return hasher.hexdigest()[:8]


class CompilationUnit:
    """
    Issues collision-free scope identifiers for one compilation unit.

    Share one instance between all invocations that end up in the same
    compilation unit. A fresh instance issues the same names for the same
    input, which is what golden-file tests want.

    Thread-Safety:
        scope_name() is thread-safe.

    Args:
        prefix: Prefix for every identifier issued by this unit
    """

    def __init__(self, prefix: str = DEFAULT_SCOPE_PREFIX) -> None:
        self._prefix = prefix
        self._issued: set[str] = set()
        self._counter = 0
        self._lock = threading.Lock()

    def scope_name(self, target_type: Type, handler_names: Iterable[str]) -> str:
        """
        Issue the scope identifier for one invocation.

        Args:
            target_type: The type the impl block extends
            handler_names: Names of the methods that produced handlers

        Returns:
            An identifier not previously issued by this unit
        """
        base = f"{self._prefix}_{scope_digest(target_type, handler_names)}_{type_name(target_type)}"

        with self._lock:
            name = base
            while name in self._issued:
                self._counter += 1
                name = f"{base}_{self._counter}"
            self._issued.add(name)

        if name != base:
            logger.debug(
                "Scope name %s already issued, using %s",
                base,
                name,
                extra={"base": base, "scope": name},
            )
        return name

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def issued(self) -> frozenset[str]:
        """Identifiers issued so far."""
        with self._lock:
            return frozenset(self._issued)

    def clear(self) -> None:
        """Forget every issued identifier and reset the counter."""
        with self._lock:
            self._issued.clear()
            self._counter = 0

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._issued

    def __repr__(self) -> str:
        return f"CompilationUnit(prefix={self._prefix!r}, issued={len(self._issued)})"


default_unit = CompilationUnit()

_default_units: dict[str, CompilationUnit] = {DEFAULT_SCOPE_PREFIX: default_unit}
_default_units_lock = threading.Lock()


def get_default_unit(prefix: str = DEFAULT_SCOPE_PREFIX) -> CompilationUnit:
    """
    Return the process-wide unit for prefix, creating it on first use.

    Processors use it when no unit is passed.
    """
    with _default_units_lock:
        unit = _default_units.get(prefix)
        if unit is None:
            unit = _default_units[prefix] = CompilationUnit(prefix)
        return unit


def clear_default_units() -> None:
    """Clear every process-wide unit. Useful for test isolation."""
    with _default_units_lock:
        units = list(_default_units.values())
    for unit in units:
        unit.clear()


__all__ = [
    "DEFAULT_SCOPE_PREFIX",
    "FALLBACK_TYPE_NAME",
    "CompilationUnit",
    "clear_default_units",
    "default_unit",
    "get_default_unit",
    "scope_digest",
    "type_name",
]
