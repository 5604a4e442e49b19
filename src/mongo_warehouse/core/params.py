"""Parameter stores consulted when a connection setting is not given explicitly.

A store answers ``get(key, default)`` and always returns a value of the same
type as ``default``: a stored value that cannot be coerced is reported and
replaced by the default, the way a node's parameter lookup behaves.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Protocol, TypeVar

from mongo_warehouse.core.logging import get_logger

logger = get_logger(module="params")

T = TypeVar("T")

HOST_KEY = "warehouse_host"
PORT_KEY = "warehouse_port"
DATABASE_NAME_KEY = "warehouse_database_name"
USER_KEY = "warehouse_user"
AUTHENTICATE_KEY = "warehouse_authenticate"
PASSWORD_KEY = "warehouse_pwd"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ParameterStore(Protocol):
    def get(self, key: str, default: T) -> T: ...


def coerce(value: Any, default: T) -> T:
    """Convert ``value`` to the type of ``default``.

    Raises ``ValueError`` when the conversion is not meaningful, for example
    ``"maybe"`` for a boolean or ``"abc"`` for a port.
    """

    # bool first: it is a subclass of int
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value  # type: ignore[return-value]
        if isinstance(value, (int, float)):
            return bool(value)  # type: ignore[return-value]
        text = str(value).strip().lower()
        if text in _TRUE:
            return True  # type: ignore[return-value]
        if text in _FALSE:
            return False  # type: ignore[return-value]
        raise ValueError(f"{value!r} is not a boolean")
    if isinstance(default, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value!r} is not an integer")
        return int(value)  # type: ignore[return-value]
    if isinstance(default, float):
        return float(value)  # type: ignore[return-value]
    if isinstance(default, str):
        return str(value)  # type: ignore[return-value]
    return value


class _BaseParameterStore:
    def _lookup(self, key: str) -> tuple[bool, Any]:
        raise NotImplementedError

    def get(self, key: str, default: T) -> T:
        found, raw = self._lookup(key)
        if not found:
            return default
        try:
            return coerce(raw, default)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Ignoring parameter {key}={raw!r}: {exc}; using {default!r}",
                key=key,
                raw=raw,
                exc=exc,
                default=default,
            )
            return default


class EnvironmentParameterStore(_BaseParameterStore):
    """Read parameters from environment variables.

    ``warehouse_host`` maps to ``WAREHOUSE_HOST``; with ``prefix="ROBOT"`` it
    maps to ``ROBOT_WAREHOUSE_HOST``. Values from ``.env`` are visible because
    the config module loads it on import. Empty variables fall through to the
    default.
    """

    def __init__(self, prefix: str = "", environ: Mapping[str, str] | None = None) -> None:
        self.prefix = prefix.strip("_").upper()
        self._environ = environ if environ is not None else os.environ

    def variable_name(self, key: str) -> str:
        name = key.upper()
        return f"{self.prefix}_{name}" if self.prefix else name

    def _lookup(self, key: str) -> tuple[bool, Any]:
        # An empty variable (``WAREHOUSE_HOST=`` in .env) counts as unset.
        value = self._environ.get(self.variable_name(key))
        return (True, value) if value else (False, None)


class MappingParameterStore(_BaseParameterStore):
    """In-memory parameters addressed by ``/``-separated names.

    ``MappingParameterStore({"/robot/warehouse_port": 27018}, namespace="robot")``
    answers ``get("warehouse_port", 0)`` with ``27018``. A lookup checks the
    fully qualified name first and then the bare key.
    """

    def __init__(self, values: Mapping[str, Any] | None = None, namespace: str = "") -> None:
        self.namespace = namespace.strip("/")
        self._values = {_normalize(name): value for name, value in (values or {}).items()}

    def qualified_name(self, key: str) -> str:
        return _normalize(f"{self.namespace}/{key}" if self.namespace else key)

    def set(self, key: str, value: Any) -> None:
        self._values[self.qualified_name(key)] = value

    def _lookup(self, key: str) -> tuple[bool, Any]:
        for name in (self.qualified_name(key), _normalize(key)):
            if name in self._values:
                return True, self._values[name]
        return False, None


def _normalize(name: str) -> str:
    return "/".join(part for part in name.split("/") if part)
