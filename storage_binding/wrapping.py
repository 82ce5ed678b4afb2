"""
Post-read value wrapping.

A binding may name a type in ``wrap_as``; after every successful read the
raw stored value is passed through the matching strategy. Wrapping is
best-effort: a strategy that raises or returns ``None`` leaves the raw value
in place. Strategies are registered explicitly, so naming an unknown type is
a configuration error rather than a silent no-op.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import PurePosixPath
from types import SimpleNamespace
from typing import Any

from .exceptions import WrapConfigurationError

logger = logging.getLogger(__name__)

WrapStrategy = Callable[[Any], Any]


def _to_datetime(raw: Any) -> datetime:
    # Numbers are epoch milliseconds, matching how dates are usually persisted
    # by browser storage clients.
    if isinstance(raw, bool):
        raise TypeError("bool is not a date")
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000, tz=UTC)
    if isinstance(raw, str):
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    raise TypeError(f"Cannot build a datetime from {type(raw).__name__}")


def _to_pattern(raw: Any) -> re.Pattern[str]:
    if isinstance(raw, Mapping):
        flags = 0
        for flag in str(raw.get("flags", "")):
            flags |= {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}.get(flag, 0)
        return re.compile(raw["source"], flags)
    return re.compile(raw)


def _to_namespace(raw: Any) -> SimpleNamespace:
    return SimpleNamespace(**raw)


DEFAULT_STRATEGIES: dict[str, WrapStrategy] = {
    "Date": _to_datetime,
    "RegExp": _to_pattern,
    "Decimal": lambda raw: Decimal(str(raw)),
    "UUID": lambda raw: uuid.UUID(str(raw)),
    "Path": PurePosixPath,
    "Namespace": _to_namespace,
}


class ValueWrapper:
    """Registry of named wrap strategies.

    Example:
        >>> wrapper = ValueWrapper({"Point": Point})
        >>> wrapper.wrap({"x": 1, "y": 2}, "Point")
        Point(x=1, y=2)
    """

    def __init__(
        self,
        strategies: Mapping[str, WrapStrategy] | None = None,
        include_defaults: bool = True,
    ):
        self._strategies: dict[str, WrapStrategy] = (
            dict(DEFAULT_STRATEGIES) if include_defaults else {}
        )
        if strategies:
            self._strategies.update(strategies)

    def register(self, type_name: str, strategy: WrapStrategy) -> None:
        """Register or replace the strategy for ``type_name``."""
        self._strategies[type_name] = strategy

    def names(self) -> list[str]:
        return sorted(self._strategies)

    def validate(self, type_name: str | None) -> None:
        """Raise ``WrapConfigurationError`` if ``type_name`` is not registered."""
        if type_name is not None and type_name not in self._strategies:
            raise WrapConfigurationError(type_name, self.names())

    def wrap(self, raw: Any, type_name: str | None) -> Any:
        """Wrap ``raw`` with the strategy named ``type_name``.

        Returns ``raw`` unchanged when no type is set, when ``raw`` is None,
        or when the strategy fails.
        """
        if not type_name or raw is None:
            return raw

        strategy = self._strategies.get(type_name)
        if strategy is None:
            return raw

        try:
            instance = strategy(raw)
        except Exception as e:
            logger.debug(f"Wrapping as {type_name} failed, keeping raw value: {e}")
            return raw

        if instance is None:
            return raw

        if isinstance(raw, Mapping):
            _copy_missing_fields(instance, raw)
        return instance


def _copy_missing_fields(instance: Any, raw: Mapping[str, Any]) -> None:
    """Copy fields of ``raw`` the instance does not already define."""
    for key, value in raw.items():
        if not isinstance(key, str) or not key.isidentifier() or hasattr(instance, key):
            continue
        try:
            setattr(instance, key, value)
        except (AttributeError, TypeError):
            # Instances with slots or immutable types cannot take extra fields.
            continue
