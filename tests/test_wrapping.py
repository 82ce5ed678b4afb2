"""Tests for post-read value wrapping."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from storage_binding.exceptions import WrapConfigurationError
from storage_binding.wrapping import DEFAULT_STRATEGIES, ValueWrapper


class Profile:
    """Plain class accepting extra attributes."""

    def __init__(self, data: dict):
        self.display = data.get("name", "").title()


class Guarded(Profile):
    """Rejects one attribute name."""

    def __setattr__(self, name, value):
        if name == "secret":
            raise AttributeError(name)
        super().__setattr__(name, value)


@dataclass(frozen=True)
class FrozenPoint:
    x: int
    y: int


class TestValueWrapper:
    """Tests for ValueWrapper.wrap."""

    def test_no_type_returns_raw(self):
        wrapper = ValueWrapper()
        raw = {"a": 1}
        assert wrapper.wrap(raw, None) is raw
        assert wrapper.wrap(raw, "") is raw

    def test_none_raw_returns_none(self):
        wrapper = ValueWrapper()
        assert wrapper.wrap(None, "Date") is None
        assert wrapper.wrap(None, "Unregistered") is None

    def test_date_from_iso_string(self):
        wrapper = ValueWrapper()
        result = wrapper.wrap("2024-03-01T12:00:00Z", "Date")
        assert result == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

    def test_date_from_epoch_millis(self):
        wrapper = ValueWrapper()
        result = wrapper.wrap(0, "Date")
        assert result == datetime(1970, 1, 1, tzinfo=UTC)

    def test_regexp(self):
        wrapper = ValueWrapper()
        assert wrapper.wrap("^a+$", "RegExp").match("aaa")
        pattern = wrapper.wrap({"source": "abc", "flags": "i"}, "RegExp")
        assert pattern.flags & re.IGNORECASE

    def test_decimal(self):
        assert ValueWrapper().wrap(1.5, "Decimal") == Decimal("1.5")

    def test_failure_returns_raw(self):
        wrapper = ValueWrapper()
        assert wrapper.wrap("not a date", "Date") == "not a date"
        assert wrapper.wrap("(", "RegExp") == "("

    def test_strategy_returning_none_returns_raw(self):
        wrapper = ValueWrapper({"Nothing": lambda raw: None})
        assert wrapper.wrap(5, "Nothing") == 5

    def test_copies_missing_fields(self):
        wrapper = ValueWrapper({"Profile": Profile})
        result = wrapper.wrap({"name": "ada", "age": 36, "display": "raw"}, "Profile")

        assert isinstance(result, Profile)
        assert result.display == "Ada"  # already defined, not overwritten
        assert result.name == "ada"
        assert result.age == 36

    def test_immutable_instance_keeps_own_fields(self):
        wrapper = ValueWrapper({"Point": lambda raw: FrozenPoint(**{k: raw[k] for k in "xy"})})
        result = wrapper.wrap({"x": 1, "y": 2, "label": "origin"}, "Point")

        assert result == FrozenPoint(1, 2)
        assert not hasattr(result, "label")

    def test_rejected_field_does_not_stop_copy(self):
        wrapper = ValueWrapper({"Guarded": Guarded})
        result = wrapper.wrap({"secret": "s", "age": 36, "role": "admin"}, "Guarded")

        assert not hasattr(result, "secret")
        assert result.age == 36
        assert result.role == "admin"

    def test_namespace(self):
        result = ValueWrapper().wrap({"a": 1}, "Namespace")
        assert result == SimpleNamespace(a=1)


class TestWrapConfiguration:
    """Tests for strategy registration and validation."""

    def test_defaults_registered(self):
        assert set(DEFAULT_STRATEGIES) <= set(ValueWrapper().names())

    def test_without_defaults(self):
        assert ValueWrapper(include_defaults=False).names() == []

    def test_validate_unknown(self):
        wrapper = ValueWrapper()
        with pytest.raises(WrapConfigurationError) as exc_info:
            wrapper.validate("Unknown")
        assert exc_info.value.type_name == "Unknown"

    def test_validate_known_and_none(self):
        wrapper = ValueWrapper()
        wrapper.validate("Date")
        wrapper.validate(None)

    def test_register(self):
        wrapper = ValueWrapper(include_defaults=False)
        wrapper.register("Upper", str.upper)
        assert wrapper.wrap("abc", "Upper") == "ABC"
