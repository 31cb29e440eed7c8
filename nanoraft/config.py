"""Named configuration values, their text form, and loading them from JSON files."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

_log = logging.getLogger(__name__)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_INT_TEXT = re.compile(r"[+-]?\d+")
_CONTAINERS = (list, tuple, set, frozenset)


def _parse_int(text: str) -> int:
    if not _INT_TEXT.fullmatch(text):
        raise ValueError(f"{text!r} is not an integer")
    number = int(text)
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"{text!r} is out of range")
    return number


def _parse_bool(text: str) -> bool:
    if text == "1":
        return True
    if text == "0":
        return False
    raise ValueError(f"{text!r} is not a boolean")


def _scalar_to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"cannot convert {type(value).__name__} to string")


def _scalar_from_string(kind: type, text: str) -> Any:
    if kind is bool:
        return _parse_bool(text)
    if kind is int:
        return _parse_int(text)
    if kind is float:
        return float(text)
    if kind is str:
        return text
    raise TypeError(f"cannot convert string to {kind.__name__}")


def _element_type(values: Any) -> Optional[type]:
    """The single scalar type of the given elements, if they share one."""
    kinds = {type(v) for v in values}
    if len(kinds) == 1:
        (kind,) = kinds
        if kind in (int, str, float, bool):
            return kind
    return None


def _coerce(item: Any, kind: Optional[type]) -> Any:
    """Convert a decoded JSON element the way a typed reader would."""
    if kind is None:
        return item
    if kind is str:
        if isinstance(item, str):
            return item
        if isinstance(item, (bool, int, float)):
            return _scalar_to_string(item)
        raise ValueError(f"{item!r} is not convertible to string")
    if kind in (int, float):
        if isinstance(item, (bool, int, float)):
            return kind(item)
        raise ValueError(f"{item!r} is not convertible to {kind.__name__}")
    if kind is bool:
        if isinstance(item, (bool, int, float)):
            return bool(item)
        raise ValueError(f"{item!r} is not convertible to bool")
    return item


def _json_ready(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value


class ConfigVar:
    """A named value that can be written to and read back from text.

    Scalars use their plain text form; lists, sets and mappings use JSON.
    The name is kept in lower case.
    """

    def __init__(self, name: str, value: Any, description: str = "") -> None:
        self.name = name.lower()
        self.description = description
        self.value = value
        self._kind = type(value)
        if isinstance(value, Mapping):
            self._element = _element_type(value.values())
        elif isinstance(value, _CONTAINERS):
            self._element = _element_type(value)
        else:
            self._element = None

    @property
    def kind(self) -> type:
        return self._kind

    def to_string(self) -> str:
        """The text form of the value, or an empty string if it has none."""
        try:
            if isinstance(self.value, (Mapping, *_CONTAINERS)):
                return json.dumps(_json_ready(self.value), indent="\t")
            return _scalar_to_string(self.value)
        except (TypeError, ValueError) as exc:
            _log.error("ConfigVar.to_string failed for %s: %s", self.name, exc)
            return ""

    def from_string(self, text: str) -> bool:
        """Set the value from text; False, leaving the value alone, when it does not convert."""
        try:
            self.value = self._convert(text)
            return True
        except (TypeError, ValueError) as exc:
            _log.error("ConfigVar.from_string failed for %s: %s", self.name, exc)
            return False

    def _convert(self, text: str) -> Any:
        kind = self._kind
        if issubclass(kind, Mapping):
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("Expected JSON object")
            return kind((key, _coerce(item, self._element)) for key, item in data.items())
        if issubclass(kind, _CONTAINERS):
            data = json.loads(text)
            if not isinstance(data, list):
                raise ValueError("Expected JSON array")
            return kind(_coerce(item, self._element) for item in data)
        return _scalar_from_string(kind, text)

    def type_name(self) -> str:
        if self._element is not None:
            return f"{self._kind.__name__}[{self._element.__name__}]"
        return self._kind.__name__

    def __repr__(self) -> str:
        return f"ConfigVar(name={self.name!r}, value={self.value!r})"


def _is_json_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return _INT32_MIN <= value <= _INT32_MAX
    if isinstance(value, float):
        return value.is_integer() and _INT32_MIN <= value <= _INT32_MAX
    return False


class Config:
    """A registry of configuration values by name."""

    def __init__(self) -> None:
        self._vars: dict[str, ConfigVar] = {}

    def lookup(self, name: str, kind: Optional[type] = None) -> Optional[ConfigVar]:
        """The value registered under name, if any and, when kind is given, of that type."""
        var = self._vars.get(name)
        if var is None:
            return None
        if kind is not None and var.kind is not kind:
            return None
        return var

    def register(self, name: str, value: Any, description: str = "") -> bool:
        """Register a value; False, leaving the old one, when the name is taken."""
        if name in self._vars:
            _log.error("Config.register: ConfigVar %s already exists", name)
            return False
        self._vars[name] = ConfigVar(name, value, description)
        return True

    def _register_new(self, name: str, value: Any) -> None:
        if self.lookup(name, type(value)) is None:
            self.register(name, value)

    def load_from_conf_dir(self, path: str | Path) -> None:
        """Register the top-level members of every .json file in the directory."""
        directory = Path(path)
        if not directory.is_dir():
            _log.error("Config.load_from_conf_dir: not a directory: %s", directory)
            return
        for file in sorted(directory.iterdir()):
            if not file.is_file() or file.suffix != ".json":
                continue
            try:
                root = json.loads(file.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                _log.error("Config.load_from_conf_dir: cannot read %s: %s", file, exc)
                continue
            if not isinstance(root, dict):
                _log.error("Config.load_from_conf_dir: %s does not hold an object", file)
                continue
            for key, value in root.items():
                self._load_member(key, value)

    def _load_member(self, key: str, value: Any) -> None:
        if _is_json_int(value):
            self._register_new(key, int(value))
        elif isinstance(value, str):
            self._register_new(key, value)
        elif isinstance(value, list):
            if not value:
                _log.error("Config.load_from_conf_dir: empty array for %s", key)
            elif all(isinstance(item, str) for item in value):
                self._register_new(key, list(value))
            elif all(_is_json_int(item) for item in value):
                self._register_new(key, [int(item) for item in value])
            else:
                _log.error("Config.load_from_conf_dir: inconsistent array item types for %s", key)
        else:
            _log.error("Config.load_from_conf_dir: unsupported JSON type for %s", key)

    def dump(self) -> str:
        """Every value as a 'name = text' line."""
        return "".join(f"{name} = {var.to_string()}\n" for name, var in self._vars.items())

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __len__(self) -> int:
        return len(self._vars)