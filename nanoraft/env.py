"""The process's working directory and a private table of variables."""

from __future__ import annotations

import os


def current_directory() -> str:
    """The current working directory; RuntimeError when it cannot be read."""
    try:
        return os.getcwd()
    except OSError as exc:
        raise RuntimeError(f"cannot read the current directory: {exc}") from exc


class EnvManager:
    """Remembers the directory it was created in and holds string variables."""

    def __init__(self) -> None:
        self._root_path = current_directory()
        self._vars: dict[str, str] = {}

    @property
    def root_path(self) -> str:
        return self._root_path

    def add(self, key: str, value: str) -> None:
        self._vars[key] = value

    def get(self, key: str) -> str:
        """The variable's value, or an empty string when it is not set."""
        return self._vars.get(key, "")

    def delete(self, key: str) -> None:
        self._vars.pop(key, None)