"""Raft RPC arguments and replies, and their JSON form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar

from .procedure import ValueType


class RaftState(Enum):
    """The role a node plays in the cluster."""

    UNDEFINED = 0
    FOLLOWER = 1
    CANDIDATE = 2
    LEADER = 3


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value)
    raise TypeError(f"JSON value {value!r} is not convertible to int")


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, int, float)):
        return bool(value)
    raise TypeError(f"JSON value {value!r} is not convertible to bool")


def _to_json(message: Any) -> dict:
    return {f.name: getattr(message, f.name) for f in fields(message)}


def _from_json(cls: type, types: dict[str, ValueType], value: Mapping) -> Any:
    kwargs = {}
    for name, kind in types.items():
        raw = value.get(name)
        if kind is ValueType.INT:
            kwargs[name] = _as_int(raw)
        elif kind is ValueType.BOOLEAN:
            kwargs[name] = _as_bool(raw)
        else:
            kwargs[name] = raw
    return cls(**kwargs)


def _fields_present(types: dict[str, ValueType], value: Any) -> bool:
    return isinstance(value, Mapping) and all(name in value for name in types)


@dataclass
class RequestVoteArgs:
    """Sent by a candidate asking for a vote."""

    term: int = -1
    candidateId: int = -1
    lastLogIndex: int = -1
    lastLogTerm: int = -1

    _TYPES: ClassVar[dict[str, ValueType]] = {
        "term": ValueType.INT,
        "candidateId": ValueType.INT,
        "lastLogIndex": ValueType.INT,
        "lastLogTerm": ValueType.INT,
    }

    def to_json(self) -> dict:
        return _to_json(self)

    @classmethod
    def from_json(cls, value: Mapping) -> RequestVoteArgs:
        return _from_json(cls, cls._TYPES, value)

    @classmethod
    def fields_present(cls, value: Any) -> bool:
        return _fields_present(cls._TYPES, value)

    @classmethod
    def param_types(cls) -> dict[str, ValueType]:
        return dict(cls._TYPES)


@dataclass
class RequestVoteReply:
    """The answer to a vote request."""

    term: int = -1
    voteGranted: bool = False

    _TYPES: ClassVar[dict[str, ValueType]] = {
        "term": ValueType.INT,
        "voteGranted": ValueType.BOOLEAN,
    }

    def to_json(self) -> dict:
        return _to_json(self)

    @classmethod
    def from_json(cls, value: Mapping) -> RequestVoteReply:
        return _from_json(cls, cls._TYPES, value)

    @classmethod
    def fields_present(cls, value: Any) -> bool:
        return _fields_present(cls._TYPES, value)

    @classmethod
    def param_types(cls) -> dict[str, ValueType]:
        return dict(cls._TYPES)


@dataclass
class AppendEntriesArgs:
    """Sent by the leader to replicate log entries and as a heartbeat."""

    term: int = -1
    leaderId: int = -1
    prevLogIndex: int = -1
    prevLogTerm: int = -1
    entries: Any = field(default_factory=list)
    leaderCommit: int = -1

    _TYPES: ClassVar[dict[str, ValueType]] = {
        "term": ValueType.INT,
        "leaderId": ValueType.INT,
        "prevLogIndex": ValueType.INT,
        "prevLogTerm": ValueType.INT,
        "entries": ValueType.ARRAY,
        "leaderCommit": ValueType.INT,
    }

    def to_json(self) -> dict:
        return _to_json(self)

    @classmethod
    def from_json(cls, value: Mapping) -> AppendEntriesArgs:
        return _from_json(cls, cls._TYPES, value)

    @classmethod
    def fields_present(cls, value: Any) -> bool:
        return _fields_present(cls._TYPES, value)

    @classmethod
    def param_types(cls) -> dict[str, ValueType]:
        return dict(cls._TYPES)


@dataclass
class AppendEntriesReply:
    """The answer to an append-entries request."""

    term: int = -1
    success: bool = False
    expectIndex: int = -1
    expectTerm: int = -1

    _TYPES: ClassVar[dict[str, ValueType]] = {
        "term": ValueType.INT,
        "success": ValueType.BOOLEAN,
        "expectIndex": ValueType.INT,
        "expectTerm": ValueType.INT,
    }

    def to_json(self) -> dict:
        return _to_json(self)

    @classmethod
    def from_json(cls, value: Mapping) -> AppendEntriesReply:
        return _from_json(cls, cls._TYPES, value)

    @classmethod
    def fields_present(cls, value: Any) -> bool:
        return _fields_present(cls._TYPES, value)

    @classmethod
    def param_types(cls) -> dict[str, ValueType]:
        return dict(cls._TYPES)