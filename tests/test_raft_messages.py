import pytest

from nanoraft.procedure import ValueType
from nanoraft.raft_messages import (
    AppendEntriesArgs,
    AppendEntriesReply,
    RequestVoteArgs,
    RequestVoteReply,
)


def test_defaults_follow_source():
    assert RequestVoteArgs().to_json() == {
        "term": -1,
        "candidateId": -1,
        "lastLogIndex": -1,
        "lastLogTerm": -1,
    }
    assert RequestVoteReply().voteGranted is False
    assert AppendEntriesReply().success is False


@pytest.mark.parametrize(
    "message",
    [
        RequestVoteArgs(term=3, candidateId=1, lastLogIndex=9, lastLogTerm=2),
        RequestVoteReply(term=3, voteGranted=True),
        AppendEntriesArgs(term=4, leaderId=2, prevLogIndex=5, prevLogTerm=3, entries=[{"cmd": "x"}], leaderCommit=5),
        AppendEntriesReply(term=4, success=True, expectIndex=6, expectTerm=4),
    ],
)
def test_round_trip(message):
    data = message.to_json()
    assert type(message).fields_present(data)
    assert type(message).from_json(data) == message


def test_fields_present_detects_missing():
    data = AppendEntriesArgs().to_json()
    del data["entries"]
    assert not AppendEntriesArgs.fields_present(data)
    assert not RequestVoteReply.fields_present({"term": 1})
    assert not RequestVoteArgs.fields_present(None)


def test_missing_fields_read_as_zero():
    reply = AppendEntriesReply.from_json({})
    assert reply.term == 0
    assert reply.success is False


def test_param_types():
    assert AppendEntriesArgs.param_types()["entries"] is ValueType.ARRAY
    assert RequestVoteReply.param_types() == {"term": ValueType.INT, "voteGranted": ValueType.BOOLEAN}
    assert set(AppendEntriesReply.param_types()) == set(AppendEntriesReply().to_json())


def test_param_types_returns_copy():
    types = RequestVoteArgs.param_types()
    types.clear()
    assert RequestVoteArgs.param_types()["term"] is ValueType.INT