# nanoraft

Building blocks for a Raft-style cluster, in plain Python with nothing
outside the standard library (Python 3.10 or later):

- **JSON-RPC 2.0** requests, responses and errors: `nanoraft.jrpcproto`.
- A **length-prefixed TCP transport**: `nanoraft.packet` frames messages,
  and `nanoraft.network` provides `Session`, `BaseServer` and `BaseClient`.
- An **RPC server and client** on top of that transport:
  `nanoraft.rpcserver`, `nanoraft.rpcclient`, `nanoraft.rpcclientstub`, with
  procedures declared in `nanoraft.procedure` and looked up by name in
  `nanoraft.service`.
- **Raft message types** with their JSON form: `nanoraft.raft_messages`.
- A **behaviour tree** with a fluent builder: `nanoraft.behavior_tree`.
- Small utilities: `nanoraft.concurrent_queue.ConcurrentQueue`,
  `nanoraft.config.Config` and `nanoraft.env.EnvManager`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## JSON-RPC messages

```python
from nanoraft.jrpcproto import JsonRpcRequest, JsonRpcResponse

request = JsonRpcRequest.call("2.0", "substractMethod", {"minuend": 42, "subtrahend": 23}, "1")
print(request.to_json_str())
print(request.is_return_call())      # True: the request carries an id

note = JsonRpcRequest.notification("2.0", "helloNotifyMethod", {"notify": "World"})
print(note.is_notification())        # True: no id

response = JsonRpcResponse.from_request(request.to_json(), 19)
print(response.result)               # 19
print(response.id)                   # "1"
```

A request is valid when it has a string `jsonrpc`, a string `method` and an
object `params`; a response when it has `jsonrpc`, `id` and exactly one of
`result` and `error`. `from_json`, `from_json_str` and `from_request` raise
`InvalidMessageError` (a `ValueError`) otherwise. Errors use `ErrorCode`
(`PARSE_ERROR`, `INVALID_REQUEST`, `METHOD_NOT_FOUND`, `INVALID_PARAMS`,
`INTERNAL_ERROR`) and `JsonRpcError`, whose `message` is the code's name,
such as `"InvalidParams"`.

## Wire format

Every message is a 4-byte head followed by the body. The first two bytes of
the head hold the body size in network byte order, the other two are
padding. `packet.frame` builds a head and `packet.body_size` reads one; a
receiving `Session` closes the connection when a head announces a body over
1024 bytes (`packet.MAX_BODY_SIZE`). A session holds at most 64 outgoing
packets waiting to be written; `Session.send` returns `False` beyond that.

## Serving procedures

```python
from nanoraft.jrpcproto import JsonRpcResponse
from nanoraft.procedure import ValueType
from nanoraft.rpcserver import RpcServerStub


def greet(request, done):
    name = request["params"]["name"]
    done(JsonRpcResponse.from_request(request, f"Hello, {name}!").to_json())


stub = RpcServerStub(9800)
stub.register_return("greet", {"name": ValueType.STRING}, greet)
stub.run()   # blocks until Ctrl-C; stub.start() serves in the background
```

`register_return` is for calls that expect a reply: the function receives
the request as a dict and a `done` callback whose argument is sent back as
JSON. `register_notify` is for notifications: the function receives only the
request. Every parameter a request carries must be declared with its
`ValueType` (`NULL`, `INT`, `UINT`, `REAL`, `STRING`, `BOOLEAN`, `ARRAY`,
`OBJECT`); otherwise the call is refused with `RpcException` and the
function is not run. Declared parameters that are absent are not an error.

A packet that is not a valid request is answered with the bare error message
text (`"ParseError"`), not a JSON response. A call to an unknown method or
with mismatched parameters is dropped on the server without a reply.
Procedures run in a thread pool.

## Calling a remote procedure

```python
from nanoraft.rpcclientstub import RpcClientStub, return_call_once

record = return_call_once("127.0.0.1", 9800, "1", "greet", {"name": "World"}, print, 3000)
if record.is_done():
    print(record.response.result)

with RpcClientStub() as client:
    if client.connect("127.0.0.1", 9800):
        record = client.return_call("2", "greet", {"name": "again"}, print, 3000)
        future = client.async_notify_call("someNotify", {"text": "hi"})
```

A call waits up to the given number of milliseconds for the answer, calling
the callback with the response's `result` when it arrives, and returns a
`CallRecord`; `is_done()` is true once a response is attached, `is_error()`
while either the request or the response is missing. An empty record is
returned when the connection fails or a call with the same id is still
pending. `return_call_once` and `notify_call_once` connect, call and
disconnect; `RpcClientStub` keeps one connection for several calls. The
`async_*` variants return `concurrent.futures.Future` objects.

## Demo command

```
nanoraft-demo
```

serves the example procedures of `nanoraft.demo` (`helloworldMethod`,
`substractMethod` and the notification `helloNotifyMethod`) on port 9800
until interrupted. The same command can call them:

```
nanoraft-demo hello World
nanoraft-demo subtract 42 23
nanoraft-demo notify World
nanoraft-demo --port 9801 --timeout-ms 1000 hello World
```

`--host`, `--port` and `--timeout-ms` go before the subcommand. The calls go
to `127.0.0.1` unless `--host` is given; the server listens on `0.0.0.0`.

## Raft messages

```python
from nanoraft.raft_messages import AppendEntriesArgs, RequestVoteArgs

args = RequestVoteArgs(term=3, candidateId=1, lastLogIndex=10, lastLogTerm=2)
data = args.to_json()
assert RequestVoteArgs.fields_present(data)
assert RequestVoteArgs.from_json(data) == args
types = AppendEntriesArgs.param_types()   # ready for register_return
```

`RequestVoteReply` and `AppendEntriesReply` work the same way, and
`RaftState` names the roles `FOLLOWER`, `CANDIDATE` and `LEADER`.

## What the package does not do

There is no Raft node here: no leader election, no log replication, no
timers and no storage of a log or of state. The package supplies the
messages, the RPC layer and the helpers such a node would be built from.

## Behaviour trees

```python
from nanoraft.behavior_tree import Action, BehaviorTreeBuilder, Status


class Fixed(Action):
    def __init__(self, uid, outcome):
        super().__init__(uid)
        self.outcome = outcome

    def on_update(self):
        return self.outcome


tree = (
    BehaviorTreeBuilder()
    .selector("root")
    .sequence("attack")
    .action(Fixed("see-enemy", Status.FAILURE))
    .action(Fixed("strike", Status.SUCCESS))
    .back()
    .action(Fixed("idle", Status.SUCCESS))
    .end()
)
print(tree.tick())   # Status.SUCCESS: the sequence failed, "idle" succeeded
```

Nodes are `Sequence`, `Selector`, `ActiveSelector`, `Parallel` and `Monitor`
(with `Policy.REQUIRE_ONE` or `Policy.REQUIRE_ALL` for success and failure),
`Filter`, `Inverter` and `Repeat` (a negative limit repeats forever). Actions
subclass `Action`, implement `on_update`, and may override `on_initialize`
and `on_terminate`.

## Utilities

- `ConcurrentQueue`: `push`, `try_pop` (oldest item), `try_steal` (newest
  item), `wait_and_pop(timeout)`; empty takes raise `queue.Empty`, and
  `wait_and_pop` raises `QueueClosed` after `exit()`.
- `Config`: `register(name, value)`, `lookup(name, kind)`, and
  `load_from_conf_dir(path)`, which registers the top-level integers,
  strings and arrays of strings or integers of every `.json` file in a
  directory. Each value is a `ConfigVar` with `to_string()` and
  `from_string(text)`.
- `EnvManager`: records the working directory it was created in as
  `root_path` and keeps a private table of string variables (`add`, `get`,
  `delete`).