# rosclient

Building blocks for ROS 2 actions, the wire time types they use, and a
compiler for `.msg` message definitions.

## What is inside

- `rosclient.builtin_interfaces`: the wire `Time` and `Duration` types.
  `Time` stores a nanosecond count since the Unix epoch (`Time.now()`,
  `Time.from_nanos()`, `Time.to_nanos()`, plus `Time.ZERO`). `Time.to_wire()`
  splits it into a `WireTime` of whole seconds and a non-negative nanosecond
  fraction, saturating the seconds to the signed 32-bit range;
  `Time.from_wire()` converts back, logging a warning if the fraction is one
  second or more. `Duration.from_nanos()`, `from_millis()` and `from_secs()`
  build durations, saturating when the seconds do not fit in 32 bits.
- `rosclient.action_msgs`: goal ids (`new_goal_id()` returns a random
  `uuid.UUID`), `GoalInfo`, `GoalStatus`, `GoalStatusArray`, `GoalStatusEnum`,
  `CancelGoalRequest`, `CancelGoalResponse` and `CancelGoalResponseEnum`.
- `rosclient.action_types`: `Action`, which names an action's goal, result and
  feedback types; the messages `SendGoalRequest`, `SendGoalResponse`,
  `GetResultRequest`, `GetResultResponse` and `FeedbackMessage`; and the
  `ActionClientQosPolicies` and `ActionServerQosPolicies` bundles.
- `rosclient.action_client`: `ActionClient`, which sends goals, cancels them
  (one goal, all goals, or all goals accepted before a time) and collects
  results, feedback and status, either by polling (`receive_*`) or with
  `async` calls and async generators (`feedback_stream`, `status_stream`,
  `all_statuses_stream`). Polling calls skip responses meant for other
  requests and feedback meant for other goals.
- `rosclient.action_server`: `ActionServer`, a thin wrapper over the service
  and publisher endpoints, and `AsyncActionServer`, which tracks each goal
  from new through accepted and executing to its end. It publishes the status
  array whenever a goal's state changes, and raises `NoSuchGoalError` or
  `WrongGoalStateError` (both `GoalError`) when a transition is not allowed.
- `rosclient.msggen.parser`: `msg_spec()` parses a `.msg` definition into
  lines of `Field`/`Constant` items and `Comment`s.
- `rosclient.msggen.stringparser`: `parse_string()` decodes a double-quoted
  string literal with escapes.
- `rosclient.msggen.main`: the `msggen` command, which writes struct
  definitions from parsed `.msg` files.

## Installing

```
pip install .
```

## The `msggen` command

Translate one `.msg` file and print the result, or write it to a file with `-o`:

```
msggen -i Pose.msg
msggen -i Pose.msg -o pose.rs
```

Translate every message package that one or more types depend on. This needs a
ROS 2 workspace with `colcon` on the `PATH`:

```
msggen -t geometry_msgs/Twist -w ~/ros2_ws -o generated
```

`-t` may be given several times. This writes one file per package to the
output directory, and a `mod.rs` that lists them. Constants that come before
the first field are written above the struct; comments are carried over.
`msggen --version` prints the version. The command exits with status 1 and a
message on standard error if a file cannot be read or written, or if `colcon`
fails.

## Using the action server

```python
from rosclient.action_server import AsyncActionServer, GoalEndStatus

server = AsyncActionServer(action_server)
handle = await server.receive_new_goal()
goal = server.get_new_goal(handle)
accepted = await server.accept_goal(handle)
executing = await server.start_executing_goal(accepted)
await server.publish_feedback(executing, [0, 1, 1])
await server.send_result_response(executing, GoalEndStatus.SUCCEEDED, [0, 1, 1, 2])
```

`send_result_response` does not complete until the client has asked for the
result. Cancel requests are handled with `receive_cancel_request()`, which
returns a `CancelHandle`, and `respond_to_cancel_requests()`.

## What this package does not do

There is no network transport, node or discovery here. `ActionClient` and
`ActionServer` are built from service clients/servers and topic
subscriptions/publishers that you supply; they only need the methods named in
the `ServiceClient`, `TopicSubscription`, `ServiceServer` and `TopicPublisher`
protocols of their modules. The QoS policy bundles hold whatever objects your
middleware uses and are not interpreted. Messages are plain dataclasses; no
wire serialization is provided.

## Running the tests

```
pip install .[test]
pytest
```