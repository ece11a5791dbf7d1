"""Server side of an action: receive goals, run them, and report their progress."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Iterable, Iterator, Protocol

from .action_msgs import (
    GOAL_ID_ZERO,
    CancelGoalRequest,
    CancelGoalResponse,
    CancelGoalResponseEnum,
    GoalId,
    GoalInfo,
    GoalStatus,
    GoalStatusArray,
    GoalStatusEnum,
)
from .action_types import (
    FeedbackMessage,
    GetResultRequest,
    GetResultResponse,
    SendGoalRequest,
    SendGoalResponse,
)
from .builtin_interfaces import Time

logger = logging.getLogger(__name__)


class ServiceServer(Protocol):
    """The service-server operations an action server relies on."""

    def receive_request(self) -> tuple[Any, Any] | None: ...

    def send_response(self, req_id: Any, response: Any) -> None: ...

    async def async_receive_request(self) -> tuple[Any, Any]: ...

    async def async_send_response(self, req_id: Any, response: Any) -> None: ...

    def receive_request_stream(self) -> AsyncIterator[tuple[Any, Any]]: ...


class TopicPublisher(Protocol):
    """The publisher operation an action server relies on."""

    def publish(self, message: Any) -> None: ...


class GoalError(Exception):
    """A goal operation could not be carried out."""


class NoSuchGoalError(GoalError):
    """The goal is not known to the server."""


class WrongGoalStateError(GoalError):
    """The goal is not in a state that allows the operation."""


class GoalEndStatus(enum.Enum):
    """The ways a goal may end."""

    SUCCEEDED = GoalStatusEnum.SUCCEEDED
    ABORTED = GoalStatusEnum.ABORTED
    CANCELED = GoalStatusEnum.CANCELED


@dataclass(frozen=True)
class NewGoalHandle:
    """A goal that has been received but neither accepted nor rejected."""

    goal_id: GoalId
    req_id: Any


@dataclass(frozen=True)
class AcceptedGoalHandle:
    """A goal that has been accepted but is not yet executing."""

    goal_id: GoalId


@dataclass(frozen=True)
class ExecutingGoalHandle:
    """A goal that is executing."""

    goal_id: GoalId


@dataclass(frozen=True)
class CancelHandle:
    """A received cancel request and the goals it applies to."""

    req_id: Any
    _goals: tuple[GoalId, ...] = ()

    def goals(self) -> Iterator[GoalId]:
        return iter(self._goals)

    def contains_goal(self, goal_id: GoalId) -> bool:
        return goal_id in self._goals


class ActionServer:
    """Serves an action through three services and two topics."""

    def __init__(
        self,
        name: Any,
        goal_server: ServiceServer,
        cancel_server: ServiceServer,
        result_server: ServiceServer,
        feedback_publisher: TopicPublisher,
        status_publisher: TopicPublisher,
    ) -> None:
        self.name = name
        self.goal_server = goal_server
        self.cancel_server = cancel_server
        self.result_server = result_server
        self.feedback_publisher = feedback_publisher
        self.status_publisher = status_publisher

    def receive_goal(self) -> tuple[Any, SendGoalRequest] | None:
        """Return a new goal request, if one is available."""
        return self.goal_server.receive_request()

    def send_goal_response(self, req_id: Any, resp: SendGoalResponse) -> None:
        self.goal_server.send_response(req_id, resp)

    def receive_cancel_request(self) -> tuple[Any, CancelGoalRequest] | None:
        """Return a cancel request, if one is available."""
        return self.cancel_server.receive_request()

    def send_cancel_response(self, req_id: Any, resp: CancelGoalResponse) -> None:
        self.cancel_server.send_response(req_id, resp)

    def receive_result_request(self) -> tuple[Any, GetResultRequest] | None:
        """Return a result request, if one is available."""
        return self.result_server.receive_request()

    def send_result(self, result_request_id: Any, resp: GetResultResponse) -> None:
        self.result_server.send_response(result_request_id, resp)

    def send_feedback(self, goal_id: GoalId, feedback: Any) -> None:
        self.feedback_publisher.publish(FeedbackMessage(goal_id, feedback))

    def send_goal_statuses(self, goal_statuses: GoalStatusArray) -> None:
        """Publish the status of all known goals."""
        self.status_publisher.publish(goal_statuses)


@dataclass
class _AsyncGoal:
    status: GoalStatusEnum
    goal: Any
    accepted_time: Time | None = None


@dataclass
class AsyncActionServer:
    """Tracks goal state and drives the action protocol with coroutines."""

    action_server: ActionServer
    _goals: dict[GoalId, _AsyncGoal] = field(default_factory=dict, init=False)
    _result_requests: dict[GoalId, Any] = field(default_factory=dict, init=False)

    def get_new_goal(self, handle: NewGoalHandle) -> Any | None:
        """Return the goal content behind the handle, if known."""
        entry = self._goals.get(handle.goal_id)
        return None if entry is None else entry.goal

    def _lookup(self, goal_id: GoalId) -> _AsyncGoal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NoSuchGoalError(goal_id) from None

    @staticmethod
    def _require(goal_id: GoalId, entry: _AsyncGoal, action: str, *allowed: GoalStatusEnum) -> None:
        if entry.status not in allowed:
            expected = " or ".join(s.name for s in allowed)
            logger.error(
                "Tried to %s goal %r but status was %s, expected %s.",
                action, goal_id, entry.status.name, expected,
            )
            raise WrongGoalStateError(
                f"cannot {action} goal {goal_id}: status {entry.status.name}, expected {expected}"
            )

    async def receive_new_goal(self) -> NewGoalHandle:
        """Wait for a new goal. The server should then accept or reject it."""
        while True:
            req_id, request = await self.action_server.goal_server.async_receive_request()
            if request.goal_id in self._goals:
                logger.error("Received duplicate goal_id %r , req_id=%r", request.goal_id, req_id)
                continue
            self._goals[request.goal_id] = _AsyncGoal(GoalStatusEnum.UNKNOWN, request.goal)
            return NewGoalHandle(request.goal_id, req_id)

    async def accept_goal(self, handle: NewGoalHandle) -> AcceptedGoalHandle:
        """Accept a new goal and notify the client.

        Once accepted, a result must eventually be sent even if the goal is
        canceled or aborted.
        """
        entry = self._lookup(handle.goal_id)
        self._require(handle.goal_id, entry, "accept", GoalStatusEnum.UNKNOWN)
        now = Time.now()
        entry.status = GoalStatusEnum.ACCEPTED
        entry.accepted_time = now
        self._publish_statuses()
        self.action_server.goal_server.send_response(handle.req_id, SendGoalResponse(True, now))
        return AcceptedGoalHandle(handle.goal_id)

    async def reject_goal(self, handle: NewGoalHandle) -> None:
        """Reject a new goal and notify the client."""
        entry = self._lookup(handle.goal_id)
        self._require(handle.goal_id, entry, "reject", GoalStatusEnum.UNKNOWN)
        self.action_server.goal_server.send_response(
            handle.req_id, SendGoalResponse(False, Time.now())
        )

    async def start_executing_goal(self, handle: AcceptedGoalHandle) -> ExecutingGoalHandle:
        """Start executing an accepted goal."""
        entry = self._lookup(handle.goal_id)
        self._require(handle.goal_id, entry, "execute", GoalStatusEnum.ACCEPTED)
        entry.status = GoalStatusEnum.EXECUTING
        self._publish_statuses()
        return ExecutingGoalHandle(handle.goal_id)

    async def publish_feedback(self, handle: ExecutingGoalHandle, feedback: Any) -> None:
        """Publish progress of an executing goal."""
        entry = self._lookup(handle.goal_id)
        self._require(handle.goal_id, entry, "publish feedback on", GoalStatusEnum.EXECUTING)
        self.action_server.send_feedback(handle.goal_id, feedback)

    async def _result_request_id(self, goal_id: GoalId) -> Any:
        if goal_id in self._result_requests:
            return self._result_requests[goal_id]
        async for req_id, request in self.action_server.result_server.receive_request_stream():
            if request.goal_id == goal_id:
                return req_id
            self._result_requests[request.goal_id] = req_id
            logger.debug("Got result request for goal_id=%r req_id=%r", request.goal_id, req_id)
        raise GoalError(f"result request stream ended before a request for goal {goal_id}")

    async def send_result_response(
        self, handle: ExecutingGoalHandle, result_status: GoalEndStatus, result: Any
    ) -> None:
        """Report the end status and result of a goal.

        Does not complete until the client has asked for the result.
        """
        status = GoalEndStatus(result_status).value
        req_id = await self._result_request_id(handle.goal_id)
        entry = self._lookup(handle.goal_id)
        self._require(
            handle.goal_id, entry, "finish",
            GoalStatusEnum.ACCEPTED, GoalStatusEnum.EXECUTING, GoalStatusEnum.CANCELING,
        )
        entry.status = status
        self._publish_statuses()
        self.action_server.send_result(req_id, GetResultResponse(status, result))
        logger.debug("Send result for goal_id=%r  req_id=%r", handle.goal_id, req_id)

    async def abort_executing_goal(self, handle: ExecutingGoalHandle) -> None:
        """Abort a goal the server cannot continue executing."""
        self._abort_goal(handle.goal_id)

    async def abort_accepted_goal(self, handle: AcceptedGoalHandle) -> None:
        """Abort an accepted goal before it starts executing."""
        self._abort_goal(handle.goal_id)

    def _abort_goal(self, goal_id: GoalId) -> None:
        entry = self._lookup(goal_id)
        self._require(goal_id, entry, "abort", GoalStatusEnum.ACCEPTED, GoalStatusEnum.EXECUTING)
        entry.status = GoalStatusEnum.ABORTED
        self._publish_statuses()

    async def receive_cancel_request(self) -> CancelHandle:
        """Wait for a cancel request and collect the accepted or executing goals it names."""
        req_id, request = await self.action_server.cancel_server.async_receive_request()
        info = request.goal_info
        goal_id, stamp = info.goal_id, info.stamp

        def before_stamp(entry: _AsyncGoal) -> bool:
            return entry.accepted_time is not None and entry.accepted_time < stamp

        selects: Callable[[GoalId, _AsyncGoal], bool]
        if goal_id == GOAL_ID_ZERO and stamp == Time.ZERO:
            selects = lambda _gid, _entry: True  # noqa: E731
        elif goal_id == GOAL_ID_ZERO:
            selects = lambda _gid, entry: before_stamp(entry)  # noqa: E731
        elif stamp == Time.ZERO:
            selects = lambda gid, _entry: gid == goal_id  # noqa: E731
        else:
            selects = lambda gid, entry: gid == goal_id or before_stamp(entry)  # noqa: E731

        cancelable = (GoalStatusEnum.EXECUTING, GoalStatusEnum.ACCEPTED)
        goals = tuple(
            gid
            for gid, entry in sorted(self._goals.items())
            if entry.status in cancelable and selects(gid, entry)
        )
        return CancelHandle(req_id, goals)

    async def respond_to_cancel_requests(
        self, cancel_handle: CancelHandle, goals_to_cancel: Iterable[GoalId]
    ) -> None:
        """Start canceling the listed goals and answer the cancel request.

        Goals not listed keep their state.
        """
        canceling = [
            GoalInfo(goal_id=gid, stamp=entry.accepted_time)
            for gid in goals_to_cancel
            if (entry := self._goals.get(gid)) is not None and entry.accepted_time is not None
        ]
        for info in canceling:
            self._goals[info.goal_id].status = GoalStatusEnum.CANCELING
        self._publish_statuses()
        response = CancelGoalResponse(
            return_code=(
                CancelGoalResponseEnum.REJECTED if not canceling else CancelGoalResponseEnum.NONE
            ),
            goals_canceling=canceling,
        )
        await self.action_server.cancel_server.async_send_response(cancel_handle.req_id, response)

    def _publish_statuses(self) -> None:
        status_array = GoalStatusArray(
            status_list=[
                GoalStatus(
                    goal_info=GoalInfo(goal_id=gid, stamp=entry.accepted_time or Time.ZERO),
                    status=entry.status,
                )
                for gid, entry in sorted(self._goals.items())
            ]
        )
        logger.debug(
            "Reporting statuses for %r", [s.goal_info.goal_id for s in status_array.status_list]
        )
        try:
            self.action_server.send_goal_statuses(status_array)
        except Exception as exc:  # publishing failures must not break goal handling
            logger.error("AsyncActionServer.publish_statuses: %r", exc)