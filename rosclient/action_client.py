"""Client side of an action: send goals, cancel them, and follow their progress."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Protocol

from .action_msgs import (
    GOAL_ID_ZERO,
    CancelGoalRequest,
    CancelGoalResponse,
    GoalId,
    GoalInfo,
    GoalStatus,
    GoalStatusArray,
    GoalStatusEnum,
    new_goal_id,
)
from .action_types import GetResultRequest, SendGoalRequest, SendGoalResponse
from .builtin_interfaces import Time

logger = logging.getLogger(__name__)


class ServiceClient(Protocol):
    """The service-client operations an action client relies on."""

    def send_request(self, request: Any) -> Any: ...

    def receive_response(self) -> tuple[Any, Any] | None: ...

    async def async_call_service(self, request: Any) -> Any: ...


class TopicSubscription(Protocol):
    """The subscription operations an action client relies on."""

    def take(self) -> tuple[Any, Any] | None: ...

    async def async_take(self) -> tuple[Any, Any]: ...

    def async_stream(self) -> AsyncIterator[tuple[Any, Any]]: ...


def _receive_matching(client: ServiceClient, req_id: Any) -> Any | None:
    """Drain responses until the one for ``req_id`` arrives or none are left."""
    while True:
        received = client.receive_response()
        if received is None:
            return None
        incoming_id, response = received
        if incoming_id == req_id:
            return response
        logger.info("Response not for us: %r != %r", incoming_id, req_id)


class ActionClient:
    """Talks to an action server through three services and two topics."""

    def __init__(
        self,
        name: Any,
        goal_client: ServiceClient,
        cancel_client: ServiceClient,
        result_client: ServiceClient,
        feedback_subscription: TopicSubscription,
        status_subscription: TopicSubscription,
    ) -> None:
        self.name = name
        self.goal_client = goal_client
        self.cancel_client = cancel_client
        self.result_client = result_client
        self.feedback_subscription = feedback_subscription
        self.status_subscription = status_subscription

    def send_goal(self, goal: Any) -> tuple[Any, GoalId]:
        """Send a goal; return the request id and the new goal id."""
        goal_id = new_goal_id()
        req_id = self.goal_client.send_request(SendGoalRequest(goal_id, goal))
        return req_id, goal_id

    def receive_goal_response(self, req_id: Any) -> SendGoalResponse | None:
        """Return the response to the given goal request, or None if not yet here."""
        return _receive_matching(self.goal_client, req_id)

    async def async_send_goal(self, goal: Any) -> tuple[GoalId, SendGoalResponse]:
        """Send a goal and wait for the server's answer."""
        goal_id = new_goal_id()
        response = await self.goal_client.async_call_service(SendGoalRequest(goal_id, goal))
        return goal_id, response

    def _cancel_goal_raw(self, goal_id: GoalId, timestamp: Time) -> Any:
        request = CancelGoalRequest(GoalInfo(goal_id=goal_id, stamp=timestamp))
        return self.cancel_client.send_request(request)

    def cancel_goal(self, goal_id: GoalId) -> Any:
        """Request cancellation of one goal regardless of when it was accepted."""
        return self._cancel_goal_raw(goal_id, Time.ZERO)

    def cancel_all_goals_before(self, timestamp: Time) -> Any:
        """Request cancellation of all goals accepted at or before ``timestamp``."""
        return self._cancel_goal_raw(GOAL_ID_ZERO, timestamp)

    def cancel_all_goals(self) -> Any:
        """Request cancellation of every goal."""
        return self._cancel_goal_raw(GOAL_ID_ZERO, Time.ZERO)

    def receive_cancel_response(self, cancel_request_id: Any) -> CancelGoalResponse | None:
        """Return the response to the given cancel request, or None if not yet here."""
        return _receive_matching(self.cancel_client, cancel_request_id)

    async def async_cancel_goal(self, goal_id: GoalId, timestamp: Time) -> CancelGoalResponse:
        """Send a cancel request and wait for the answer."""
        request = CancelGoalRequest(GoalInfo(goal_id=goal_id, stamp=timestamp))
        return await self.cancel_client.async_call_service(request)

    def request_result(self, goal_id: GoalId) -> Any:
        """Ask the server for the result of a goal; return the request id."""
        return self.result_client.send_request(GetResultRequest(goal_id))

    def receive_result(self, result_request_id: Any) -> tuple[GoalStatusEnum, Any] | None:
        """Return the end status and result, or None if not yet here."""
        response = _receive_matching(self.result_client, result_request_id)
        if response is None:
            return None
        return response.status, response.result

    async def async_request_result(self, goal_id: GoalId) -> tuple[GoalStatusEnum, Any]:
        """Request a goal's result and wait for it.

        The answer arrives only once the goal has succeeded, been canceled or
        been aborted, so this should be called as soon as the goal is accepted.
        """
        response = await self.result_client.async_call_service(GetResultRequest(goal_id))
        return response.status, response.result

    def receive_feedback(self, goal_id: GoalId) -> Any | None:
        """Return the next feedback for the goal, skipping feedback for others."""
        while True:
            taken = self.feedback_subscription.take()
            if taken is None:
                return None
            message, _info = taken
            if message.goal_id == goal_id:
                return message.feedback
            logger.debug("Feedback on another goal %r != %r", message.goal_id, goal_id)

    async def feedback_stream(self, goal_id: GoalId) -> AsyncIterator[Any]:
        """Yield the feedback for one goal as it arrives."""
        async for message, _info in self.feedback_subscription.async_stream():
            if message.goal_id == goal_id:
                yield message.feedback
            else:
                logger.debug("Feedback for some other %r.", message.goal_id)

    def receive_status(self) -> GoalStatusArray | None:
        """Return the next status array covering all goals, or None."""
        taken = self.status_subscription.take()
        if taken is None:
            return None
        return taken[0]

    async def async_receive_status(self) -> GoalStatusArray:
        """Wait for the next status array."""
        message, _info = await self.status_subscription.async_take()
        return message

    async def all_statuses_stream(self) -> AsyncIterator[GoalStatusArray]:
        """Yield status arrays, each covering all goals of the server."""
        async for message, _info in self.status_subscription.async_stream():
            yield message

    async def status_stream(self, goal_id: GoalId) -> AsyncIterator[GoalStatus]:
        """Yield the status of one goal from each array that mentions it."""
        async for status_array in self.all_statuses_stream():
            found = next(
                (s for s in status_array.status_list if s.goal_info.goal_id == goal_id),
                None,
            )
            if found is not None:
                yield found