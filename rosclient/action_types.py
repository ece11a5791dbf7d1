"""Type descriptions and component messages of an action."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .action_msgs import GoalId, GoalStatusEnum
from .builtin_interfaces import Time

G = TypeVar("G")
R = TypeVar("R")
F = TypeVar("F")


@dataclass(frozen=True)
class Action(Generic[G, R, F]):
    """Names the goal, result and feedback message types of an action.

    The goal is sent by a client to start the action, the result is reported
    by the server when the action ends, and feedback reports progress while
    the action runs.
    """

    goal_type_name: str
    result_type_name: str
    feedback_type_name: str


@dataclass
class ActionClientQosPolicies:
    """QoS policies for the services and subscriptions of an action client."""

    goal_service: Any
    result_service: Any
    cancel_service: Any
    feedback_subscription: Any
    status_subscription: Any


@dataclass
class ActionServerQosPolicies:
    """QoS policies for the services and publishers of an action server."""

    goal_service: Any
    result_service: Any
    cancel_service: Any
    feedback_publisher: Any
    status_publisher: Any


@dataclass
class SendGoalRequest(Generic[G]):
    """Request of the goal-sending service."""

    goal_id: GoalId
    goal: G


@dataclass
class SendGoalResponse:
    """Response of the goal-sending service."""

    accepted: bool
    stamp: Time


@dataclass
class GetResultRequest:
    """Request of the result-getting service."""

    goal_id: GoalId


@dataclass
class GetResultResponse(Generic[R]):
    """Response of the result-getting service."""

    status: GoalStatusEnum
    result: R


@dataclass
class FeedbackMessage(Generic[F]):
    """Message on the feedback topic."""

    goal_id: GoalId
    feedback: F