"""Message types of the action protocol: goal identity, status and cancellation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import IntEnum

from .builtin_interfaces import Time

GoalId = uuid.UUID

GOAL_ID_ZERO: GoalId = uuid.UUID(int=0)


def new_goal_id() -> GoalId:
    """Return a fresh random goal identifier."""
    return uuid.uuid4()


@dataclass(frozen=True)
class GoalInfo:
    """A goal's identifier and the time it was accepted."""

    goal_id: GoalId
    stamp: Time


class GoalStatusEnum(IntEnum):
    UNKNOWN = 0  # also used for a newly received goal
    ACCEPTED = 1
    EXECUTING = 2
    CANCELING = 3
    SUCCEEDED = 4
    CANCELED = 5
    ABORTED = 6


@dataclass(frozen=True)
class GoalStatus:
    goal_info: GoalInfo
    status: GoalStatusEnum


@dataclass
class GoalStatusArray:
    status_list: list[GoalStatus] = field(default_factory=list)


@dataclass(frozen=True)
class CancelGoalRequest:
    """Cancel one or more goals.

    A zero goal id with a zero stamp cancels all goals; a zero id with a stamp
    cancels goals accepted before the stamp; an id with a zero stamp cancels
    that goal; both together cancel the goal and all goals accepted before.
    """

    goal_info: GoalInfo


class CancelGoalResponseEnum(IntEnum):
    NONE = 0
    """The request was accepted; one or more goals are now canceling."""
    REJECTED = 1
    """The request was rejected; no goals changed state."""
    UNKNOWN_GOAL = 2
    """The requested goal id does not exist."""
    GOAL_TERMINATED = 3
    """The goal is already in a terminal state."""


@dataclass
class CancelGoalResponse:
    return_code: CancelGoalResponseEnum
    goals_canceling: list[GoalInfo] = field(default_factory=list)