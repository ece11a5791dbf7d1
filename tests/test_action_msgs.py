import dataclasses

import pytest

from rosclient.action_msgs import (
    GOAL_ID_ZERO,
    CancelGoalRequest,
    CancelGoalResponse,
    CancelGoalResponseEnum,
    GoalInfo,
    GoalStatus,
    GoalStatusArray,
    GoalStatusEnum,
    new_goal_id,
)
from rosclient.builtin_interfaces import Time


def test_new_goal_ids_are_unique_and_non_zero():
    ids = {new_goal_id() for _ in range(50)}
    assert len(ids) == 50
    assert GOAL_ID_ZERO not in ids


def test_goal_ids_are_ordered_relative_to_zero():
    gid = new_goal_id()
    assert GOAL_ID_ZERO < gid
    assert sorted([gid, GOAL_ID_ZERO])[0] == GOAL_ID_ZERO


@pytest.mark.parametrize(
    "raw, member",
    [
        (0, GoalStatusEnum.UNKNOWN),
        (1, GoalStatusEnum.ACCEPTED),
        (2, GoalStatusEnum.EXECUTING),
        (3, GoalStatusEnum.CANCELING),
        (4, GoalStatusEnum.SUCCEEDED),
        (5, GoalStatusEnum.CANCELED),
        (6, GoalStatusEnum.ABORTED),
    ],
)
def test_goal_status_from_wire_value(raw, member):
    assert GoalStatusEnum(raw) is member
    assert int(member) == raw


def test_goal_status_rejects_unknown_value():
    with pytest.raises(ValueError):
        GoalStatusEnum(7)


@pytest.mark.parametrize(
    "raw, member",
    [
        (0, CancelGoalResponseEnum.NONE),
        (1, CancelGoalResponseEnum.REJECTED),
        (2, CancelGoalResponseEnum.UNKNOWN_GOAL),
        (3, CancelGoalResponseEnum.GOAL_TERMINATED),
    ],
)
def test_cancel_response_from_wire_value(raw, member):
    assert CancelGoalResponseEnum(raw) is member


def test_goal_info_equality_and_immutability():
    gid = new_goal_id()
    a = GoalInfo(goal_id=gid, stamp=Time.DUMMY)
    b = GoalInfo(goal_id=gid, stamp=Time.from_nanos(Time.DUMMY.to_nanos()))
    assert a == b
    assert hash(a) == hash(b)
    with pytest.raises(dataclasses.FrozenInstanceError):
        a.goal_id = GOAL_ID_ZERO


def test_status_array_lookup_by_goal():
    gids = [new_goal_id() for _ in range(3)]
    statuses = [
        GoalStatus(GoalInfo(g, Time.ZERO), s)
        for g, s in zip(gids, [GoalStatusEnum.ACCEPTED, GoalStatusEnum.EXECUTING, GoalStatusEnum.ABORTED])
    ]
    array = GoalStatusArray(status_list=statuses)
    found = next(gs for gs in array.status_list if gs.goal_info.goal_id == gids[1])
    assert found.status is GoalStatusEnum.EXECUTING
    assert GoalStatusArray().status_list == []


def test_cancel_request_carries_goal_info():
    info = GoalInfo(GOAL_ID_ZERO, Time.ZERO)
    assert CancelGoalRequest(info).goal_info == info


def test_cancel_response_default_list_is_independent():
    first = CancelGoalResponse(CancelGoalResponseEnum.REJECTED)
    second = CancelGoalResponse(CancelGoalResponseEnum.REJECTED)
    first.goals_canceling.append(GoalInfo(new_goal_id(), Time.ZERO))
    assert second.goals_canceling == []
    assert len(first.goals_canceling) == 1