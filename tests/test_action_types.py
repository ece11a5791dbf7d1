import dataclasses

import pytest

from rosclient.action_msgs import GoalStatusEnum, new_goal_id
from rosclient.action_types import (
    Action,
    ActionClientQosPolicies,
    ActionServerQosPolicies,
    FeedbackMessage,
    GetResultRequest,
    GetResultResponse,
    SendGoalRequest,
    SendGoalResponse,
)
from rosclient.builtin_interfaces import Time


def test_action_keeps_type_names():
    action = Action("Fib_Goal", "Fib_Result", "Fib_Feedback")
    assert action.goal_type_name == "Fib_Goal"
    assert action.result_type_name == "Fib_Result"
    assert action.feedback_type_name == "Fib_Feedback"


def test_action_is_immutable_and_comparable():
    action = Action("a", "b", "c")
    assert action == Action("a", "b", "c")
    assert action != Action("a", "b", "d")
    with pytest.raises(dataclasses.FrozenInstanceError):
        action.goal_type_name = "x"


def test_client_qos_policies_hold_values():
    qos = ActionClientQosPolicies("g", "r", "c", "f", "s")
    assert (
        qos.goal_service,
        qos.result_service,
        qos.cancel_service,
        qos.feedback_subscription,
        qos.status_subscription,
    ) == ("g", "r", "c", "f", "s")


def test_server_qos_policies_hold_values():
    qos = ActionServerQosPolicies("g", "r", "c", "f", "s")
    assert (
        qos.goal_service,
        qos.result_service,
        qos.cancel_service,
        qos.feedback_publisher,
        qos.status_publisher,
    ) == ("g", "r", "c", "f", "s")


def test_send_goal_request_equality():
    goal_id = new_goal_id()
    assert SendGoalRequest(goal_id, [1, 2]) == SendGoalRequest(goal_id, [1, 2])
    assert SendGoalRequest(goal_id, [1, 2]) != SendGoalRequest(new_goal_id(), [1, 2])


def test_send_goal_response_fields():
    resp = SendGoalResponse(accepted=True, stamp=Time.DUMMY)
    assert resp.accepted is True
    assert resp.stamp.to_nanos() == 1234567890123


def test_get_result_messages():
    goal_id = new_goal_id()
    assert GetResultRequest(goal_id).goal_id == goal_id
    resp = GetResultResponse(GoalStatusEnum.SUCCEEDED, [0, 1, 1])
    assert resp.status == 4
    assert resp.result == [0, 1, 1]


def test_feedback_message_replace():
    goal_id = new_goal_id()
    msg = FeedbackMessage(goal_id, 0.5)
    other = dataclasses.replace(msg, feedback=0.75)
    assert other.goal_id == goal_id
    assert other.feedback == 0.75
    assert msg.feedback == 0.5