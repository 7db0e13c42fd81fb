"""
执行状态机测试
"""
import pytest

from workflow_studio.core.state_machine import ExecutionStateMachine, HISTORY_LIMIT
from workflow_studio.exceptions import StateTransitionError
from workflow_studio.models import ExecutionStatus


class TestExecutionStateMachine:

    def test_initial_state(self):
        machine = ExecutionStateMachine()
        assert machine.status == ExecutionStatus.IDLE
        assert machine.can_execute
        assert not machine.can_pause
        assert not machine.can_resume
        assert not machine.can_stop

    def test_run_pause_resume_complete(self):
        machine = ExecutionStateMachine()
        machine.transition(ExecutionStatus.RUNNING, "start")
        assert machine.is_executing and machine.can_pause

        machine.transition(ExecutionStatus.PAUSED, "pause")
        assert machine.can_resume and machine.can_stop
        assert not machine.can_execute

        machine.transition(ExecutionStatus.RUNNING, "resume")
        machine.transition(ExecutionStatus.COMPLETED, "finished")
        assert machine.can_execute

        assert [h["to_state"] for h in machine.history] == [
            "running", "paused", "running", "completed"
        ]

    @pytest.mark.parametrize("current,target", [
        (ExecutionStatus.IDLE, ExecutionStatus.PAUSED),
        (ExecutionStatus.IDLE, ExecutionStatus.COMPLETED),
        (ExecutionStatus.COMPLETED, ExecutionStatus.PAUSED),
        (ExecutionStatus.FAILED, ExecutionStatus.IDLE),
    ])
    def test_invalid_transitions(self, current, target):
        machine = ExecutionStateMachine(status=current)
        with pytest.raises(StateTransitionError) as exc_info:
            machine.transition(target)
        assert exc_info.value.current_state == current.value
        assert exc_info.value.target_state == target.value

    def test_reset_from_any_state(self):
        for status in ExecutionStatus:
            machine = ExecutionStateMachine(status=status)
            machine.reset()
            assert machine.status == ExecutionStatus.IDLE

    def test_reset_idle_records_nothing(self):
        machine = ExecutionStateMachine()
        machine.reset()
        assert machine.history == []

    def test_idle_to_failed_after_stop(self):
        machine = ExecutionStateMachine()
        machine.transition(ExecutionStatus.RUNNING, "start")
        machine.transition(ExecutionStatus.IDLE, "stop")
        machine.transition(ExecutionStatus.FAILED, "stopped by user")
        assert machine.can_execute

    def test_reset_clears_history(self):
        machine = ExecutionStateMachine()
        machine.transition(ExecutionStatus.RUNNING, "start")
        machine.transition(ExecutionStatus.COMPLETED, "finished")

        machine.reset()

        assert [h["event"] for h in machine.history] == ["reset"]

    def test_history_is_capped(self):
        machine = ExecutionStateMachine()
        for _ in range(HISTORY_LIMIT):
            machine.transition(ExecutionStatus.RUNNING, "start")
            machine.transition(ExecutionStatus.COMPLETED, "finished")

        assert len(machine.history) == HISTORY_LIMIT
        assert machine.history[-1]["to_state"] == "completed"
