"""
执行状态机
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Any

from ..models.execution import ExecutionStatus
from ..exceptions import StateTransitionError


logger = logging.getLogger(__name__)


S = ExecutionStatus

# 合法转换表；reset 可从任意状态回到 idle，单独处理
TRANSITIONS: Dict[ExecutionStatus, FrozenSet[ExecutionStatus]] = {
    S.IDLE: frozenset({S.RUNNING, S.FAILED}),  # failed: 停止后的执行循环确认中止
    S.RUNNING: frozenset({S.PAUSED, S.COMPLETED, S.FAILED, S.IDLE}),
    S.PAUSED: frozenset({S.RUNNING, S.FAILED, S.IDLE}),
    S.COMPLETED: frozenset({S.RUNNING}),
    S.FAILED: frozenset({S.RUNNING}),
}

STARTABLE = frozenset({S.IDLE, S.COMPLETED, S.FAILED})

# 转换历史保留条数
HISTORY_LIMIT = 100


@dataclass
class ExecutionStateMachine:
    """执行状态机"""
    status: ExecutionStatus = ExecutionStatus.IDLE
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def can_execute(self) -> bool:
        return self.status in STARTABLE

    @property
    def can_pause(self) -> bool:
        return self.status == S.RUNNING

    @property
    def can_resume(self) -> bool:
        return self.status == S.PAUSED

    @property
    def can_stop(self) -> bool:
        return self.status in (S.RUNNING, S.PAUSED)

    @property
    def is_executing(self) -> bool:
        return self.status == S.RUNNING

    def can_transition(self, target: ExecutionStatus) -> bool:
        return target in TRANSITIONS[self.status]

    def transition(self, target: ExecutionStatus, event: str = "") -> ExecutionStatus:
        """执行状态转换"""
        if not self.can_transition(target):
            raise StateTransitionError(self.status.value, target.value, event or None)
        return self._set(target, event)

    def reset(self) -> ExecutionStatus:
        """任意状态回到初始状态，并清空转换历史"""
        self.history.clear()
        return self._set(S.IDLE, "reset")

    def _set(self, target: ExecutionStatus, event: str) -> ExecutionStatus:
        previous = self.status
        self.status = target
        if previous != target:
            self.history.append({
                "timestamp": datetime.now().isoformat(),
                "event": event,
                "from_state": previous.value,
                "to_state": target.value
            })
            del self.history[:-HISTORY_LIMIT]
            logger.debug(f"Execution state: {previous.value} -> {target.value} ({event})")
        return previous
