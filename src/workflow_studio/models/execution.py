"""
工作流执行模型
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from enum import Enum
from datetime import datetime
from uuid import uuid4

from ..exceptions import StateTransitionError


class ExecutionStatus(str, Enum):
    """工作流执行状态"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = (ExecutionStatus.COMPLETED, ExecutionStatus.FAILED)


@dataclass(frozen=True)
class ExecutionError:
    """节点执行错误记录"""
    node_id: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "message": self.message,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class ExecutionResult:
    """工作流执行结果"""
    workflow_id: str
    status: ExecutionStatus = ExecutionStatus.RUNNING
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    duration: Optional[float] = None  # 毫秒
    results: Dict[str, Any] = field(default_factory=dict)
    errors: List[ExecutionError] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _ensure_open(self, target: ExecutionStatus):
        if self.is_terminal:
            raise StateTransitionError(
                self.status.value, target.value, "execution result is already final"
            )

    def record_result(self, node_id: str, output: Any):
        """记录节点输出"""
        self._ensure_open(ExecutionStatus.RUNNING)
        self.results[node_id] = output

    def record_error(self, node_id: str, message: str) -> ExecutionError:
        """记录节点错误"""
        self._ensure_open(ExecutionStatus.RUNNING)
        error = ExecutionError(node_id=node_id, message=message)
        self.errors.append(error)
        return error

    def _close(self, status: ExecutionStatus):
        self.end_time = datetime.now()
        self.duration = (self.end_time - self.start_time).total_seconds() * 1000
        self.status = status

    def finish(self):
        """完成执行：有错误则为失败，否则为完成"""
        target = ExecutionStatus.FAILED if self.errors else ExecutionStatus.COMPLETED
        self._ensure_open(target)
        self._close(target)

    def fail(self):
        """执行中止"""
        self._ensure_open(ExecutionStatus.FAILED)
        self._close(ExecutionStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
            "results": dict(self.results),
            "errors": [error.to_dict() for error in self.errors]
        }


class ExecutionEventType(Enum):
    """执行事件类型"""
    WORKFLOW_STARTED = "workflow_started"
    WORKFLOW_COMPLETED = "workflow_completed"
    WORKFLOW_FAILED = "workflow_failed"
    WORKFLOW_PAUSED = "workflow_paused"
    WORKFLOW_RESUMED = "workflow_resumed"
    WORKFLOW_STOPPED = "workflow_stopped"
    WORKFLOW_RESET = "workflow_reset"

    NODE_STARTED = "node_started"
    NODE_COMPLETED = "node_completed"
    NODE_FAILED = "node_failed"

    PROGRESS = "progress"


@dataclass
class ExecutionEvent:
    """执行事件"""
    event_type: ExecutionEventType
    workflow_id: Optional[str] = None
    node_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)
