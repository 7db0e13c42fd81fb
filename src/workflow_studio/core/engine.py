"""
工作流执行引擎
"""
import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, List, Optional, Sequence

from ..config import EngineSettings
from ..models.enums import NodeStatus
from ..models.workflow import Node, Edge
from ..models.execution import (
    ExecutionStatus, ExecutionResult, ExecutionEvent, ExecutionEventType
)
from ..exceptions import (
    CycleError, NodeExecutionError, WorkflowBusyError,
    WorkflowStoppedError, WorkflowValidationError
)
from ..integrations.event_bus import EventBus
from .executors import NodeContext, NodeHandler, SimulatedNodeExecutor
from .ordering import topological_sort
from .state_machine import ExecutionStateMachine
from .validator import WorkflowValidator


logger = logging.getLogger(__name__)


BUSY_MESSAGE = "工作流正在执行中"
STOPPED_MESSAGE = "执行被用户停止"
CANCELLED_MESSAGE = "执行被取消"
NODE_FAILED_MESSAGE = "节点执行失败"


@dataclass(frozen=True)
class EngineSnapshot:
    """引擎可观察状态快照"""
    status: ExecutionStatus
    progress: float
    current_node_id: Optional[str]
    last_error: Optional[str]
    result: Optional[ExecutionResult]


class WorkflowExecutionEngine:
    """
    工作流执行引擎

    按拓扑顺序逐个执行节点，支持暂停、恢复、停止和重置。每个引擎实例
    同一时间只有一个活动执行。

    Args:
        node_executor: 节点执行函数 ``(node, prior_results) -> awaitable``，
            默认使用模拟执行器
        event_bus: 执行事件发布的事件总线
        settings: 引擎配置
        validator: 工作流结构验证器
    """

    EVENT_TOPIC = "workflow.execution.events"

    def __init__(
        self,
        node_executor: Optional[NodeHandler] = None,
        event_bus: Optional[EventBus] = None,
        settings: Optional[EngineSettings] = None,
        validator: Optional[WorkflowValidator] = None
    ):
        self.settings = settings or EngineSettings()
        self.node_executor = node_executor or SimulatedNodeExecutor(
            self.settings.sim_min_latency,
            self.settings.sim_max_latency
        )
        self.event_bus = event_bus or EventBus()
        self.validator = validator or WorkflowValidator()

        self._state = ExecutionStateMachine()
        self._progress = 0.0
        self._current_node_id: Optional[str] = None
        self._last_error: Optional[str] = None
        self._result: Optional[ExecutionResult] = None

        # 每次启动或重置递增，旧的执行循环据此判断自己已失效
        self._run_token = 0
        self._state_changed = asyncio.Event()

    # ===== 可观察状态 =====

    @property
    def status(self) -> ExecutionStatus:
        return self._state.status

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def current_node_id(self) -> Optional[str]:
        return self._current_node_id

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def result(self) -> Optional[ExecutionResult]:
        return self._result

    @property
    def can_execute(self) -> bool:
        return self._state.can_execute

    @property
    def can_pause(self) -> bool:
        return self._state.can_pause

    @property
    def can_resume(self) -> bool:
        return self._state.can_resume

    @property
    def is_executing(self) -> bool:
        return self._state.is_executing

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            status=self.status,
            progress=self._progress,
            current_node_id=self._current_node_id,
            last_error=self._last_error,
            result=self._result
        )

    async def subscribe(self, handler: Callable):
        """订阅执行事件"""
        await self.event_bus.subscribe(self.EVENT_TOPIC, handler)

    async def unsubscribe(self, handler: Callable):
        await self.event_bus.unsubscribe(self.EVENT_TOPIC, handler)

    # ===== 执行 =====

    async def execute_workflow(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        workflow_id: Optional[str] = None
    ) -> ExecutionResult:
        """
        执行工作流

        Returns:
            ExecutionResult: 执行结果；非关键节点失败时状态为 failed

        Raises:
            WorkflowBusyError: 当前状态不允许启动
            WorkflowValidationError: 图结构无效（含 CycleError）
            NodeExecutionError: 输入/输出节点执行失败
            WorkflowStoppedError: 执行被用户停止
        """
        if not self._state.can_execute:
            raise WorkflowBusyError(BUSY_MESSAGE)

        nodes = list(nodes)
        edges = list(edges)

        validation = self.validator.validate(nodes, edges)
        if not validation.valid:
            await self._reject(validation.error)
            raise WorkflowValidationError(validation.error)

        try:
            order = topological_sort(nodes, edges)
        except CycleError as e:
            await self._reject(str(e))
            raise

        self._clear()
        self._run_token += 1
        token = self._run_token

        result = ExecutionResult(
            workflow_id=workflow_id or f"workflow-{int(time.time() * 1000)}"
        )
        self._result = result
        self._transition(ExecutionStatus.RUNNING, "start")
        for node in nodes:
            node.set_status(NodeStatus.IDLE)

        logger.info(f"Workflow {result.workflow_id} started with {len(order)} nodes")
        await self._publish(ExecutionEventType.WORKFLOW_STARTED, total=len(order))

        try:
            await self._run(order, result, token)

        except WorkflowStoppedError:
            if not result.is_terminal:
                result.fail()
            if token == self._run_token:
                # stop() 已回到 idle，执行循环确认中止后进入 failed
                self._transition(ExecutionStatus.FAILED, "stopped by user")
                self._last_error = STOPPED_MESSAGE
                logger.info(f"Workflow {result.workflow_id} stopped by user")
                await self._publish(ExecutionEventType.WORKFLOW_FAILED, error=STOPPED_MESSAGE)
            raise

        except NodeExecutionError as e:
            result.fail()
            if token == self._run_token:
                self._transition(ExecutionStatus.FAILED, "critical node failed")
                self._last_error = e.message
                logger.error(f"Workflow {result.workflow_id} aborted: {e}")
                await self._publish(
                    ExecutionEventType.WORKFLOW_FAILED,
                    node_id=e.node_id,
                    error=e.message
                )
            raise

        except asyncio.CancelledError:
            if not result.is_terminal:
                result.fail()
            if token == self._run_token and self._state.can_stop:
                self._transition(ExecutionStatus.FAILED, "cancelled")
                self._last_error = CANCELLED_MESSAGE
            raise

        finally:
            if token == self._run_token:
                self._current_node_id = None

        return result

    async def _run(self, order: List[Node], result: ExecutionResult, token: int):
        """按顺序执行节点"""
        total = len(order)

        for index, node in enumerate(order):
            await self._checkpoint(token)

            self._current_node_id = node.id
            self._progress = (index / total) * 100
            await self._publish(ExecutionEventType.PROGRESS, node_id=node.id, progress=self._progress)

            await self._execute_node(node, result, token)

        await self._checkpoint(token)

        result.finish()
        self._progress = 100.0
        if result.status == ExecutionStatus.COMPLETED:
            self._transition(ExecutionStatus.COMPLETED, "finished")
            logger.info(
                f"Workflow {result.workflow_id} completed in {result.duration:.0f}ms"
            )
            await self._publish(ExecutionEventType.WORKFLOW_COMPLETED, duration=result.duration)
        else:
            self._transition(ExecutionStatus.FAILED, "finished with errors")
            self._last_error = result.errors[-1].message
            logger.warning(
                f"Workflow {result.workflow_id} finished with {len(result.errors)} failed node(s)"
            )
            await self._publish(
                ExecutionEventType.WORKFLOW_FAILED,
                duration=result.duration,
                errors=len(result.errors)
            )

    async def _execute_node(self, node: Node, result: ExecutionResult, token: int):
        """执行单个节点，按节点类型决定失败策略"""
        node.set_status(NodeStatus.RUNNING)
        await self._publish(ExecutionEventType.NODE_STARTED, node_id=node.id)

        # 只暴露已执行节点的结果
        context: NodeContext = MappingProxyType(dict(result.results))

        try:
            output = await self._invoke(node, context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._is_stale(token):
                raise WorkflowStoppedError(STOPPED_MESSAGE) from e

            message = e.message if isinstance(e, NodeExecutionError) else (str(e) or NODE_FAILED_MESSAGE)
            result.record_error(node.id, message)
            node.set_status(NodeStatus.ERROR, message)
            logger.error(f"Node {node.id} execution failed: {message}", exc_info=True)
            await self._publish(ExecutionEventType.NODE_FAILED, node_id=node.id, error=message)

            if node.is_critical:
                raise NodeExecutionError(node.id, message, e) from e
            return

        if self._is_stale(token):
            raise WorkflowStoppedError(STOPPED_MESSAGE)

        result.record_result(node.id, output)
        node.set_status(NodeStatus.SUCCESS)
        logger.debug(f"Node {node.id} completed")
        await self._publish(ExecutionEventType.NODE_COMPLETED, node_id=node.id)

    async def _invoke(self, node: Node, context: NodeContext) -> Any:
        """调用节点执行器，可选超时"""
        outcome = self.node_executor(node, context)
        if not inspect.isawaitable(outcome):
            return outcome

        timeout = self.settings.node_timeout
        if timeout is None:
            return await outcome

        try:
            return await asyncio.wait_for(outcome, timeout=timeout)
        except asyncio.TimeoutError:
            raise NodeExecutionError(node.id, f"节点执行超时 ({timeout}s)")

    async def _checkpoint(self, token: int):
        """
        节点边界检查点

        暂停时挂起等待状态变化，最长 ``pause_poll_interval`` 秒重新检查一次；
        停止或重置后抛出 WorkflowStoppedError。
        """
        while self._state.status == ExecutionStatus.PAUSED and token == self._run_token:
            self._state_changed.clear()
            try:
                await asyncio.wait_for(
                    self._state_changed.wait(),
                    timeout=self.settings.pause_poll_interval
                )
            except asyncio.TimeoutError:
                pass

        if self._is_stale(token):
            raise WorkflowStoppedError(STOPPED_MESSAGE)

    def _is_stale(self, token: int) -> bool:
        """执行已被停止或被新的执行/重置取代"""
        return token != self._run_token or self._state.status == ExecutionStatus.IDLE

    # ===== 用户控制 =====

    async def pause(self) -> bool:
        """暂停执行（仅运行中有效）"""
        if not self._state.can_pause:
            return False

        self._transition(ExecutionStatus.PAUSED, "pause")
        logger.info("Workflow execution paused")
        await self._publish(ExecutionEventType.WORKFLOW_PAUSED)
        return True

    async def resume(self) -> bool:
        """恢复执行（仅暂停中有效）"""
        if not self._state.can_resume:
            return False

        self._transition(ExecutionStatus.RUNNING, "resume")
        logger.info("Workflow execution resumed")
        await self._publish(ExecutionEventType.WORKFLOW_RESUMED)
        return True

    async def stop(self) -> bool:
        """停止执行（运行中或暂停中有效）"""
        if not self._state.can_stop:
            return False

        self._transition(ExecutionStatus.IDLE, "stop")
        self._current_node_id = None
        self._progress = 0.0
        logger.info("Workflow execution stopped")
        await self._publish(ExecutionEventType.WORKFLOW_STOPPED)
        return True

    async def reset(self) -> bool:
        """重置所有执行状态，不影响工作流图本身"""
        self._run_token += 1
        self._state.reset()
        self._clear()
        self._state_changed.set()
        await self._publish(ExecutionEventType.WORKFLOW_RESET)
        return True

    # ===== 内部工具 =====

    def _clear(self):
        self._result = None
        self._progress = 0.0
        self._current_node_id = None
        self._last_error = None

    async def _reject(self, message: str):
        """执行前的验证失败：回到 idle 并记录错误"""
        self._state.reset()
        self._clear()
        self._last_error = message
        logger.warning(f"Workflow validation failed: {message}")
        await self._publish(ExecutionEventType.WORKFLOW_FAILED, error=message, stage="validation")

    def _transition(self, target: ExecutionStatus, event: str):
        self._state.transition(target, event)
        self._state_changed.set()

    async def _publish(self, event_type: ExecutionEventType, node_id: Optional[str] = None, **data: Any):
        event = ExecutionEvent(
            event_type=event_type,
            workflow_id=self._result.workflow_id if self._result else None,
            node_id=node_id,
            data=data
        )
        await self.event_bus.publish(self.EVENT_TOPIC, event)
