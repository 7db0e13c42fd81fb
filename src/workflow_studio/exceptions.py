"""
工作流引擎异常定义
"""
from typing import Iterable, Optional


class WorkflowEngineError(Exception):
    """工作流引擎基础异常"""
    pass


class WorkflowParseError(WorkflowEngineError):
    """工作流解析异常"""
    pass


class WorkflowValidationError(WorkflowEngineError):
    """工作流验证异常（图结构问题，执行前报告）"""
    pass


class CycleError(WorkflowValidationError):
    """工作流存在循环依赖，无法得到完整的拓扑顺序"""
    def __init__(self, node_ids: Iterable[str]):
        self.node_ids = list(node_ids)
        super().__init__(
            f"工作流存在循环依赖: {', '.join(self.node_ids)}"
        )


class WorkflowExecutionError(WorkflowEngineError):
    """工作流执行异常"""
    pass


class NodeExecutionError(WorkflowExecutionError):
    """节点执行异常"""
    def __init__(self, node_id: str, message: str, cause: Optional[Exception] = None):
        self.node_id = node_id
        self.message = message
        self.cause = cause
        super().__init__(f"Node '{node_id}' execution failed: {message}")


class WorkflowStoppedError(WorkflowExecutionError):
    """工作流被用户停止"""
    pass


class WorkflowBusyError(WorkflowExecutionError):
    """当前状态不允许启动新的执行"""
    pass


class StateTransitionError(WorkflowEngineError):
    """状态转换异常"""
    def __init__(self, current_state: str, target_state: str, message: str = None):
        self.current_state = current_state
        self.target_state = target_state
        msg = f"Invalid state transition from '{current_state}' to '{target_state}'"
        if message:
            msg += f": {message}"
        super().__init__(msg)
