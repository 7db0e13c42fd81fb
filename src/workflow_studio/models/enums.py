"""
模型枚举定义
"""
from enum import Enum


class NodeType(str, Enum):
    """节点类型"""
    INPUT = "input"
    OUTPUT = "output"
    LLM = "llm"
    PROCESSOR = "processor"
    CONDITION = "condition"
    CUSTOM = "custom"
    LOOP = "loop"
    AGGREGATE = "aggregate"
    API = "api"
    HTTP = "http"

    @property
    def is_critical(self) -> bool:
        """输入/输出节点失败时整个执行终止"""
        return self in (NodeType.INPUT, NodeType.OUTPUT)


class NodeStatus(str, Enum):
    """节点执行状态"""
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
