"""Workflow, execution and history models"""

from .enums import NodeType, NodeStatus
from .node_data import (
    NodeData, LLMNodeData, ConditionNodeData, LoopNodeData,
    AggregateNodeData, ApiNodeData, HttpNodeData, build_node_data
)
from .workflow import Workflow, Node, Edge, Position, make_node
from .execution import (
    ExecutionStatus, ExecutionError, ExecutionResult,
    ExecutionEvent, ExecutionEventType
)
from .history import HistoryAction, HistoryRecord, UndoRedoStack, Viewport

__all__ = [
    "NodeType",
    "NodeStatus",
    "NodeData",
    "LLMNodeData",
    "ConditionNodeData",
    "LoopNodeData",
    "AggregateNodeData",
    "ApiNodeData",
    "HttpNodeData",
    "build_node_data",
    "Workflow",
    "Node",
    "Edge",
    "Position",
    "make_node",
    "ExecutionStatus",
    "ExecutionError",
    "ExecutionResult",
    "ExecutionEvent",
    "ExecutionEventType",
    "HistoryAction",
    "HistoryRecord",
    "UndoRedoStack",
    "Viewport"
]
