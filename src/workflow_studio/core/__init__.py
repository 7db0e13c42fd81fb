"""Core workflow execution components"""

from .engine import WorkflowExecutionEngine, EngineSnapshot
from .validator import WorkflowValidator, ValidationResult, validate, check_unique_ids
from .ordering import topological_sort, execution_levels, build_adjacency
from .state_machine import ExecutionStateMachine
from .executors import NodeExecutor, ExecutorRegistry, SimulatedNodeExecutor
from .history import HistoryManager
from .document import WorkflowDocument, SelectionState
from .parser import WorkflowParser

__all__ = [
    "WorkflowExecutionEngine",
    "EngineSnapshot",
    "WorkflowValidator",
    "ValidationResult",
    "validate",
    "check_unique_ids",
    "topological_sort",
    "execution_levels",
    "build_adjacency",
    "ExecutionStateMachine",
    "NodeExecutor",
    "ExecutorRegistry",
    "SimulatedNodeExecutor",
    "HistoryManager",
    "WorkflowDocument",
    "SelectionState",
    "WorkflowParser"
]
