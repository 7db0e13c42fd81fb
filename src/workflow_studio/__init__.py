"""
Workflow Studio - 工作流执行引擎
"""

__version__ = "0.1.0"

from .core.engine import WorkflowExecutionEngine
from .core.validator import WorkflowValidator
from .core.ordering import topological_sort
from .core.history import HistoryManager
from .core.document import WorkflowDocument
from .core.parser import WorkflowParser
from .models.workflow import Workflow, Node, Edge
from .models.execution import ExecutionResult, ExecutionStatus

__all__ = [
    "WorkflowExecutionEngine",
    "WorkflowValidator",
    "topological_sort",
    "HistoryManager",
    "WorkflowDocument",
    "WorkflowParser",
    "Workflow",
    "Node",
    "Edge",
    "ExecutionResult",
    "ExecutionStatus"
]
