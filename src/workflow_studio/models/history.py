"""
撤销/重做历史模型
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .workflow import Node, Edge


class HistoryAction(str, Enum):
    """历史记录动作"""
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"
    MOVE = "move"


@dataclass(frozen=True)
class Viewport:
    """视口状态"""
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


@dataclass(frozen=True)
class HistoryRecord:
    """历史快照（不可变）"""
    id: str
    action: HistoryAction
    timestamp: datetime = field(default_factory=datetime.now)
    nodes: Optional[Tuple[Node, ...]] = None
    edges: Optional[Tuple[Edge, ...]] = None
    viewport: Optional[Viewport] = None


@dataclass
class UndoRedoStack:
    """撤销重做栈"""
    present: HistoryRecord
    past: List[HistoryRecord] = field(default_factory=list)
    future: List[HistoryRecord] = field(default_factory=list)
