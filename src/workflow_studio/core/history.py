"""
撤销/重做历史管理
"""
import copy
import logging
from datetime import datetime
from itertools import count
from typing import List, Optional, Sequence

from ..models.workflow import Node, Edge
from ..models.history import HistoryAction, HistoryRecord, UndoRedoStack, Viewport


logger = logging.getLogger(__name__)


DEFAULT_HISTORY_LIMIT = 50


class HistoryManager:
    """
    线性撤销/重做历史

    每次结构修改记录一个完整快照；新的修改会清空重做分支。
    ``past`` 超过上限时丢弃最旧的记录。
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._ids = count(1)
        self.stack = UndoRedoStack(present=self._snapshot(HistoryAction.ADD, [], [], Viewport()))

    @property
    def present(self) -> HistoryRecord:
        return self.stack.present

    @property
    def past(self) -> List[HistoryRecord]:
        return list(self.stack.past)

    @property
    def future(self) -> List[HistoryRecord]:
        return list(self.stack.future)

    @property
    def can_undo(self) -> bool:
        return len(self.stack.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.stack.future) > 0

    def record(
        self,
        action: HistoryAction,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        viewport: Optional[Viewport] = None
    ) -> HistoryRecord:
        """记录当前状态为新的快照"""
        record = self._snapshot(HistoryAction(action), nodes, edges, viewport)

        self.stack.past.append(self.stack.present)
        self.stack.present = record
        self.stack.future.clear()

        if len(self.stack.past) > self.limit:
            self.stack.past.pop(0)

        logger.debug(f"History recorded: {record.action.value} ({len(self.stack.past)} undo steps)")
        return record

    def undo(self) -> Optional[HistoryRecord]:
        """撤销：返回需要恢复的快照，无法撤销时返回 None"""
        if not self.can_undo:
            return None

        self.stack.future.insert(0, self.stack.present)
        self.stack.present = self.stack.past.pop()
        return self.stack.present

    def redo(self) -> Optional[HistoryRecord]:
        """重做：返回需要恢复的快照，无法重做时返回 None"""
        if not self.can_redo:
            return None

        self.stack.past.append(self.stack.present)
        self.stack.present = self.stack.future.pop(0)
        return self.stack.present

    def reset(
        self,
        nodes: Sequence[Node] = (),
        edges: Sequence[Edge] = (),
        viewport: Optional[Viewport] = None
    ) -> HistoryRecord:
        """重新初始化为单个快照（不可撤销）"""
        self.stack = UndoRedoStack(
            present=self._snapshot(HistoryAction.ADD, nodes, edges, viewport)
        )
        return self.stack.present

    def _snapshot(
        self,
        action: HistoryAction,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        viewport: Optional[Viewport]
    ) -> HistoryRecord:
        return HistoryRecord(
            id=f"{int(datetime.now().timestamp() * 1000)}-{next(self._ids)}",
            action=action,
            nodes=tuple(copy.deepcopy(list(nodes))),
            edges=tuple(copy.deepcopy(list(edges))),
            viewport=viewport
        )
