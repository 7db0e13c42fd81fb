"""
可编辑的工作流文档

持有当前节点/连线集合、选择状态和视口；每次结构修改后记录历史快照。
"""
import copy
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..models.enums import NodeType
from ..models.workflow import Node, Edge, Position, Workflow
from ..models.node_data import build_node_data
from ..models.history import HistoryAction, HistoryRecord, Viewport
from .history import HistoryManager, DEFAULT_HISTORY_LIMIT


logger = logging.getLogger(__name__)


@dataclass
class SelectionState:
    """选择状态（不参与撤销/重做）"""
    nodes: List[str] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)


class WorkflowDocument:
    """工作流编辑文档"""

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.selection = SelectionState()
        self.viewport = Viewport()
        self.current_workflow: Optional[Workflow] = None
        self.history = HistoryManager(limit=history_limit)

    # ===== 查询 =====

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    @property
    def selected_nodes(self) -> List[Node]:
        return [node for node in self.nodes if node.id in self.selection.nodes]

    @property
    def selected_edges(self) -> List[Edge]:
        return [edge for edge in self.edges if edge.id in self.selection.edges]

    @property
    def is_valid(self) -> bool:
        """快速检查：非空且包含输入节点"""
        return bool(self.nodes) and any(node.type == NodeType.INPUT for node in self.nodes)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def stats(self) -> Dict[str, int]:
        return {
            "node_count": len(self.nodes),
            "edge_count": len(self.edges),
            "selected_count": len(self.selection.nodes) + len(self.selection.edges)
        }

    # ===== 节点操作 =====

    def add_node(self, node: Node):
        self.nodes.append(node)
        self._record(HistoryAction.ADD)

    def add_nodes(self, nodes: Iterable[Node]):
        self.nodes.extend(nodes)
        self._record(HistoryAction.ADD)

    def remove_node(self, node_id: str):
        """删除节点及其关联连线"""
        self.nodes = [node for node in self.nodes if node.id != node_id]
        removed_edges = {edge.id for edge in self.edges if edge.connects(node_id)}
        self.edges = [edge for edge in self.edges if edge.id not in removed_edges]
        self.selection.nodes = [i for i in self.selection.nodes if i != node_id]
        self.selection.edges = [i for i in self.selection.edges if i not in removed_edges]
        self._record(HistoryAction.DELETE)

    def update_node(self, node_id: str, **updates: Any):
        """替换节点字段（id 除外）"""
        if "id" in updates:
            raise ValueError("Node id is immutable")

        index = self._node_index(node_id)
        if index is not None:
            self.nodes[index] = replace(self.nodes[index], **updates)
        self._record(HistoryAction.UPDATE)

    def update_node_data(self, node_id: str, **data: Any):
        """合并节点数据，不记录历史（执行状态更新等）"""
        index = self._node_index(node_id)
        if index is None:
            return
        node = self.nodes[index]
        merged = node.data.model_dump()
        merged.update(data)
        node.data = build_node_data(node.type, merged)

    def move_node(self, node_id: str, x: float, y: float):
        index = self._node_index(node_id)
        if index is not None:
            self.nodes[index] = replace(self.nodes[index], position=Position(x, y))
        self._record(HistoryAction.MOVE)

    # ===== 连线操作 =====

    def add_edge(self, edge: Edge):
        self.edges.append(edge)
        self._record(HistoryAction.ADD)

    def add_edges(self, edges: Iterable[Edge]):
        self.edges.extend(edges)
        self._record(HistoryAction.ADD)

    def remove_edge(self, edge_id: str):
        self.edges = [edge for edge in self.edges if edge.id != edge_id]
        self.selection.edges = [i for i in self.selection.edges if i != edge_id]
        self._record(HistoryAction.DELETE)

    def update_edge(self, edge_id: str, **updates: Any):
        if "id" in updates:
            raise ValueError("Edge id is immutable")

        for index, edge in enumerate(self.edges):
            if edge.id == edge_id:
                self.edges[index] = replace(edge, **updates)
                break
        self._record(HistoryAction.UPDATE)

    # ===== 选择 =====

    def select_node(self, node_id: str, multi: bool = False):
        if multi:
            if node_id not in self.selection.nodes:
                self.selection.nodes.append(node_id)
        else:
            self.selection = SelectionState(nodes=[node_id])

    def select_edge(self, edge_id: str, multi: bool = False):
        if multi:
            if edge_id not in self.selection.edges:
                self.selection.edges.append(edge_id)
        else:
            self.selection = SelectionState(edges=[edge_id])

    def select_all(self):
        self.selection = SelectionState(
            nodes=[node.id for node in self.nodes],
            edges=[edge.id for edge in self.edges]
        )

    def clear_selection(self):
        self.selection = SelectionState()

    # ===== 视口 =====

    def update_viewport(self, x: float = None, y: float = None, zoom: float = None):
        self.viewport = Viewport(
            x=self.viewport.x if x is None else x,
            y=self.viewport.y if y is None else y,
            zoom=self.viewport.zoom if zoom is None else zoom
        )

    # ===== 撤销/重做 =====

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, record: Optional[HistoryRecord]) -> bool:
        """整体替换节点/连线/视口，选择状态保持不变"""
        if record is None:
            return False
        if record.nodes is not None:
            self.nodes = copy.deepcopy(list(record.nodes))
        if record.edges is not None:
            self.edges = copy.deepcopy(list(record.edges))
        if record.viewport is not None:
            self.viewport = record.viewport
        return True

    # ===== 工作流 =====

    def load_workflow(self, workflow: Workflow):
        """加载工作流并重置历史"""
        self.current_workflow = workflow
        self.nodes = copy.deepcopy(workflow.nodes)
        self.edges = copy.deepcopy(workflow.edges)
        self.clear_selection()
        self.history.reset(self.nodes, self.edges, self.viewport)
        logger.info(f"Loaded workflow {workflow.id} ({len(self.nodes)} nodes, {len(self.edges)} edges)")

    def clear_workflow(self):
        """清空工作流并重置历史"""
        self.nodes = []
        self.edges = []
        self.clear_selection()
        self.current_workflow = None
        self.viewport = Viewport()
        self.history.reset(self.nodes, self.edges, self.viewport)

    def export_workflow(self) -> Workflow:
        """导出当前文档为工作流定义"""
        current = self.current_workflow
        workflow = Workflow(
            name=current.name if current else "Untitled Workflow",
            description=current.description if current else None,
            nodes=copy.deepcopy(self.nodes),
            edges=copy.deepcopy(self.edges),
            version="1.0.0",
            tags=list(current.tags) if current else [],
            is_public=current.is_public if current else False,
            updated_at=datetime.now()
        )
        if current:
            workflow.id = current.id
            workflow.created_at = current.created_at
        return workflow

    # ===== 内部工具 =====

    def _node_index(self, node_id: str) -> Optional[int]:
        for index, node in enumerate(self.nodes):
            if node.id == node_id:
                return index
        return None

    def _record(self, action: HistoryAction):
        self.history.record(action, self.nodes, self.edges, self.viewport)
