"""
工作流定义模型
"""
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Union
from uuid import uuid4
from datetime import datetime

from .enums import NodeType, NodeStatus
from .node_data import NodeData, build_node_data


@dataclass
class Position:
    """画布坐标"""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Node:
    """工作流节点"""
    id: str
    type: NodeType
    data: NodeData
    position: Position = field(default_factory=Position)

    def __post_init__(self):
        """规范化节点类型与数据"""
        if not self.id:
            raise ValueError("Node id must not be empty")
        self.type = NodeType(self.type)
        self.data = build_node_data(self.type, self.data)
        if isinstance(self.position, dict):
            self.position = Position(**self.position)

    def __setattr__(self, name: str, value: Any):
        # 节点 ID 创建后不可变
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Node id is immutable")
        super().__setattr__(name, value)

    @property
    def label(self) -> str:
        return self.data.label

    @property
    def is_critical(self) -> bool:
        return self.type.is_critical

    def set_status(self, status: NodeStatus, error: Optional[str] = None):
        """更新执行状态（原地修改）"""
        self.data.status = status
        self.data.error = error


@dataclass
class Edge:
    """工作流边"""
    source: str
    target: str
    id: str = field(default_factory=lambda: f"edge-{uuid4().hex[:12]}")

    def connects(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass
class Workflow:
    """工作流定义"""
    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = "Untitled Workflow"
    version: str = "1.0.0"
    description: Optional[str] = None
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    is_public: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def get_node(self, node_id: str) -> Optional[Node]:
        """根据ID获取节点"""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def make_node(
    node_id: str,
    node_type: Union[NodeType, str],
    label: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    **extra: Any
) -> Node:
    """快捷创建节点"""
    data = {"label": label or node_id, "config": config or {}}
    data.update(extra)
    return Node(id=node_id, type=NodeType(node_type), data=data)
