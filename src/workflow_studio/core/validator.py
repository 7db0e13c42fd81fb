"""
工作流图结构验证器
"""
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.enums import NodeType
from ..models.workflow import Node, Edge
from ..exceptions import WorkflowValidationError


EMPTY_WORKFLOW = "工作流至少需要一个节点"
MISSING_INPUT = "工作流需要至少一个输入节点"
MISSING_OUTPUT = "工作流需要至少一个输出节点"
INVALID_EDGE = "存在无效的连线"
ISOLATED_NODES = "发现孤立节点: {labels}"


@dataclass(frozen=True)
class ValidationResult:
    """验证结果"""
    valid: bool
    error: Optional[str] = None

    def raise_for_error(self):
        if not self.valid:
            raise WorkflowValidationError(self.error)


VALID = ValidationResult(valid=True)


def check_unique_ids(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
    """检查节点ID和边ID是否唯一"""
    duplicated_nodes = [
        node_id for node_id, count in Counter(n.id for n in nodes).items() if count > 1
    ]
    if duplicated_nodes:
        return ValidationResult(False, f"节点ID重复: {', '.join(duplicated_nodes)}")

    duplicated_edges = [
        edge_id for edge_id, count in Counter(e.id for e in edges).items() if count > 1
    ]
    if duplicated_edges:
        return ValidationResult(False, f"连线ID重复: {', '.join(duplicated_edges)}")

    return VALID


def validate(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
    """
    验证工作流结构

    规则按顺序检查，第一个失败的规则决定错误信息。环路不在此检查，
    由拓扑排序负责报告。

    Args:
        nodes: 节点列表
        edges: 边列表

    Returns:
        ValidationResult: 验证结果
    """
    if not nodes:
        return ValidationResult(False, EMPTY_WORKFLOW)

    if not any(node.type == NodeType.INPUT for node in nodes):
        return ValidationResult(False, MISSING_INPUT)

    if not any(node.type == NodeType.OUTPUT for node in nodes):
        return ValidationResult(False, MISSING_OUTPUT)

    node_ids = {node.id for node in nodes}
    for edge in edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            return ValidationResult(False, INVALID_EDGE)

    connected = set()
    for edge in edges:
        connected.add(edge.source)
        connected.add(edge.target)

    isolated: List[Node] = [
        node for node in nodes
        if node.id not in connected and not node.is_critical
    ]
    if isolated:
        labels = ", ".join(node.label for node in isolated)
        return ValidationResult(False, ISOLATED_NODES.format(labels=labels))

    return VALID


class WorkflowValidator:
    """工作流验证器"""

    def __init__(self, check_ids: bool = True):
        self.check_ids = check_ids

    def validate(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
        if self.check_ids:
            result = check_unique_ids(nodes, edges)
            if not result.valid:
                return result
        return validate(nodes, edges)
