"""
拓扑排序
"""
from collections import deque
from typing import Dict, List, Sequence

from ..models.workflow import Node, Edge
from ..exceptions import CycleError, WorkflowValidationError


def build_adjacency(nodes: Sequence[Node], edges: Sequence[Edge]) -> Dict[str, List[str]]:
    """构建执行图（邻接表），保持节点和边的原始顺序"""
    adjacency: Dict[str, List[str]] = {node.id: [] for node in nodes}

    for edge in edges:
        if edge.source not in adjacency or edge.target not in adjacency:
            raise WorkflowValidationError(
                f"Edge '{edge.id}' references unknown node ({edge.source} -> {edge.target})"
            )
        adjacency[edge.source].append(edge.target)

    return adjacency


def _in_degrees(nodes: Sequence[Node], adjacency: Dict[str, List[str]]) -> Dict[str, int]:
    in_degree = {node.id: 0 for node in nodes}
    for targets in adjacency.values():
        for target in targets:
            in_degree[target] += 1
    return in_degree


def topological_sort(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[Node]:
    """
    Kahn 算法拓扑排序

    入度为 0 的节点按原节点列表顺序入队，后继按边列表顺序释放，
    因此相同输入总是得到相同顺序。

    Raises:
        CycleError: 存在环路，部分节点无法排序
    """
    adjacency = build_adjacency(nodes, edges)
    in_degree = _in_degrees(nodes, adjacency)
    by_id = {node.id: node for node in nodes}

    queue = deque(node.id for node in nodes if in_degree[node.id] == 0)
    ordered: List[Node] = []

    while queue:
        node_id = queue.popleft()
        ordered.append(by_id[node_id])

        for neighbor in adjacency[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(ordered) != len(nodes):
        visited = {node.id for node in ordered}
        raise CycleError(node.id for node in nodes if node.id not in visited)

    return ordered


def execution_levels(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[List[Node]]:
    """分层拓扑排序：同一层的节点之间没有依赖关系"""
    adjacency = build_adjacency(nodes, edges)
    in_degree = _in_degrees(nodes, adjacency)

    levels: List[List[Node]] = []
    remaining = [node for node in nodes]

    while remaining:
        current = [node for node in remaining if in_degree[node.id] == 0]
        if not current:
            raise CycleError(node.id for node in remaining)

        levels.append(current)
        current_ids = {node.id for node in current}
        remaining = [node for node in remaining if node.id not in current_ids]
        for node in current:
            for neighbor in adjacency[node.id]:
                in_degree[neighbor] -= 1

    return levels
