"""
工作流解析器
"""
import yaml
import json
from typing import Dict, Any, Union
from pathlib import Path

from pydantic import ValidationError

from ..models.enums import NodeType
from ..models.workflow import Workflow, Node, Edge, Position
from ..exceptions import WorkflowParseError


class WorkflowParser:
    """工作流解析器"""

    def __init__(self):
        self.parsers = {
            'yaml': self._parse_yaml,
            'yml': self._parse_yaml,
            'json': self._parse_json
        }

    def parse(self, source: Union[str, Path, Dict[str, Any]]) -> Workflow:
        """
        解析工作流定义

        Args:
            source: 工作流定义来源，可以是文件路径、字符串或字典

        Returns:
            Workflow: 解析后的工作流对象
        """
        if isinstance(source, dict):
            return self._parse_dict(source)

        if isinstance(source, Path):
            return self.parse_file(source)

        if isinstance(source, str):
            path = Path(source)
            if '\n' not in source and path.suffix.lower().lstrip('.') in self.parsers:
                return self.parse_file(path)
            return self.parse_string(source)

        raise WorkflowParseError(f"Unsupported source type: {type(source)}")

    def parse_file(self, file_path: Path) -> Workflow:
        """解析工作流文件"""
        file_path = Path(file_path)
        suffix = file_path.suffix.lower().lstrip('.')
        if suffix not in self.parsers:
            raise WorkflowParseError(f"Unsupported file format: {suffix}")

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        data = self.parsers[suffix](content)
        return self._parse_dict(data)

    def parse_string(self, content: str) -> Workflow:
        """解析工作流字符串（JSON 是 YAML 的子集，统一按 YAML 读取）"""
        data = self._parse_yaml(content)
        if not isinstance(data, dict):
            raise WorkflowParseError("Workflow definition must be a mapping")
        return self._parse_dict(data)

    def _parse_yaml(self, content: str) -> Dict[str, Any]:
        """解析YAML格式"""
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise WorkflowParseError(f"Failed to parse YAML: {e}")

    def _parse_json(self, content: str) -> Dict[str, Any]:
        """解析JSON格式"""
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise WorkflowParseError(f"Failed to parse JSON: {e}")

    def _parse_dict(self, data: Dict[str, Any]) -> Workflow:
        """解析字典格式的工作流定义"""
        if not isinstance(data, dict):
            raise WorkflowParseError("Workflow definition must be a mapping")
        if 'workflow' in data:
            data = data['workflow']

        workflow = Workflow(
            name=data.get('name', 'Untitled Workflow'),
            version=str(data.get('version', '1.0.0')),
            description=data.get('description'),
            tags=list(data.get('tags', [])),
            is_public=bool(data.get('is_public', data.get('isPublic', False)))
        )
        if data.get('id'):
            workflow.id = str(data['id'])

        workflow.nodes = [self._parse_node(node_data) for node_data in data.get('nodes', [])]
        workflow.edges = [self._parse_edge(edge_data) for edge_data in data.get('edges', [])]

        return workflow

    def _parse_node(self, data: Dict[str, Any]) -> Node:
        """解析节点"""
        if 'id' not in data or 'type' not in data:
            raise WorkflowParseError("Node must include 'id' and 'type'")

        try:
            node_type = NodeType(data['type'])
        except ValueError:
            raise WorkflowParseError(f"Unknown node type '{data['type']}' for node '{data['id']}'")

        # 支持简化格式：label/config 直接写在节点上
        node_data = dict(data.get('data', {}))
        node_data.setdefault('label', data.get('label', data['id']))
        if 'config' in data:
            node_data.setdefault('config', data['config'])

        try:
            return Node(
                id=str(data['id']),
                type=node_type,
                data=node_data,
                position=Position(**data.get('position', {}))
            )
        except ValidationError as e:
            raise WorkflowParseError(f"Invalid data for node '{data['id']}': {e}")

    def _parse_edge(self, data: Dict[str, Any]) -> Edge:
        """解析边"""
        source = data.get('from', data.get('source'))
        target = data.get('to', data.get('target'))
        if not source or not target:
            raise WorkflowParseError("Edge must include 'from/to' or 'source/target'")

        edge = Edge(source=str(source), target=str(target))
        if data.get('id'):
            edge.id = str(data['id'])
        return edge

    def serialize(self, workflow: Workflow, fmt: str = "json") -> str:
        """序列化工作流"""
        data = {"workflow": self.to_dict(workflow)}
        if fmt == "json":
            return json.dumps(data, ensure_ascii=False, indent=2)
        if fmt in ("yaml", "yml"):
            return yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
        raise WorkflowParseError(f"Unsupported serialisation format: {fmt}")

    def to_dict(self, workflow: Workflow) -> Dict[str, Any]:
        return {
            "id": workflow.id,
            "name": workflow.name,
            "version": workflow.version,
            "description": workflow.description,
            "tags": list(workflow.tags),
            "is_public": workflow.is_public,
            "nodes": [self._node_to_dict(n) for n in workflow.nodes],
            "edges": [self._edge_to_dict(e) for e in workflow.edges],
        }

    def _node_to_dict(self, node: Node) -> Dict[str, Any]:
        return {
            "id": node.id,
            "type": node.type.value,
            "position": {"x": node.position.x, "y": node.position.y},
            "data": node.data.model_dump(mode="json", exclude_none=True),
        }

    def _edge_to_dict(self, edge: Edge) -> Dict[str, Any]:
        return {"id": edge.id, "source": edge.source, "target": edge.target}

