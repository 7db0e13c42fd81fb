"""
工作流解析器测试
"""
import json

import pytest

from workflow_studio.core.parser import WorkflowParser
from workflow_studio.exceptions import WorkflowParseError
from workflow_studio.models import LLMNodeData, NodeType


SAMPLE_YAML = """
workflow:
  id: demo
  name: 示例工作流
  tags: [demo]
  nodes:
    - id: start
      type: input
      label: 开始
      config:
        query: hello
    - id: ask
      type: llm
      data:
        label: 提问
        prompt: "总结: {query}"
        temperature: 0.3
    - id: end
      type: output
  edges:
    - from: start
      to: ask
    - id: e-final
      source: ask
      target: end
"""


class TestWorkflowParser:
    """工作流解析器测试类"""

    @pytest.fixture
    def parser(self):
        return WorkflowParser()

    def test_parse_yaml_string(self, parser):
        workflow = parser.parse(SAMPLE_YAML)

        assert workflow.id == "demo"
        assert workflow.name == "示例工作流"
        assert workflow.tags == ["demo"]
        assert [n.id for n in workflow.nodes] == ["start", "ask", "end"]

        start = workflow.get_node("start")
        assert start.label == "开始"
        assert start.data.config == {"query": "hello"}

        ask = workflow.get_node("ask")
        assert ask.type == NodeType.LLM
        assert isinstance(ask.data, LLMNodeData)
        assert ask.data.temperature == 0.3

        # 未指定 label 时使用节点ID
        assert workflow.get_node("end").label == "end"

        assert [(e.source, e.target) for e in workflow.edges] == [("start", "ask"), ("ask", "end")]
        assert workflow.edges[1].id == "e-final"
        assert workflow.edges[0].id.startswith("edge-")

    def test_parse_json_string(self, parser):
        content = json.dumps({
            "name": "JSON",
            "nodes": [
                {"id": "a", "type": "input"},
                {"id": "b", "type": "output"},
            ],
            "edges": [{"source": "a", "target": "b"}],
        })
        workflow = parser.parse(content)
        assert workflow.name == "JSON"
        assert len(workflow.nodes) == 2

    def test_parse_dict(self, parser):
        workflow = parser.parse({"nodes": [{"id": "a", "type": "input"}]})
        assert workflow.name == "Untitled Workflow"
        assert workflow.edges == []

    def test_parse_file(self, parser, tmp_path):
        path = tmp_path / "workflow.yaml"
        path.write_text(SAMPLE_YAML, encoding="utf-8")

        assert parser.parse(path).id == "demo"
        assert parser.parse(str(path)).id == "demo"

    def test_unsupported_file_format(self, parser, tmp_path):
        path = tmp_path / "workflow.txt"
        path.write_text(SAMPLE_YAML, encoding="utf-8")
        with pytest.raises(WorkflowParseError, match="Unsupported file format"):
            parser.parse_file(path)

    def test_invalid_yaml(self, parser):
        with pytest.raises(WorkflowParseError):
            parser.parse_string("nodes: [unclosed")

    def test_non_mapping(self, parser):
        with pytest.raises(WorkflowParseError):
            parser.parse_string("- just\n- a list\n")

    def test_parse_invalid_node_type(self, parser):
        with pytest.raises(WorkflowParseError, match="Unknown node type"):
            parser.parse({"nodes": [{"id": "a", "type": "teleport"}]})

    def test_parse_missing_required_fields(self, parser):
        with pytest.raises(WorkflowParseError):
            parser.parse({"nodes": [{"type": "input"}]})
        with pytest.raises(WorkflowParseError):
            parser.parse({"nodes": [{"id": "a", "type": "input"}], "edges": [{"from": "a"}]})

    def test_invalid_node_data(self, parser):
        with pytest.raises(WorkflowParseError, match="Invalid data for node 'ask'"):
            parser.parse({
                "nodes": [{"id": "ask", "type": "llm", "data": {"temperature": 5}}]
            })

    def test_roundtrip(self, parser):
        workflow = parser.parse(SAMPLE_YAML)

        for fmt in ("json", "yaml"):
            restored = parser.parse_string(parser.serialize(workflow, fmt=fmt))
            assert restored.id == workflow.id
            assert [n.id for n in restored.nodes] == [n.id for n in workflow.nodes]
            assert [e.id for e in restored.edges] == [e.id for e in workflow.edges]
            assert restored.get_node("ask").data.prompt == "总结: {query}"

    def test_serialize_unknown_format(self, parser):
        with pytest.raises(WorkflowParseError):
            parser.serialize(parser.parse(SAMPLE_YAML), fmt="xml")
