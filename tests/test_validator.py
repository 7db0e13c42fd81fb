"""
工作流验证器测试
"""
import pytest

from workflow_studio.core.validator import (
    WorkflowValidator, ValidationResult, validate, check_unique_ids
)
from workflow_studio.exceptions import WorkflowValidationError
from workflow_studio.models import Edge, make_node


class TestValidate:
    """结构规则测试"""

    def test_valid_graph(self, pipeline_graph):
        nodes, edges = pipeline_graph
        assert validate(nodes, edges) == ValidationResult(valid=True)

    def test_empty_graph(self):
        result = validate([], [])
        assert not result.valid
        assert result.error == "工作流至少需要一个节点"

    def test_missing_input(self):
        nodes = [make_node("out", "output")]
        result = validate(nodes, [])
        assert result.error == "工作流需要至少一个输入节点"

    def test_missing_output(self):
        nodes = [make_node("in", "input")]
        result = validate(nodes, [])
        assert result.error == "工作流需要至少一个输出节点"

    def test_dangling_edge(self, simple_graph):
        nodes, edges = simple_graph
        edges = edges + [Edge(id="bad", source="A", target="ghost")]
        result = validate(nodes, edges)
        assert result.error == "存在无效的连线"

    def test_isolated_nodes_reported_by_label(self, simple_graph):
        nodes, edges = simple_graph
        nodes = nodes + [
            make_node("p1", "processor", "清洗"),
            make_node("p2", "llm", "摘要"),
        ]
        result = validate(nodes, edges)
        assert not result.valid
        assert result.error == "发现孤立节点: 清洗, 摘要"

    def test_unconnected_input_output_are_allowed(self):
        nodes = [make_node("in", "input"), make_node("out", "output")]
        assert validate(nodes, []).valid

    def test_rules_checked_in_order(self):
        # 同时缺少输入和输出节点时报告输入节点
        nodes = [make_node("p", "processor")]
        assert validate(nodes, []).error == "工作流需要至少一个输入节点"

    def test_cycles_are_not_a_validation_error(self):
        nodes = [
            make_node("in", "input"),
            make_node("a", "processor"),
            make_node("b", "processor"),
            make_node("out", "output"),
        ]
        edges = [
            Edge(source="in", target="a"),
            Edge(source="a", target="b"),
            Edge(source="b", target="a"),
            Edge(source="b", target="out"),
        ]
        assert validate(nodes, edges).valid

    def test_validate_does_not_mutate_inputs(self, pipeline_graph):
        nodes, edges = pipeline_graph
        before = ([n.id for n in nodes], [e.id for e in edges])
        validate(nodes, edges)
        assert ([n.id for n in nodes], [e.id for e in edges]) == before


class TestWorkflowValidator:
    """验证器类测试"""

    def test_duplicate_node_ids(self, simple_graph):
        nodes, edges = simple_graph
        nodes = nodes + [make_node("A", "processor")]
        result = WorkflowValidator().validate(nodes, edges)
        assert not result.valid
        assert "A" in result.error

    def test_duplicate_edge_ids(self, simple_graph):
        nodes, edges = simple_graph
        edges = edges + [Edge(id="e1", source="A", target="B")]
        assert not check_unique_ids(nodes, edges).valid

    def test_id_check_can_be_disabled(self, simple_graph):
        nodes, edges = simple_graph
        edges = edges + [Edge(id="e1", source="A", target="B")]
        assert WorkflowValidator(check_ids=False).validate(nodes, edges).valid

    def test_raise_for_error(self):
        with pytest.raises(WorkflowValidationError, match="至少需要一个节点"):
            validate([], []).raise_for_error()
