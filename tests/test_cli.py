"""
命令行测试
"""
import pytest
import yaml
from click.testing import CliRunner

from workflow_studio.cli import cli


WORKFLOW = {
    "workflow": {
        "id": "cli-demo",
        "name": "CLI 示例",
        "nodes": [
            {"id": "start", "type": "input", "label": "开始"},
            {"id": "think", "type": "llm", "label": "思考", "data": {"prompt": "hi"}},
            {"id": "check", "type": "condition", "label": "判断"},
            {"id": "end", "type": "output", "label": "结束"},
        ],
        "edges": [
            {"from": "start", "to": "think"},
            {"from": "start", "to": "check"},
            {"from": "think", "to": "end"},
            {"from": "check", "to": "end"},
        ],
    }
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workflow_file(tmp_path):
    path = tmp_path / "workflow.yaml"
    path.write_text(yaml.safe_dump(WORKFLOW, allow_unicode=True), encoding="utf-8")
    return path


@pytest.fixture
def cyclic_file(tmp_path):
    data = {
        "nodes": [
            {"id": "in", "type": "input"},
            {"id": "a", "type": "processor"},
            {"id": "b", "type": "processor"},
            {"id": "out", "type": "output"},
        ],
        "edges": [
            {"from": "in", "to": "a"},
            {"from": "a", "to": "b"},
            {"from": "b", "to": "a"},
            {"from": "b", "to": "out"},
        ],
    }
    path = tmp_path / "cyclic.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestCli:

    def test_validate(self, runner, workflow_file):
        result = runner.invoke(cli, ["validate", str(workflow_file)])
        assert result.exit_code == 0
        assert "Valid: 4 nodes, 4 edges" in result.output

    def test_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"nodes": [{"id": "in", "type": "input"}]}), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 1
        assert "工作流需要至少一个输出节点" in result.output

    def test_order(self, runner, workflow_file):
        result = runner.invoke(cli, ["order", str(workflow_file)])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0] == "0: start (开始)"
        assert lines[1] == "1: think (思考), check (判断)"
        assert lines[2] == "2: end (结束)"

    def test_order_cycle(self, runner, cyclic_file):
        result = runner.invoke(cli, ["order", str(cyclic_file)])
        assert result.exit_code == 1
        assert "循环依赖" in result.output

    def test_run(self, runner, workflow_file):
        result = runner.invoke(cli, [
            "run", str(workflow_file), "--seed", "1", "--min-latency", "0", "--max-latency", "0"
        ])
        assert result.exit_code == 0, result.output
        assert "[node_completed] end (结束)" in result.output
        assert "[node_started] think (思考)" in result.output
        assert '"status": "completed"' in result.output
        assert '"workflow_id": "cli-demo"' in result.output

    def test_run_cycle(self, runner, cyclic_file):
        result = runner.invoke(cli, [
            "run", str(cyclic_file), "--min-latency", "0", "--max-latency", "0"
        ])
        assert result.exit_code == 1
        assert "Execution failed" in result.output

    def test_export_yaml(self, runner, workflow_file):
        result = runner.invoke(cli, ["export", str(workflow_file), "--format", "yaml"])
        assert result.exit_code == 0
        exported = yaml.safe_load(result.output)
        assert exported["workflow"]["id"] == "cli-demo"
        assert [n["id"] for n in exported["workflow"]["nodes"]] == ["start", "think", "check", "end"]

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["validate", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2
