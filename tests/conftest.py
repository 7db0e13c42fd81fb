"""
Pytest 配置和公共 fixtures
"""
import pytest
from typing import Any, Callable, Dict, List, Optional

from workflow_studio.config import EngineSettings
from workflow_studio.core import WorkflowExecutionEngine
from workflow_studio.integrations import EventBus
from workflow_studio.models import Edge, Node, make_node


class RecordingExecutor:
    """记录调用顺序的确定性执行器"""

    def __init__(self, fail_on: Optional[List[str]] = None, hooks: Optional[Dict[str, Callable]] = None):
        self.fail_on = set(fail_on or [])
        self.hooks = hooks or {}
        self.calls: List[str] = []
        self.contexts: Dict[str, Dict[str, Any]] = {}

    async def __call__(self, node: Node, context) -> Any:
        self.calls.append(node.id)
        self.contexts[node.id] = dict(context)

        hook = self.hooks.get(node.id)
        if hook is not None:
            await hook(node)

        if node.id in self.fail_on:
            raise RuntimeError(f"{node.id} exploded")
        return {"node": node.id, "type": node.type.value, "inputs": sorted(context)}


@pytest.fixture
def settings() -> EngineSettings:
    """测试用快速配置"""
    return EngineSettings(pause_poll_interval=0.01, sim_min_latency=0, sim_max_latency=0)


@pytest.fixture
def event_bus() -> EventBus:
    """创建事件总线"""
    return EventBus()


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def make_executor():
    """按失败节点/钩子创建记录执行器"""
    return RecordingExecutor


@pytest.fixture
def engine_factory(settings, event_bus):
    """按执行器创建引擎"""
    def factory(executor=None) -> WorkflowExecutionEngine:
        return WorkflowExecutionEngine(
            node_executor=executor or RecordingExecutor(),
            event_bus=event_bus,
            settings=settings
        )
    return factory


@pytest.fixture
def simple_graph():
    """input A -> output B"""
    nodes = [
        make_node("A", "input", "开始"),
        make_node("B", "output", "结束"),
    ]
    edges = [Edge(id="e1", source="A", target="B")]
    return nodes, edges


@pytest.fixture
def pipeline_graph():
    """input -> processor -> output"""
    nodes = [
        make_node("in", "input", "输入"),
        make_node("proc", "processor", "处理器", config={"mode": "upper"}),
        make_node("out", "output", "输出"),
    ]
    edges = [
        Edge(id="e1", source="in", target="proc"),
        Edge(id="e2", source="proc", target="out"),
    ]
    return nodes, edges


@pytest.fixture
def diamond_graph():
    """input -> (llm, condition) -> aggregate -> output，节点列表故意乱序"""
    nodes = [
        make_node("out", "output", "输出"),
        make_node("agg", "aggregate", "聚合"),
        make_node("cond", "condition", "判断", condition="x > 1"),
        make_node("llm", "llm", "模型", prompt="hi"),
        make_node("in", "input", "输入"),
    ]
    edges = [
        Edge(id="e1", source="in", target="llm"),
        Edge(id="e2", source="in", target="cond"),
        Edge(id="e3", source="llm", target="agg"),
        Edge(id="e4", source="cond", target="agg"),
        Edge(id="e5", source="agg", target="out"),
    ]
    return nodes, edges
