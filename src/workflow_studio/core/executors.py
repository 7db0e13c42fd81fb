"""
节点执行器

执行引擎按拓扑顺序逐个等待执行器完成。停止信号只在节点边界检查，
正在运行的执行器不会被强制终止，因此执行器应当尽快返回或自行支持取消。
"""
import asyncio
import inspect
import json
import logging
import random
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..models.enums import NodeType
from ..models.workflow import Node
from ..models.node_data import LLMNodeData
from ..exceptions import NodeExecutionError


logger = logging.getLogger(__name__)


# 执行上下文：已执行节点的结果（只读，按执行顺序追加）
NodeContext = Mapping[str, Any]
NodeHandler = Callable[[Node, NodeContext], Union[Awaitable[Any], Any]]


class NodeExecutor:
    """节点执行器基类"""

    async def execute(self, node: Node, context: NodeContext) -> Any:
        """执行节点"""
        raise NotImplementedError

    async def __call__(self, node: Node, context: NodeContext) -> Any:
        return await self.execute(node, context)


class ExecutorRegistry(NodeExecutor):
    """按节点类型分发的执行器"""

    def __init__(self, default: Optional[NodeHandler] = None):
        self.handlers: Dict[NodeType, NodeHandler] = {}
        self.default = default

    def register(self, node_type: Union[NodeType, str], handler: NodeHandler):
        """注册节点类型处理器"""
        self.handlers[NodeType(node_type)] = handler

    def unregister(self, node_type: Union[NodeType, str]):
        self.handlers.pop(NodeType(node_type), None)

    def get_handler(self, node_type: NodeType) -> Optional[NodeHandler]:
        return self.handlers.get(node_type, self.default)

    async def execute(self, node: Node, context: NodeContext) -> Any:
        handler = self.get_handler(node.type)
        if handler is None:
            raise NodeExecutionError(node.id, f"No executor for type: {node.type.value}")

        result = handler(node, context)
        if inspect.isawaitable(result):
            result = await result
        return result


class SimulatedNodeExecutor(NodeExecutor):
    """模拟执行器：随机延迟后按节点类型返回演示数据"""

    def __init__(
        self,
        min_latency: float = 0.5,
        max_latency: float = 1.5,
        rng: Optional[random.Random] = None
    ):
        if min_latency < 0 or max_latency < min_latency:
            raise ValueError("Invalid latency range")
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.rng = rng or random.Random()
        self._dispatch: Dict[NodeType, Callable[[Node, NodeContext], Dict[str, Any]]] = {
            NodeType.INPUT: self._run_input,
            NodeType.LLM: self._run_llm,
            NodeType.PROCESSOR: self._run_processor,
            NodeType.CONDITION: self._run_condition,
            NodeType.OUTPUT: self._run_output,
        }

    async def execute(self, node: Node, context: NodeContext) -> Any:
        latency = self.rng.uniform(self.min_latency, self.max_latency)
        await asyncio.sleep(latency)

        runner = self._dispatch.get(node.type, self._run_noop)
        output = runner(node, context)
        output["timestamp"] = datetime.now().isoformat()
        logger.debug(f"Simulated node {node.id} ({node.type.value}) in {latency:.3f}s")
        return output

    def _run_input(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        return {"type": "input", "data": dict(node.data.config)}

    def _run_llm(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        data = node.data
        prompt = data.prompt if isinstance(data, LLMNodeData) else ""
        model = data.model if isinstance(data, LLMNodeData) else "gpt-4"
        config = json.dumps(data.config, ensure_ascii=False, default=str)
        return {
            "type": "llm",
            "prompt": prompt,
            "response": f"这是对输入的AI回复：{config}",
            "model": model,
        }

    def _run_processor(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        config = json.dumps(node.data.config, ensure_ascii=False, default=str)
        return {
            "type": "processor",
            "processed": True,
            "result": f"处理结果：{config}",
        }

    def _run_condition(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        condition = self.rng.random() > 0.5
        return {
            "type": "condition",
            "condition": condition,
            "result": "true" if condition else "false",
        }

    def _run_output(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        return {"type": "output", "final": True, "result": "workflow completed"}

    def _run_noop(self, node: Node, context: NodeContext) -> Dict[str, Any]:
        return {"type": "unknown", "result": "no operation"}
