"""
工作流引擎使用示例
"""
import asyncio
import logging

from workflow_studio import WorkflowDocument, WorkflowExecutionEngine, WorkflowParser
from workflow_studio.config import EngineSettings, configure_logging
from workflow_studio.core import ExecutorRegistry
from workflow_studio.models import ExecutionEventType


logger = logging.getLogger(__name__)


WORKFLOW_YAML = """
workflow:
  name: 文本处理示例
  nodes:
    - id: input
      type: input
      label: 用户输入
      config:
        text: hello workflow
    - id: upper
      type: processor
      label: 转大写
    - id: summary
      type: llm
      label: 摘要
      data:
        prompt: "总结: {text}"
    - id: output
      type: output
      label: 输出
  edges:
    - from: input
      to: upper
    - from: input
      to: summary
    - from: upper
      to: output
    - from: summary
      to: output
"""


def build_executor() -> ExecutorRegistry:
    """按节点类型注册处理函数"""
    registry = ExecutorRegistry()

    registry.register("input", lambda node, context: dict(node.data.config))

    async def upper(node, context):
        await asyncio.sleep(0.1)
        return context["input"]["text"].upper()

    async def summary(node, context):
        await asyncio.sleep(0.2)
        return node.data.prompt.format(**context["input"])

    def output(node, context):
        return {key: value for key, value in context.items() if key != "input"}

    registry.register("processor", upper)
    registry.register("llm", summary)
    registry.register("output", output)
    return registry


async def example_execute():
    """执行工作流，中途暂停再恢复"""
    workflow = WorkflowParser().parse(WORKFLOW_YAML)
    engine = WorkflowExecutionEngine(
        node_executor=build_executor(),
        settings=EngineSettings(pause_poll_interval=0.05)
    )

    async def on_event(event):
        payload = event.payload
        if payload.event_type == ExecutionEventType.NODE_COMPLETED:
            logger.info(f"节点完成: {payload.node_id} (进度 {engine.progress:.0f}%)")

    await engine.subscribe(on_event)

    task = asyncio.create_task(engine.execute_workflow(workflow.nodes, workflow.edges))
    await asyncio.sleep(0.05)

    if await engine.pause():
        logger.info(f"已暂停，当前节点: {engine.current_node_id}")
        await asyncio.sleep(0.3)
        await engine.resume()

    result = await task
    logger.info(f"执行状态: {result.status.value}, 耗时 {result.duration:.0f}ms")
    logger.info(f"输出: {result.results['output']}")


def example_history():
    """编辑工作流并撤销/重做"""
    settings = EngineSettings.from_env()
    document = WorkflowDocument(history_limit=settings.history_limit)
    document.load_workflow(WorkflowParser().parse(WORKFLOW_YAML))

    document.remove_node("summary")
    logger.info(f"删除后: {document.stats()}")

    document.undo()
    logger.info(f"撤销后: {document.stats()}")

    document.redo()
    logger.info(f"重做后: {document.stats()}")


async def main():
    """主函数"""
    configure_logging("INFO")

    print("\n=== Example 1: Execute with pause/resume ===")
    await example_execute()

    print("\n=== Example 2: Undo/redo ===")
    example_history()


if __name__ == "__main__":
    asyncio.run(main())
