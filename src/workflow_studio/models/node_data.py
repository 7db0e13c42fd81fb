"""
节点数据模型

每种节点类型对应一个数据模型，按节点类型选择（标签联合）。
"""
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import NodeStatus, NodeType


class NodeData(BaseModel):
    """基础节点数据"""
    model_config = ConfigDict(extra="allow")

    label: str = Field(..., description="节点显示名称")
    config: Dict[str, Any] = Field(default_factory=dict, description="节点配置")
    status: Optional[NodeStatus] = Field(None, description="执行状态")
    error: Optional[str] = Field(None, description="错误信息")
    description: Optional[str] = Field(None, description="描述")


class LLMNodeData(NodeData):
    """AI（大模型）节点数据"""
    prompt: str = ""
    model: str = "gpt-4"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    provider: Literal["openai", "anthropic", "local"] = "openai"

    @field_validator("temperature")
    @classmethod
    def _check_temperature(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not 0 <= value <= 2:
            raise ValueError("temperature must be between 0 and 2")
        return value


class ConditionNodeData(NodeData):
    """条件节点数据"""
    condition: str = ""
    true_path: Optional[str] = None
    false_path: Optional[str] = None


class LoopNodeData(NodeData):
    """循环节点数据"""
    iteration_type: Literal["count", "condition", "array"] = "count"
    max_iterations: Optional[int] = Field(None, ge=1)
    condition: Optional[str] = None
    array_path: Optional[str] = None
    current_iteration: Optional[int] = None


class AggregateNodeData(NodeData):
    """聚合节点数据"""
    aggregation_type: Literal[
        "sum", "average", "count", "max", "min", "concat", "merge"
    ] = "merge"
    input_fields: List[str] = Field(default_factory=list)
    output_field: str = "result"
    group_by: Optional[str] = None


class ApiNodeData(NodeData):
    """API 调用节点数据"""
    url: str = ""
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH"] = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    request_body: Optional[str] = None
    response_mapping: Dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = Field(None, gt=0)
    retries: Optional[int] = Field(None, ge=0)


class HttpNodeData(NodeData):
    """HTTP 节点数据（API 节点的简化版本）"""
    url: str = ""
    method: Literal["GET", "POST"] = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None


NODE_DATA_MODELS: Dict[NodeType, Type[NodeData]] = {
    NodeType.INPUT: NodeData,
    NodeType.OUTPUT: NodeData,
    NodeType.PROCESSOR: NodeData,
    NodeType.CUSTOM: NodeData,
    NodeType.LLM: LLMNodeData,
    NodeType.CONDITION: ConditionNodeData,
    NodeType.LOOP: LoopNodeData,
    NodeType.AGGREGATE: AggregateNodeData,
    NodeType.API: ApiNodeData,
    NodeType.HTTP: HttpNodeData,
}


def build_node_data(node_type: NodeType, payload: Any) -> NodeData:
    """按节点类型构建节点数据，已是正确模型时直接返回"""
    model = NODE_DATA_MODELS[node_type]
    if isinstance(payload, model):
        return payload
    if isinstance(payload, NodeData):
        payload = payload.model_dump()
    return model.model_validate(payload)
