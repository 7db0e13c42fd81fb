"""
引擎配置
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _get_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass
class EngineSettings:
    """执行引擎配置"""
    pause_poll_interval: float = 0.1     # 暂停状态下的最大唤醒延迟（秒）
    history_limit: int = 50              # 撤销栈上限
    node_timeout: Optional[float] = None  # 单节点超时（秒），None 表示不限制
    log_level: str = "INFO"
    sim_min_latency: float = 0.5         # 模拟执行器最小延迟（秒）
    sim_max_latency: float = 1.5

    def __post_init__(self):
        if self.pause_poll_interval <= 0:
            raise ValueError("pause_poll_interval must be positive")
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        if self.sim_min_latency < 0 or self.sim_max_latency < self.sim_min_latency:
            raise ValueError("simulated latency range is invalid")

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "EngineSettings":
        """从环境变量（及 .env 文件）加载配置"""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            pause_poll_interval=_get_float("WORKFLOW_PAUSE_POLL_INTERVAL", 0.1),
            history_limit=int(os.getenv("WORKFLOW_HISTORY_LIMIT", "50")),
            node_timeout=_get_float("WORKFLOW_NODE_TIMEOUT", None),
            log_level=os.getenv("WORKFLOW_LOG_LEVEL", "INFO").upper(),
            sim_min_latency=_get_float("WORKFLOW_SIM_MIN_LATENCY", 0.5),
            sim_max_latency=_get_float("WORKFLOW_SIM_MAX_LATENCY", 1.5),
        )


def configure_logging(level: str = "INFO"):
    """配置日志"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
