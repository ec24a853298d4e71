"""SolverConfig -- 解析服务与超时配置

从环境变量加载配置；外部服务地址以查询参数前缀形式给出，
调用时在末尾拼接 URL 编码后的链接。
"""

import os

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class SolverConfig(BaseModel):
    """Solver 包配置 -- 从环境变量加载

    环境变量:
        MFLIX_TIMER_API_URL: 计时跳转页解码服务
        MFLIX_RESOLVER_API_URL: 直链解析服务
        MFLIX_HTML_TIMEOUT_S: HTML 页面抓取超时（秒，默认 8）
        MFLIX_DELEGATE_TIMEOUT_S: 外部服务调用超时（秒，默认 25）
        MFLIX_SCANNER_REFERER: 页面扫描时携带的 Referer
    """

    timer_api_url: str = Field(
        default="http://85.121.5.246:10000/solve?url=",
        description="计时跳转页解码服务前缀",
    )
    resolver_api_url: str = Field(
        default="http://85.121.5.246:5000/solve?url=",
        description="直链解析服务前缀（服务端自行处理人机验证）",
    )
    html_timeout_s: float = Field(default=8, gt=0, description="HTML 抓取超时（秒）")
    delegate_timeout_s: float = Field(default=25, gt=0, description="外部服务调用超时（秒）")
    scanner_referer: str = Field(default="https://hdhub4u.fo/")


def _read_timeout(env_var: str, default: float) -> float | None:
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        timeout = float(val)
    except ValueError:
        timeout = 0
    if timeout <= 0:
        # 使用默认值，不阻塞启动
        log.warning(
            "invalid_timeout_config",
            env_var=env_var,
            value=val,
            fallback=default,
        )
        return None
    return timeout


def load_solver_config() -> SolverConfig:
    """从环境变量加载 Solver 配置

    Returns:
        SolverConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("MFLIX_TIMER_API_URL"):
        kwargs["timer_api_url"] = val

    if val := os.environ.get("MFLIX_RESOLVER_API_URL"):
        kwargs["resolver_api_url"] = val

    if val := os.environ.get("MFLIX_SCANNER_REFERER"):
        kwargs["scanner_referer"] = val

    if (timeout := _read_timeout("MFLIX_HTML_TIMEOUT_S", 8)) is not None:
        kwargs["html_timeout_s"] = timeout

    if (timeout := _read_timeout("MFLIX_DELEGATE_TIMEOUT_S", 25)) is not None:
        kwargs["delegate_timeout_s"] = timeout

    return SolverConfig(**kwargs)
