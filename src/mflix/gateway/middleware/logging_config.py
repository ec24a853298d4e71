"""structlog 配置

MFLIX_LOG_FORMAT=json 输出单行 JSON，其余取值使用控制台渲染；
MFLIX_LOG_LEVEL 控制根 logger 级别。structlog 与标准库 logging 共用同一条处理链，
httpx / aiosqlite 等第三方库的日志也按同一格式输出。
"""

import logging
import os

import structlog

# 每个请求 / 每条 SQL 都会打日志的库，批次解析时只保留 WARNING 以上
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """配置 structlog 与根 logger（参数缺省时读取环境变量）"""
    log_format = log_format or os.environ.get("MFLIX_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("MFLIX_LOG_LEVEL", "INFO")

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logfire() -> bool:
    """按 LOGFIRE_SEND_TO_LOGFIRE=true 启用 Logfire（需安装 apm extra）

    Returns:
        是否已启用；未开启或初始化失败时返回 False，只保留本地日志
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return False
    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi()
        logfire.instrument_httpx()
    except Exception as e:
        structlog.get_logger().warning(
            "logfire_init_failed",
            error_type=type(e).__name__,
            error=str(e),
        )
        return False
    return True
