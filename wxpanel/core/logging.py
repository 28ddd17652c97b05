"""
File: wxpanel/core/logging.py
Description: 全局日志配置模块 (Loguru)

1. 标准库 logging (uvicorn / sqlalchemy / httpx / aiosqlite) 统一转发到 Loguru
2. 控制台 Sink：开发环境彩色文本，LOG_JSON_FORMAT=true 时输出 JSON
3. 文件 Sink：LOG_FILE_ENABLED=true 时启用，按 LOG_ROTATION 轮转
4. 文本格式在行尾追加业务上下文 (request_id / user_id / account_id / auth_key)

Created: 2025-11-24
Updated: 2026-03-02 (Domain context fields + third-party level tuning)
"""

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from wxpanel.core.config import settings

# 行尾追加的上下文字段 (按顺序)
CONTEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("request_id", "magenta"),
    ("user_id", "yellow"),
    ("account_id", "yellow"),
    ("auth_key", "blue"),
)

# 第三方日志器的最低级别；调试模式下放开 SQL 与网关请求日志
NOISY_LOGGERS: dict[str, int] = {
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """标准库 logging -> Loguru 转发器。"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 跳过 logging 模块自身的栈帧，定位真实调用方
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def format_record(record: dict[str, Any]) -> str:
    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    extra = record["extra"]
    for field, color in CONTEXT_FIELDS:
        if extra.get(field) is not None:
            fmt += f" | <{color}>{field}={{extra[{field}]}}</{color}>"
    return fmt + "\n{exception}"


def _route_std_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # uvicorn 自带 handler，清空后改为向 root 传播
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(logging.DEBUG if settings.is_debug else level)


def _sink_options(colorize: bool) -> dict[str, Any]:
    options: dict[str, Any] = {
        "level": settings.LOG_LEVEL,
        "enqueue": True,
        "backtrace": settings.is_debug,
        "diagnose": settings.LOG_DIAGNOSE,
    }
    if settings.LOG_JSON_FORMAT:
        options["serialize"] = True
    else:
        options["format"] = format_record
        options["colorize"] = colorize
    return options


def setup_logging() -> None:
    """
    初始化日志配置，在 lifespan 启动阶段调用。
    重复调用是安全的 (先移除全部 Sink)。
    """
    _route_std_logging()
    logger.remove()

    logger.add(sys.stdout, **_sink_options(colorize=True))

    if settings.LOG_FILE_ENABLED:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / "wxpanel_{time:YYYY-MM-DD}.log"),
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression=settings.LOG_COMPRESSION,
            **_sink_options(colorize=False),
        )

    logger.bind(
        environment=settings.ENVIRONMENT, level=settings.LOG_LEVEL
    ).info("Logging configured")
