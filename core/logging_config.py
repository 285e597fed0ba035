"""
Structlog 日志配置模块

HTTP 请求、WebSocket 会话与标准库日志（uvicorn / sqlalchemy / redis）
统一走 structlog 的处理链，DEBUG 下输出彩色控制台，其余环境输出 JSON。
"""
import logging
import json
import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import merge_contextvars, bind_contextvars, unbind_contextvars
from structlog.stdlib import ProcessorFormatter
from typing import Any, List, Optional

from core.config import settings


# 第三方库日志级别（非 DEBUG 环境下压低噪音）
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "websockets": logging.INFO,
    "asyncio": logging.WARNING,
}


def _add_service(_logger: Any, _method: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", settings.PROJECT_NAME)
    return event_dict


def _drop_color_message(_logger: Any, _method: str, event_dict: dict) -> dict:
    # uvicorn 额外附带的带颜色副本
    event_dict.pop("color_message", None)
    return event_dict


def get_renderer() -> Any:
    if settings.DEBUG:
        return ConsoleRenderer(colors=True)

    # structlog 会向 serializer 传入 default/sort_keys
    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def configure_logging() -> None:
    """配置 structlog 并桥接标准库 logging 到同一处理链。"""
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        _add_service,
        _drop_color_message,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            get_renderer(),
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    if not settings.DEBUG:
        for name, level in _QUIET_LOGGERS.items():
            logging.getLogger(name).setLevel(level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)


def bind_connection_context(connection_id: str, user_id: Optional[str] = None) -> None:
    """把 WebSocket 连接信息绑定到当前任务的日志上下文"""
    if user_id is None:
        bind_contextvars(connection_id=connection_id)
    else:
        bind_contextvars(connection_id=connection_id, user_id=user_id)


def clear_connection_context() -> None:
    unbind_contextvars("connection_id", "user_id")


configure_logging()
