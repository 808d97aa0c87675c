from __future__ import annotations

import logging
import logging.config
import uuid
from contextvars import ContextVar, Token
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

_request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str | None = None) -> Token:
    return _request_id_ctx_var.set(request_id or uuid.uuid4().hex)


def get_request_id() -> str | None:
    return _request_id_ctx_var.get()


def unbind_request_id(token: Token) -> None:
    _request_id_ctx_var.reset(token)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def _build_logging_config(level: str = "INFO") -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {
                "()": RequestContextFilter,
            }
        },
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["request_context"],
            }
        },
        "loggers": {
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
            "storefront": {"level": level},
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(_build_logging_config(level.upper()))
