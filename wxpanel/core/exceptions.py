"""
File: wxpanel/core/exceptions.py
Description: 业务异常类与全局异常处理器

1. 业务异常基类（AppException）接受 BaseErrorCode 枚举
2. 全局异常处理器将异常映射为：语义化 HTTP 状态码 + 字符串业务码
3. 数据库异常 (SQLAlchemyError) 统一映射为 system.db_error
4. 使用 ResponseModel.fail() 构造统一的失败响应信封

Created: 2025-11-24
Updated: 2026-03-02 (Add SQLAlchemyError handler)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from wxpanel.core.error_code import BaseErrorCode, SystemErrorCode
from wxpanel.core.response import ResponseModel

# ------------------------------------------------------------------------------
# 1. 自定义业务异常类
# ------------------------------------------------------------------------------


class AppException(Exception):
    """
    应用基础异常类。

    用法示例:
        raise AppException(UserError.NOT_FOUND)
        raise AppException(WeChatError.INVALID_STATE_TRANSITION, message="...", data={...})
    """

    def __init__(
        self,
        error: BaseErrorCode,
        message: str = "",
        data: Any = None,
    ):
        self.error = error
        self.http_status = error.http_status
        self.code = error.code
        self.message = message or error.msg
        self.data = data
        super().__init__(self.message)


# ------------------------------------------------------------------------------
# 2. 辅助函数
# ------------------------------------------------------------------------------


def _get_request_id(request: Request) -> str:
    """尝试从 request.state 获取 request_id，不存在则返回 'unknown'"""
    return str(getattr(request.state, "request_id", "unknown"))


def _render(
    status_code: int, code: str, message: str, request_id: str, data: Any = None
) -> ORJSONResponse:
    response_model = ResponseModel.fail(
        code=code,
        message=message,
        data=data,
        request_id=request_id,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=jsonable_encoder(response_model),
    )


# ------------------------------------------------------------------------------
# 3. 全局异常处理器 (Handlers)
# ------------------------------------------------------------------------------


async def app_exception_handler(request: Request, exc: AppException) -> ORJSONResponse:
    """
    处理自定义业务异常 (AppException)
    """
    request_id = _get_request_id(request)

    logger.bind(
        request_id=request_id,
        code=exc.code,
        http_status=exc.http_status,
        message=exc.message,
    ).warning("Business exception occurred")

    return _render(exc.http_status, exc.code, exc.message, request_id, exc.data)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """
    处理 Pydantic 校验异常 (FastAPI 默认 422)
    映射目标: HTTP 400 / system.invalid_params
    """
    request_id = _get_request_id(request)

    errors = exc.errors()
    first_error = errors[0] if errors else {}

    loc = first_error.get("loc", [])
    field_name = str(loc[-1]) if loc else "unknown"
    msg = first_error.get("msg", "Invalid parameter")
    readable_message = f"{field_name}: {msg}"

    logger.bind(request_id=request_id, detail=readable_message).warning(
        "Request validation failed"
    )

    return _render(
        SystemErrorCode.INVALID_PARAMS.http_status,
        SystemErrorCode.INVALID_PARAMS.code,
        readable_message,
        request_id,
        {"errors": jsonable_encoder(errors)},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> ORJSONResponse:
    """
    处理框架层面的 HTTP 异常 (如 404 Not Found, 405 Method Not Allowed)
    """
    request_id = _get_request_id(request)
    code_str = (
        SystemErrorCode.NOT_FOUND.code if exc.status_code == 404 else "system.http_error"
    )

    logger.bind(
        request_id=request_id,
        status_code=exc.status_code,
        detail=str(exc.detail),
    ).warning("Framework HTTP exception occurred")

    return _render(exc.status_code, code_str, str(exc.detail), request_id)


async def db_exception_handler(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    """
    处理未被业务层消化的数据库异常
    """
    request_id = _get_request_id(request)

    logger.opt(exception=exc).bind(request_id=request_id).error(
        "Unhandled database exception occurred"
    )

    return _render(
        SystemErrorCode.DB_ERROR.http_status,
        SystemErrorCode.DB_ERROR.code,
        SystemErrorCode.DB_ERROR.msg,
        request_id,
    )


async def general_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """
    处理所有未捕获的异常 (500)，屏蔽内部细节
    """
    request_id = _get_request_id(request)

    logger.opt(exception=exc).bind(request_id=request_id).error(
        "Unhandled system exception occurred"
    )

    return _render(
        SystemErrorCode.INTERNAL_ERROR.http_status,
        SystemErrorCode.INTERNAL_ERROR.code,
        SystemErrorCode.INTERNAL_ERROR.msg,
        request_id,
    )


# ------------------------------------------------------------------------------
# 4. 异常处理器注册函数
# ------------------------------------------------------------------------------


def register_exception_handlers(app: FastAPI) -> None:
    """
    统一注册所有异常处理器。
    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore
    app.add_exception_handler(SQLAlchemyError, db_exception_handler)  # type: ignore
    app.add_exception_handler(Exception, general_exception_handler)
