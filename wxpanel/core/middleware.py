"""
File: wxpanel/core/middleware.py
Description: 中间件配置与实现

1. RequestContextMiddleware：
   - 复用上游 (前端 / Nginx) 传入的 X-Request-ID，缺失时生成 UUID v7
   - 在 Loguru 上下文中绑定 request_id
   - 按路由模板记录访问日志 (/wechat/scan/{auth_key} 而非具体授权码)
   - 回写 X-Request-ID 响应头
2. register_middlewares：统一注册 CORS 与请求上下文中间件

Created: 2025-11-24
Updated: 2026-03-02 (Upstream request id + route template in access log)
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from uuid6 import uuid7

from wxpanel.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"
MAX_UPSTREAM_ID_LENGTH = 64

# 不写访问日志的路径
QUIET_PATHS: frozenset[str] = frozenset(
    {"/health", "/favicon.ico", "/docs", "/openapi.json"}
)


def _resolve_request_id(request: Request) -> str:
    upstream = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if upstream and len(upstream) <= MAX_UPSTREAM_ID_LENGTH and upstream.isprintable():
        return upstream
    return str(uuid7())


def _route_template(request: Request) -> str:
    """返回匹配到的路由模板，避免授权码等敏感值进入日志。"""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    请求上下文中间件。

    with 块内产生的日志 (包括 Service 层的状态迁移日志) 自动携带 request_id。
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = _resolve_request_id(request)
        request.state.request_id = request_id
        path = request.url.path.rstrip("/") or "/"

        with logger.contextualize(request_id=request_id):
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.bind(
                    method=request.method,
                    route=_route_template(request),
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                ).opt(exception=exc).error("Request crashed")
                raise

            response.headers[REQUEST_ID_HEADER] = request_id
            if path not in QUIET_PATHS:
                log = logger.bind(
                    method=request.method,
                    route=_route_template(request),
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    client_ip=_client_ip(request),
                )
                if response.status_code >= 500:
                    log.error("Request finished")
                else:
                    log.info("Request finished")
            return response


def register_middlewares(app: FastAPI) -> None:
    """
    统一注册所有中间件。
    后注册的中间件先执行 (请求进入方向)。
    """
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS
            ],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "Accept", REQUEST_ID_HEADER],
            expose_headers=[REQUEST_ID_HEADER],
        )

    # 最后注册，最先拦截请求
    app.add_middleware(RequestContextMiddleware)
