"""
File: wxpanel/main.py
Description: FastAPI 应用入口与工厂函数

本模块负责：
1. 创建 FastAPI 应用实例 (设置默认响应类为 ORJSONResponse)
2. 管理应用生命周期 (lifespan):
   - 启动：初始化日志、创建数据库句柄并按顺序建表、写入种子管理员、创建网关客户端
   - 关闭：关闭网关客户端、释放数据库连接池
3. 组装全局组件：中间件、异常处理器、路由
4. 提供健康检查接口 (/health，原始 JSON，不使用统一信封)

Created: 2025-12-05
Updated: 2026-03-02 (Explicit database handle on app.state)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
from loguru import logger

from wxpanel.api_router import api_router
from wxpanel.core.config import settings
from wxpanel.core.exceptions import register_exception_handlers
from wxpanel.core.logging import setup_logging
from wxpanel.core.middleware import register_middlewares
from wxpanel.core.response import ResponseModel
from wxpanel.db.models.user import User
from wxpanel.db.session import Database
from wxpanel.domains.users.repository import UserRepository
from wxpanel.domains.users.service import UserService
from wxpanel.domains.wechat.gateway import WeChatGatewayClient


async def seed_admin(database: Database) -> None:
    """ADMIN_BOOTSTRAP=seed 时写入默认管理员。"""
    async with database.session_factory() as session:
        service = UserService(repo=UserRepository(model=User, session=session))
        await service.seed_admin(
            settings.ADMIN_SEED_USERNAME,
            settings.ADMIN_SEED_PASSWORD,
            settings.ADMIN_SEED_EMAIL,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    应用生命周期管理器。
    """
    # 1. 启动时：初始化日志系统
    setup_logging()

    # 2. 数据库句柄 (建表失败则应用启动失败)
    database = Database(settings.SQLALCHEMY_DATABASE_URI, echo=settings.is_debug)
    await database.init_schema()
    if settings.ADMIN_BOOTSTRAP == "seed":
        await seed_admin(database)
    app.state.database = database

    # 3. 外部微信网关客户端
    gateway = WeChatGatewayClient(
        settings.WECHAT_GATEWAY_URL, timeout=settings.WECHAT_GATEWAY_TIMEOUT
    )
    app.state.gateway = gateway

    logger.bind(
        environment=settings.ENVIRONMENT, bootstrap=settings.ADMIN_BOOTSTRAP
    ).info("Application started")

    yield

    # 4. 关闭时：优雅释放资源
    await gateway.close()
    await database.dispose()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """应用工厂函数"""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        # 强制默认响应类为 ORJSONResponse (高性能)
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
    )

    # 1. 注册中间件 (CORS, RequestID, Logging)
    register_middlewares(app)

    # 2. 注册异常处理器
    register_exception_handlers(app)

    # 3. 挂载 API 路由
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # 4. 挂载健康检查
    @app.get("/health", tags=["health"], summary="健康检查")
    async def health_check() -> dict[str, str]:
        """
        健康检查接口。
        返回原始 JSON，便于负载均衡器直接解析。
        """
        return {"status": "ok"}

    # 5. 根路由 (Root Endpoint)
    @app.get(
        "/",
        tags=["root"],
        summary="系统入口",
        response_model=ResponseModel[dict[str, str]],
    )
    async def root(request: Request):
        return ResponseModel.success(
            message=f"Welcome to {settings.PROJECT_NAME}",
            data={
                "status": "running",
                "docs_url": "/docs",
                "health_url": "/health",
            },
            request_id=getattr(request.state, "request_id", None),
        )

    return app


# 暴露给 Uvicorn 运行的应用实例
app = create_app()

if __name__ == "__main__":
    # 本地调试入口
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
