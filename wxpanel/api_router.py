"""
File: wxpanel/api_router.py
Description: 根 API 路由聚合层

本模块负责：
1. 聚合所有业务领域的 Router (auth, users, auth_keys, wechat, devices)
2. 统一设置路由前缀 (/auth, /admin)
3. 统一设置标签 (Tags) 用于 OpenAPI 文档分组

Created: 2025-12-05
Updated: 2026-03-02
"""

from fastapi import APIRouter

from wxpanel.domains.auth.router import router as auth_router
from wxpanel.domains.auth_keys.router import admin_router as auth_keys_admin_router
from wxpanel.domains.auth_keys.router import router as auth_keys_router
from wxpanel.domains.devices.router import admin_router as devices_admin_router
from wxpanel.domains.users.router import admin_router as users_admin_router
from wxpanel.domains.users.router import router as users_router
from wxpanel.domains.wechat.router import admin_router as wechat_admin_router
from wxpanel.domains.wechat.router import router as wechat_router

# 创建根 API 路由
api_router = APIRouter()

# ------------------------------------------------------------------------------
# 注册领域路由
# ------------------------------------------------------------------------------

# 1. 认证模块
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

# 2. 用户模块 (/user/*, /users/count)
api_router.include_router(users_router, tags=["users"])

# 3. 授权码 (/auth-keys)
api_router.include_router(auth_keys_router, tags=["auth-keys"])

# 4. 微信账号与登录流程 (/wechat-accounts/*, /wechat/*)
api_router.include_router(wechat_router, tags=["wechat"])

# 5. 管理后台 (/admin/*)
api_router.include_router(users_admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(auth_keys_admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(wechat_admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(devices_admin_router, prefix="/admin", tags=["admin"])
