"""
File: wxpanel/core/security.py
Description: 安全工具模块 (Argon2id + JWT)

本模块负责：
1. 密码加密 (Hash): 使用 Argon2id 算法
2. 密码验证 (Verify): 校验明文与哈希
3. JWT 签发与解析: 载荷包含 sub(用户ID) / username / role
4. 异步封装: CPU 密集型的哈希操作放入线程池执行

Created: 2025-12-05
Updated: 2026-03-02 (Role claims + decode helper)
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt
from pwdlib import PasswordHash
from starlette.concurrency import run_in_threadpool

from wxpanel.core.config import settings

# pwdlib[argon2] 默认使用 argon2id
password_hash = PasswordHash.recommended()

ACCESS_TOKEN_TYPE = "access"

# ------------------------------------------------------------------------------
# 1. 密码处理 (Password Hashing)
# ------------------------------------------------------------------------------


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    验证明文密码与哈希值是否匹配。

    Args:
        plain_password: 用户输入的明文密码
        hashed_password: 数据库存的哈希值 (Argon2 格式)

    Returns:
        bool: 匹配返回 True，否则 False
    """
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """生成密码哈希值 (Argon2id)。"""
    return password_hash.hash(password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    """异步验证密码（在线程池中执行，避免阻塞事件循环）。"""
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


async def get_password_hash_async(password: str) -> str:
    """异步生成密码哈希（在线程池中执行，避免阻塞事件循环）。"""
    return await run_in_threadpool(get_password_hash, password)


# ------------------------------------------------------------------------------
# 2. JWT 处理 (JSON Web Token)
# ------------------------------------------------------------------------------


def _secret_key() -> str:
    secret_key = settings.SECRET_KEY
    if secret_key is None:
        raise ValueError("SECRET_KEY configuration is missing.")
    return secret_key


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    生成 JWT Access Token (无状态)。

    Args:
        user_id: 用户 ID，写入 sub
        username: 用户名
        role: 角色 (admin / agent / user)
        expires_delta: 自定义有效期，默认 ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        str: 编码后的 JWT 字符串
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    to_encode = {
        "exp": expire,
        "sub": str(user_id),
        "username": username,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
    }

    return jwt.encode(to_encode, _secret_key(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    校验签名与有效期并返回载荷。

    Raises:
        jose.ExpiredSignatureError: 令牌已过期
        jose.JWTError: 签名错误或格式非法
    """
    return jwt.decode(token, _secret_key(), algorithms=[settings.ALGORITHM])
