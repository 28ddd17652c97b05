"""
File: wxpanel/domains/auth_keys/service.py
Description: 授权码领域服务 (业务逻辑层)

1. mint: 批量签发，每枚单独提交；中途失败时已提交的授权码保留并在错误中返回
2. delay: 延期，expires_at = now + days
3. revoke: 删除 (不级联；仍被引用时拒绝)
4. list_keys: 列表 (可按归属用户过滤)

Created: 2026-03-02
"""

from datetime import timedelta

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from wxpanel.core.error_code import SystemErrorCode
from wxpanel.core.exceptions import AppException
from wxpanel.db.models.auth_key import AuthKey
from wxpanel.db.models.base import utcnow
from wxpanel.domains.auth_keys.constants import AuthKeyError
from wxpanel.domains.auth_keys.repository import AuthKeyRepository
from wxpanel.domains.auth_keys.schemas import AuthKeyRead


class AuthKeyService:
    def __init__(self, repo: AuthKeyRepository):
        self.repo = repo

    async def mint(self, owner_user_id: int, count: int, days: int) -> list[str]:
        """
        签发 count 枚授权码。

        Raises:
            AppException(SystemErrorCode.DB_ERROR): 中途失败，data.keys 为已提交的授权码
        """
        keys: list[str] = []
        for _ in range(count):
            try:
                key = await self.repo.new_key(owner_user_id, days)
                await self.repo.session.commit()
            except SQLAlchemyError as exc:
                await self.repo.session.rollback()
                logger.opt(exception=exc).bind(
                    owner_user_id=owner_user_id, minted=len(keys), requested=count
                ).error("Auth key batch interrupted")
                raise AppException(
                    SystemErrorCode.DB_ERROR,
                    message=f"授权码生成中断，已生成 {len(keys)} 个",
                    data={"keys": keys},
                ) from exc
            keys.append(key.key_value)

        logger.bind(owner_user_id=owner_user_id, count=count, days=days).info(
            "Auth keys minted"
        )
        return keys

    async def get(self, key_value: str) -> AuthKey:
        key = await self.repo.get_by_value(key_value)
        if not key:
            raise AppException(AuthKeyError.NOT_FOUND)
        return key

    async def delay(self, key_value: str, days: int) -> AuthKey:
        """以当前时间为基准重新计算过期时间。"""
        key = await self.get(key_value)

        updated = await self.repo.update(
            key, {"days": days, "expires_at": utcnow() + timedelta(days=days)}
        )
        await self.repo.session.commit()

        logger.bind(auth_key=key_value, days=days).info("Auth key delayed")
        return updated

    async def revoke(self, key_value: str) -> None:
        key = await self.get(key_value)

        if await self.repo.is_bound(key_value):
            raise AppException(AuthKeyError.IN_USE)

        try:
            await self.repo.session.delete(key)
            await self.repo.session.commit()
        except IntegrityError:
            # 校验与删除之间被重新绑定
            await self.repo.session.rollback()
            raise AppException(AuthKeyError.IN_USE) from None

        logger.bind(auth_key=key_value).info("Auth key revoked")

    async def list_keys(self, owner_id: int | None = None) -> list[AuthKeyRead]:
        rows = await self.repo.list_with_owner(owner_id)
        return [AuthKeyRead.from_row(key, owner_name) for key, owner_name in rows]
