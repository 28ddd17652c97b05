"""
File: wxpanel/db/repositories/base.py
Description: 通用异步 Repository 基类 (CRUD)

所有领域的 Repository 继承此类，以减少样板代码。

特性：
- 泛型支持: BaseRepository[ModelType]
- 纯异步: 基于 sqlalchemy.ext.asyncio
- 只 flush 不 commit: 事务边界由 Service 层控制
- update 自动过滤核心系统字段 (id, created_at, updated_at)

Created: 2025-11-25
Updated: 2026-03-02 (Integer primary keys, dict payloads)
"""

from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.db.models.base import IntIdBase

ModelType = TypeVar("ModelType", bound=IntIdBase)


class BaseRepository(Generic[ModelType]):
    """
    通用 CRUD 仓储基类。

    参数:
    - model: SQLAlchemy 模型类 (如 User)
    - session: 当前请求的 AsyncSession
    """

    # 禁止通过通用 update 方法修改的字段
    PROTECTED_FIELDS: ClassVar[set[str]] = {"id", "created_at", "updated_at"}

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    # --------------------------------------------------------------------------
    # 查询操作 (Read)
    # --------------------------------------------------------------------------

    async def get(self, id: int) -> ModelType | None:
        """根据主键 ID 查询单条记录"""
        return await self.session.get(self.model, id)

    async def exists(self, id: int) -> bool:
        return await self.get(id) is not None

    async def list(
        self,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ModelType]:
        """
        分页查询记录列表 (按主键倒序，最新在前)。

        Args:
            skip: 跳过的记录数（偏移量）
            limit: 返回的最大记录数
        """
        stmt = (
            select(self.model)
            .order_by(self.model.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """获取记录总数。"""
        stmt = select(func.count()).select_from(self.model)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    # --------------------------------------------------------------------------
    # 写入操作 (Create / Update / Delete)
    # --------------------------------------------------------------------------

    async def create(self, obj_in: Mapping[str, Any]) -> ModelType:
        """
        创建新记录。

        flush 到数据库以获取 ID，但不会 commit（由 Service 层控制事务）。
        """
        db_obj = self.model(**obj_in)

        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)

        return db_obj

    async def update(self, db_obj: ModelType, obj_in: Mapping[str, Any]) -> ModelType:
        """
        更新现有记录，自动过滤 PROTECTED_FIELDS。
        """
        safe_data = {k: v for k, v in obj_in.items() if k not in self.PROTECTED_FIELDS}
        db_obj.update(**safe_data)

        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)

        return db_obj

    async def delete(self, id: int) -> ModelType | None:
        """物理删除记录，不存在时返回 None。"""
        db_obj = await self.get(id)
        if db_obj:
            await self.session.delete(db_obj)
            await self.session.flush()
        return db_obj
