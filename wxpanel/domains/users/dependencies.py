"""
File: wxpanel/domains/users/dependencies.py
Description: 用户领域依赖注入 (DI)

依赖链：
DBSession → UserRepository → UserService → UserServiceDep

Router 层将直接使用 UserServiceDep，无需关心底层细节。

Created: 2025-11-26
"""

from typing import Annotated

from fastapi import Depends

from wxpanel.api.deps import DBSession
from wxpanel.db.models.user import User
from wxpanel.domains.users.repository import UserRepository
from wxpanel.domains.users.service import UserService


async def get_user_repository(session: DBSession) -> UserRepository:
    """获取用户仓储实例 (UserRepository)。"""
    return UserRepository(model=User, session=session)


UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]


async def get_user_service(repo: UserRepoDep) -> UserService:
    """获取用户服务实例 (UserService)。"""
    return UserService(repo=repo)


# Router 中只需写: service: UserServiceDep
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
