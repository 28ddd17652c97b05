"""
File: wxpanel/domains/auth_keys/dependencies.py
Description: 授权码领域依赖注入 (DI)

依赖链：
DBSession → AuthKeyRepository → AuthKeyService → AuthKeyServiceDep
"""

from typing import Annotated

from fastapi import Depends

from wxpanel.api.deps import DBSession
from wxpanel.db.models.auth_key import AuthKey
from wxpanel.domains.auth_keys.repository import AuthKeyRepository
from wxpanel.domains.auth_keys.service import AuthKeyService


async def get_auth_key_repository(session: DBSession) -> AuthKeyRepository:
    return AuthKeyRepository(model=AuthKey, session=session)


AuthKeyRepoDep = Annotated[AuthKeyRepository, Depends(get_auth_key_repository)]


async def get_auth_key_service(repo: AuthKeyRepoDep) -> AuthKeyService:
    return AuthKeyService(repo=repo)


AuthKeyServiceDep = Annotated[AuthKeyService, Depends(get_auth_key_service)]
