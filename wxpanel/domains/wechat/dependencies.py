"""
File: wxpanel/domains/wechat/dependencies.py
Description: 微信账号领域依赖注入 (DI)

依赖链：
DBSession → WeChatAccountRepository + AuthKeyRepository
GatewayDep (app.state.gateway)
→ WeChatService → WeChatServiceDep
"""

from typing import Annotated

from fastapi import Depends

from wxpanel.api.deps import DBSession, GatewayDep
from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.domains.auth_keys.dependencies import AuthKeyRepoDep
from wxpanel.domains.wechat.repository import WeChatAccountRepository
from wxpanel.domains.wechat.service import WeChatService


async def get_wechat_repository(session: DBSession) -> WeChatAccountRepository:
    return WeChatAccountRepository(model=WeChatAccount, session=session)


WeChatRepoDep = Annotated[WeChatAccountRepository, Depends(get_wechat_repository)]


async def get_wechat_service(
    repo: WeChatRepoDep,
    key_repo: AuthKeyRepoDep,
    gateway: GatewayDep,
) -> WeChatService:
    return WeChatService(repo=repo, key_repo=key_repo, gateway=gateway)


WeChatServiceDep = Annotated[WeChatService, Depends(get_wechat_service)]
