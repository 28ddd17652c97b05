"""
File: tests/integration/test_admin_router.py
Description: 管理后台接口集成测试 (/api/admin/*)

1. 角色门禁：非管理员 403
2. 授权码：批量生成、列表 (含归属用户名)、延期、删除 (绑定中不可删)
3. 用户管理：列表、改角色、最后一个管理员保护、级联删除
4. 设备列表

Created: 2026-03-02
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.db.models import Device, User

ADMIN = "/api/admin"


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(
    client: AsyncClient, normal_user: User, headers_for
) -> None:
    headers = headers_for(normal_user)

    for method, url in [
        ("GET", f"{ADMIN}/users"),
        ("GET", f"{ADMIN}/auth-keys"),
        ("GET", f"{ADMIN}/wechat-accounts"),
        ("GET", f"{ADMIN}/devices"),
    ]:
        response = await client.request(method, url, headers=headers)
        assert response.status_code == 403, url
        assert response.json()["code"] == "system.forbidden"

    gen = await client.post(f"{ADMIN}/gen-auth-key", json={"count": 1}, headers=headers)
    assert gen.status_code == 403


@pytest.mark.asyncio
async def test_auth_key_lifecycle(
    client: AsyncClient, admin_user: User, normal_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)

    gen = await client.post(
        f"{ADMIN}/gen-auth-key",
        json={"count": 3, "days": 7, "owner_id": normal_user.id},
        headers=headers,
    )
    assert gen.status_code == 200
    result = gen.json()["data"]
    assert result["count"] == 3
    assert len(set(result["keys"])) == 3

    listed = await client.get(
        f"{ADMIN}/auth-keys", params={"owner_id": normal_user.id}, headers=headers
    )
    items = listed.json()["data"]
    assert {item["key_value"] for item in items} == set(result["keys"])
    assert all(item["owner_name"] == normal_user.username for item in items)
    assert not any(item["is_expired"] for item in items)

    # 归属用户能在 /auth-keys 看到自己的授权码
    mine = await client.get("/api/auth-keys", headers=headers_for(normal_user))
    assert len(mine.json()["data"]) == 3

    target = result["keys"][0]
    delayed = await client.post(
        f"{ADMIN}/delay-auth-key", json={"key": target, "days": 90}, headers=headers
    )
    assert delayed.status_code == 200
    expires_at = datetime.fromisoformat(delayed.json()["data"]["expires_at"])
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    assert expires_at > datetime.now(UTC) + timedelta(days=89)

    deleted = await client.delete(f"{ADMIN}/auth-key/{target}", headers=headers)
    assert deleted.status_code == 200

    missing = await client.delete(f"{ADMIN}/auth-key/{target}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "auth_keys.not_found"


@pytest.mark.asyncio
async def test_gen_key_validation_and_unknown_owner(
    client: AsyncClient, admin_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)

    too_many = await client.post(f"{ADMIN}/gen-auth-key", json={"count": 101}, headers=headers)
    assert too_many.status_code == 400
    assert too_many.json()["code"] == "system.invalid_params"

    unknown = await client.post(
        f"{ADMIN}/gen-auth-key", json={"count": 1, "owner_id": 9999}, headers=headers
    )
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "users.not_found"


@pytest.mark.asyncio
async def test_bound_key_cannot_be_deleted(
    client: AsyncClient, admin_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)
    created = await client.post("/api/wechat-accounts", json={}, headers=headers)
    auth_key = created.json()["data"]["auth_key"]

    response = await client.delete(f"{ADMIN}/auth-key/{auth_key}", headers=headers)

    assert response.status_code == 400
    assert response.json()["code"] == "auth_keys.in_use"


@pytest.mark.asyncio
async def test_last_admin_is_protected(
    client: AsyncClient, admin_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)

    demote = await client.put(
        f"{ADMIN}/users/{admin_user.id}/role", json={"role": "user"}, headers=headers
    )
    assert demote.status_code == 400
    assert demote.json()["code"] == "users.last_admin"

    delete = await client.delete(f"{ADMIN}/users/{admin_user.id}", headers=headers)
    assert delete.status_code == 400
    assert delete.json()["code"] == "users.last_admin"


@pytest.mark.asyncio
async def test_user_management(
    client: AsyncClient, admin_user: User, normal_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)

    listed = await client.get(f"{ADMIN}/users", headers=headers)
    assert {u["username"] for u in listed.json()["data"]} == {"root", "alice"}

    promoted = await client.put(
        f"{ADMIN}/users/{normal_user.id}/role", json={"role": "agent"}, headers=headers
    )
    assert promoted.status_code == 200
    assert promoted.json()["data"]["role"] == "agent"

    taken = await client.put(
        f"{ADMIN}/users/{normal_user.id}", json={"username": "root"}, headers=headers
    )
    assert taken.status_code == 400
    assert taken.json()["code"] == "users.username_taken"

    bad_role = await client.put(
        f"{ADMIN}/users/{normal_user.id}/role", json={"role": "superuser"}, headers=headers
    )
    assert bad_role.status_code == 400


@pytest.mark.asyncio
async def test_delete_user_cascades(
    client: AsyncClient, admin_user: User, normal_user: User, headers_for
) -> None:
    user_headers = headers_for(normal_user)
    created = await client.post("/api/wechat-accounts", json={}, headers=user_headers)
    account_id = created.json()["data"]["id"]

    response = await client.delete(
        f"{ADMIN}/users/{normal_user.id}", headers=headers_for(admin_user)
    )
    assert response.status_code == 200

    account = await client.get(
        f"{ADMIN}/wechat-accounts/{account_id}", headers=headers_for(admin_user)
    )
    assert account.status_code == 404

    # 被删除用户的令牌随之失效
    profile = await client.get("/api/user/profile", headers=user_headers)
    assert profile.status_code == 401


@pytest.mark.asyncio
async def test_list_devices(
    client: AsyncClient, db_session: AsyncSession, admin_user: User, headers_for
) -> None:
    headers = headers_for(admin_user)
    gen = await client.post(f"{ADMIN}/gen-auth-key", json={"count": 1}, headers=headers)
    key = gen.json()["data"]["keys"][0]

    db_session.add(
        Device(
            device_name="iPad",
            auth_key=key,
            owner_user_id=admin_user.id,
            status="online",
        )
    )
    await db_session.commit()

    response = await client.get(f"{ADMIN}/devices", headers=headers)

    assert response.status_code == 200
    devices = response.json()["data"]
    assert len(devices) == 1
    assert devices[0]["device_name"] == "iPad"
    assert devices[0]["owner_name"] == "root"
