"""
File: wxpanel/domains/wechat/gateway.py
Description: 外部微信网关适配器 (httpx.AsyncClient)

网关接口：
1. POST /login/WakeUpLogin            {"key": 设备绑定密钥}
2. POST /login/GetLoginQrCodeNew?key= {"Check": bool, "Proxy": str}，成功时 Data.QrCodeUrl
3. GET  /login/CheckLoginStatus?key=  原样透传给调用方

所有响应解析为 GatewayResponse{Code, Data, Message, Text}，Code == 200 表示成功。
错误映射：
- 网络错误 / 非 2xx / 非 JSON 响应 -> wechat.gateway_unavailable (502)
- Code != 200 -> wechat.gateway_rejected (400)，携带网关原始消息

每次调用只尝试一次，不自动重试。客户端在 lifespan 中创建、关闭。

Created: 2026-03-02
"""

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from wxpanel.core.exceptions import AppException
from wxpanel.domains.wechat.constants import GATEWAY_SUCCESS_CODE, WeChatError


class GatewayResponse(BaseModel):
    """网关统一响应结构"""

    model_config = ConfigDict(extra="allow")

    Code: int | None = None
    Data: Any = None
    Message: str | None = None
    Text: str | None = None

    @property
    def ok(self) -> bool:
        return self.Code == GATEWAY_SUCCESS_CODE

    @property
    def error_message(self) -> str:
        return self.Message or self.Text or f"Gateway code {self.Code}"


class WeChatGatewayClient:
    """
    微信网关客户端。

    用法:
        gateway = WeChatGatewayClient(settings.WECHAT_GATEWAY_URL)
        resp = await gateway.request_wakeup(device_key)
        await gateway.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    # --------------------------------------------------------------------------
    # 网关接口
    # --------------------------------------------------------------------------

    async def request_wakeup(self, device_key: str) -> GatewayResponse:
        resp = await self._request("POST", "/login/WakeUpLogin", json={"key": device_key})
        return self._ensure_ok(resp, "WakeUpLogin")

    async def request_qr_code(
        self, auth_key: str, check: bool = False, proxy: str = ""
    ) -> GatewayResponse:
        resp = await self._request(
            "POST",
            "/login/GetLoginQrCodeNew",
            params={"key": auth_key},
            json={"Check": check, "Proxy": proxy},
        )
        return self._ensure_ok(resp, "GetLoginQrCodeNew")

    async def check_login_status(self, auth_key: str) -> GatewayResponse:
        """登录状态透传：Data.state 0 等待 / 1 已扫码 / 2 已确认 / 3 失败。"""
        return await self._request(
            "GET", "/login/CheckLoginStatus", params={"key": auth_key}
        )

    # --------------------------------------------------------------------------
    # 内部方法
    # --------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> GatewayResponse:
        log = logger.bind(gateway_path=path)

        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            log.opt(exception=exc).warning("Gateway request failed")
            raise AppException(
                WeChatError.GATEWAY_UNAVAILABLE, message=f"微信网关请求失败: {exc}"
            ) from exc
        except ValueError as exc:
            log.warning("Gateway returned non-JSON body")
            raise AppException(
                WeChatError.GATEWAY_UNAVAILABLE, message="微信网关返回了无法解析的响应"
            ) from exc

        try:
            result = GatewayResponse.model_validate(payload)
        except ValidationError as exc:
            log.warning("Gateway returned unexpected payload")
            raise AppException(
                WeChatError.GATEWAY_UNAVAILABLE, message="微信网关返回了无法解析的响应"
            ) from exc

        log.bind(gateway_code=result.Code).debug("Gateway responded")
        return result

    @staticmethod
    def _ensure_ok(resp: GatewayResponse, operation: str) -> GatewayResponse:
        if not resp.ok:
            logger.bind(gateway_operation=operation, gateway_code=resp.Code).warning(
                "Gateway rejected request"
            )
            raise AppException(
                WeChatError.GATEWAY_REJECTED,
                message=resp.error_message,
                data={"gateway_code": resp.Code},
            )
        return resp
