"""
File: wxpanel/domains/wechat/constants.py
Description: 微信账号领域常量定义 (错误码 + 成功提示)
Namespace: wechat.*

Created: 2026-03-02
"""

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_502_BAD_GATEWAY,
)

from wxpanel.core.error_code import BaseErrorCode

# 未指定授权码创建账号时的默认值
DEFAULT_NICKNAME = "新微信账号"
SIMULATED_DEVICE_KEY_PREFIX = "sim_dak_"

# 网关业务码：200 为成功
GATEWAY_SUCCESS_CODE = 200


class WeChatError(BaseErrorCode):
    """微信账号领域错误码"""

    ACCOUNT_NOT_FOUND = (HTTP_404_NOT_FOUND, "wechat.account_not_found", "微信账号不存在")

    INVALID_STATE_TRANSITION = (
        HTTP_400_BAD_REQUEST,
        "wechat.invalid_state_transition",
        "当前状态不允许该操作",
    )

    # 唤醒登录需要设备绑定密钥
    NOT_BOUND = (HTTP_400_BAD_REQUEST, "wechat.not_bound", "该账号未绑定设备，无法唤醒登录")

    EMPTY_UPDATE = (HTTP_400_BAD_REQUEST, "system.invalid_params", "没有需要更新的字段")

    GATEWAY_REJECTED = (HTTP_400_BAD_REQUEST, "wechat.gateway_rejected", "微信网关拒绝请求")
    GATEWAY_UNAVAILABLE = (
        HTTP_502_BAD_GATEWAY,
        "wechat.gateway_unavailable",
        "微信网关不可用",
    )


class WeChatMsg:
    ACCOUNT_CREATED = "微信账号创建成功"
    ACCOUNT_UPDATED = "微信账号更新成功"
    ACCOUNT_DELETED = "微信账号删除成功"
    STATUS_UPDATED = "状态更新成功"
    QR_ISSUED = "二维码获取成功"
    SCANNED = "已扫码，等待确认"
    CONFIRMED = "登录确认完成"
    RETRY = "已重置，可重新获取二维码"
    WAKEUP_SUCCESS = "唤醒登录成功"
