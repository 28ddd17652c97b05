"""
File: wxpanel/domains/auth_keys/constants.py
Description: 授权码领域常量定义 (错误码 + 成功提示 + 签发限制)
Namespace: auth_keys.*
"""

from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from wxpanel.core.error_code import BaseErrorCode

# 签发限制
DEFAULT_KEY_DAYS = 30
MAX_KEY_COUNT = 100
MAX_KEY_DAYS = 3650

# 授权码长度 (secrets.token_hex 的字节数，字符串长度为其 2 倍)
KEY_TOKEN_BYTES = 16


class AuthKeyError(BaseErrorCode):
    """授权码领域错误码"""

    NOT_FOUND = (HTTP_404_NOT_FOUND, "auth_keys.not_found", "授权码不存在")

    # 仍有微信账号或设备绑定在该授权码上
    IN_USE = (HTTP_400_BAD_REQUEST, "auth_keys.in_use", "授权码仍被微信账号或设备使用")


class AuthKeyMsg:
    GENERATED = "授权码生成成功"
    DELETED = "授权码删除成功"
    DELAYED = "授权码延期成功"
