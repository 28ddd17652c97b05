"""
File: wxpanel/domains/auth/constants.py
Description: 认证领域常量定义 (错误码 + 成功提示)
Namespace: auth.*

1. Error 定义: 继承 BaseErrorCode，包含 (HTTP状态, 业务码, 默认文案)
2. Msg 定义: 纯字符串常量，用于 Router 返回成功响应

Created: 2026-01-15
Updated: 2026-03-02
"""

from starlette.status import HTTP_400_BAD_REQUEST, HTTP_401_UNAUTHORIZED

from wxpanel.core.error_code import BaseErrorCode

# ==============================================================================
# 1. 错误码定义 (Error Codes)
# 用于 Service 层抛出异常: raise AppException(AuthError.INVALID_CREDENTIALS)
# ==============================================================================


class AuthError(BaseErrorCode):
    """
    认证领域错误定义
    Tuple Structure: (HTTP_Status, Code_String, Default_Message)
    """

    # 注册时唯一性校验失败
    USERNAME_EXIST = (HTTP_400_BAD_REQUEST, "auth.username_exist", "该用户名已被注册")
    EMAIL_EXIST = (HTTP_400_BAD_REQUEST, "auth.email_exist", "该邮箱已被注册")

    # 登录失败的通用错误 (用户不存在与密码错误返回完全相同的响应)
    INVALID_CREDENTIALS = (
        HTTP_401_UNAUTHORIZED,
        "auth.invalid_credentials",
        "用户名或密码错误",
    )

    # 修改密码时旧密码校验失败
    PASSWORD_ERROR = (HTTP_400_BAD_REQUEST, "auth.password_error", "当前密码错误")


# ==============================================================================
# 2. 成功提示语 (Success Messages)
# ==============================================================================


class AuthMsg:
    """
    认证领域成功提示文案
    """

    LOGIN_SUCCESS = "登录成功"
    REGISTER_SUCCESS = "注册成功"
