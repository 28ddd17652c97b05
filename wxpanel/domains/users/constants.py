"""
File: wxpanel/domains/users/constants.py
Description: 用户领域常量定义 (错误码 + 成功提示)
Namespace: users.*
"""

from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from wxpanel.core.error_code import BaseErrorCode


class UserError(BaseErrorCode):
    """用户领域错误码"""

    # 格式: (HTTP状态, 业务码, 默认文案)

    USERNAME_TAKEN = (HTTP_400_BAD_REQUEST, "users.username_taken", "该用户名已被占用")
    EMAIL_TAKEN = (HTTP_400_BAD_REQUEST, "users.email_taken", "该邮箱已被其他用户使用")
    NOT_FOUND = (HTTP_404_NOT_FOUND, "users.not_found", "用户不存在")

    # 系统中至少保留一名管理员
    LAST_ADMIN = (HTTP_400_BAD_REQUEST, "users.last_admin", "不能移除最后一个管理员")


class UserMsg:
    """用户领域成功提示文案"""

    PROFILE_UPDATED = "资料更新成功"
    PASSWORD_CHANGED = "密码修改成功"
    USER_UPDATED = "用户信息更新成功"
    ROLE_UPDATED = "用户角色更新成功"
    USER_DELETED = "用户删除成功"
