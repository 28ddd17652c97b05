"""
File: wxpanel/core/response.py
Description: 统一响应信封（Unified Response Envelope）

业务接口一律返回 {code, message, data, request_id, timestamp}：
- 成功: code = "success"，data 为业务数据
- 失败: code = "domain.reason" (见 error_code.py)，data 可携带上下文 (如 current_status)

健康检查 /health 例外，直接返回原始 JSON。

Created: 2025-11-24
Updated: 2026-03-02 (Nested model dumping + error-code aware fail)
"""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar, cast

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

SUCCESS_CODE = "success"


def _dump(value: Any) -> Any:
    """把 Pydantic 模型 (含嵌套在 list / tuple / dict 中的) 转为 JSON 安全结构。"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list | tuple):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


class ResponseModel(BaseModel, Generic[T]):
    model_config = ConfigDict(from_attributes=True)

    code: str = Field(default=SUCCESS_CODE, description="业务状态码 (success 或 domain.reason)")
    message: str = Field(default="Success", description="响应消息")
    data: T | None = Field(default=None, description="业务数据")
    request_id: str | None = Field(default=None, description="请求追踪ID")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="响应生成时间 (UTC)",
    )

    @classmethod
    def success(
        cls,
        data: T | None = None,
        message: str = "Success",
        request_id: str | None = None,
    ) -> "ResponseModel[T]":
        return cls(
            code=SUCCESS_CODE,
            message=message,
            data=cast(Any, _dump(data)),
            request_id=request_id,
        )

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        data: Any = None,
        request_id: str | None = None,
    ) -> "ResponseModel[Any]":
        return cls(code=code, message=message, data=_dump(data), request_id=request_id)
