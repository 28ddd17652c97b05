"""
File: wxpanel/core/config.py
Description: 全局应用配置管理（使用 pydantic-settings）

所有配置值通过环境变量或 .env 文件加载。
本模块负责：
1. 校验环境变量类型
2. 解析复杂类型（如 CORS 列表）
3. 定义数据库 DSN（默认 sqlite+aiosqlite）
4. 定义 JWT 安全参数与管理员引导策略
5. 定义外部微信网关地址
6. 运行时强制校验必填项，确保应用在配置缺失时快速失败

Created: 2025-11-24
Updated: 2026-03-02 (SQLite store + WeChat gateway settings)
"""

from typing import Literal

from pydantic import AnyHttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """全局配置对象（唯一真实来源）"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=True,
    )

    # --------------------------------------------------------------------------
    # 1. General (通用)
    # --------------------------------------------------------------------------
    PROJECT_NAME: str = "WeChat Bot Admin Panel"
    API_PREFIX: str = "/api"
    ENVIRONMENT: Literal["local", "dev", "prod"] = "local"
    DEBUG: bool = False

    # 密钥 (生产环境强制要求高强度随机串)，用于 JWT 签名
    SECRET_KEY: str | None = None

    # CORS 配置（Pydantic 会自动解析 JSON 字符串列表）
    BACKEND_CORS_ORIGINS: list[AnyHttpUrl] = []

    # --------------------------------------------------------------------------
    # 2. Database (SQLite)
    # --------------------------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = "sqlite+aiosqlite:///./wxpanel.db"

    # --------------------------------------------------------------------------
    # 3. Logging (Loguru)
    # --------------------------------------------------------------------------
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_JSON_FORMAT: bool = False  # 是否输出 JSON 格式
    LOG_FILE_ENABLED: bool = False  # 是否启用文件日志
    LOG_DIR: str = "logs"  # 日志文件目录
    LOG_ROTATION: str = "1 day"  # 轮转策略
    LOG_RETENTION: str = "7 days"  # 保留时间
    LOG_COMPRESSION: str = "zip"  # 压缩格式
    LOG_DIAGNOSE: bool = True  # 是否启用诊断信息（生产环境建议 False）

    # --------------------------------------------------------------------------
    # 4. Security & Authentication (JWT)
    # --------------------------------------------------------------------------
    # Access Token 有效期 (分钟)，默认 24 小时
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # JWT 签名算法
    ALGORITHM: str = "HS256"

    # --------------------------------------------------------------------------
    # 5. Admin Bootstrap (管理员引导策略)
    # --------------------------------------------------------------------------
    # first_registrant: 第一个注册的用户自动成为管理员
    # seed: 启动时写入固定的默认管理员账号，注册永不提升角色
    ADMIN_BOOTSTRAP: Literal["first_registrant", "seed"] = "first_registrant"
    ADMIN_SEED_USERNAME: str = "admin"
    ADMIN_SEED_PASSWORD: str = "admin123"
    ADMIN_SEED_EMAIL: str = "admin@example.com"

    # --------------------------------------------------------------------------
    # 6. WeChat Gateway (外部微信网关)
    # --------------------------------------------------------------------------
    WECHAT_GATEWAY_URL: str = "http://www.asben.net:1239"
    WECHAT_GATEWAY_TIMEOUT: float = 30.0  # 单次请求超时（秒），不自动重试

    # --------------------------------------------------------------------------
    # Properties (便捷属性)
    # --------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return self.ENVIRONMENT == "prod"

    @property
    def is_debug(self) -> bool:
        """是否启用调试模式（仅在非生产环境有效）"""
        return self.DEBUG and not self.is_production

    # --------------------------------------------------------------------------
    # Validators
    # --------------------------------------------------------------------------
    @model_validator(mode="after")
    def _validate_required(self) -> "Settings":
        """验证必填项。"""
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY 必须在 .env 中设置")

        # 生产环境强制校验密钥强度
        if self.ENVIRONMENT == "prod" and len(self.SECRET_KEY) < 32:
            raise ValueError("生产环境 SECRET_KEY 长度必须 >= 32 字符")

        # 生产环境禁止使用默认管理员口令
        if (
            self.ENVIRONMENT == "prod"
            and self.ADMIN_BOOTSTRAP == "seed"
            and self.ADMIN_SEED_PASSWORD == "admin123"
        ):
            raise ValueError("生产环境必须覆盖 ADMIN_SEED_PASSWORD")

        return self


# 单例配置对象
# 配置加载失败时，Pydantic 会抛出 ValidationError，包含详细错误信息
settings = Settings()
