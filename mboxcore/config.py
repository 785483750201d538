"""
配置模块 (Configuration Module)
==============================

从环境变量和 .env 文件加载扫描与解码相关的可调参数。
所有字段都有默认值，未配置任何环境变量时即可直接使用。
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """
    应用配置类，继承自 Pydantic BaseSettings，支持从环境变量自动加载（前缀 MBOX_）。

    属性:
        CHUNK_SIZE: 扫描器每次读取的字节数，默认 64 KiB
        PREVIEW_LENGTH: 正文预览的最大字符数
        MAX_LINE_BYTES: 单行无换行时的最大缓冲字节数，超出即按片段处理
        STREAM_BUFFER_SIZE: 后台扫描流的有界队列容量（条目数）
        IMPORT_BATCH_SIZE: 导入时每批交给持久化层的条目数
        LOG_LEVEL: 项目根日志器级别
    """
    model_config = SettingsConfigDict(env_prefix="MBOX_", env_file=".env", case_sensitive=False, extra="ignore")

    CHUNK_SIZE: int = 64 * 1024
    PREVIEW_LENGTH: int = 200
    MAX_LINE_BYTES: int = 1024 * 1024
    STREAM_BUFFER_SIZE: int = 256
    IMPORT_BATCH_SIZE: int = 50
    LOG_LEVEL: str = "INFO"

    @field_validator("CHUNK_SIZE", "PREVIEW_LENGTH", "MAX_LINE_BYTES", "STREAM_BUFFER_SIZE", "IMPORT_BATCH_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """
        校验尺寸类配置必须为正整数。
        """
        if v <= 0:
            raise ValueError(f"size settings must be positive, got {v}")
        return v


# 全局单例，避免重复加载配置
_settings_instance = None


def get_settings() -> Settings:
    """
    获取配置单例。

    首次调用时创建 Settings 实例并缓存，后续调用返回同一实例。
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """丢弃缓存的配置实例（测试中修改环境变量后使用）。"""
    global _settings_instance
    _settings_instance = None
