"""
应用配置
从环境变量与 .env 文件读取配置
"""
from decimal import Decimal
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "Yisu Booking"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./yisu.db"

    # JWT 配置
    SECRET_KEY: str = "yisu-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # 订单号
    ORDER_NO_PREFIX: str = "TT"
    ORDER_NO_MAX_ATTEMPTS: int = 5

    # 下单
    MAX_ROOM_COUNT: int = 5
    # True: 下单扣减库存、取消归还库存；False: 库存仅作为售罄校验
    INVENTORY_AUTHORITATIVE: bool = True

    # 公共目录查询
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 50
    BANNER_DEFAULT_LIMIT: int = 5
    BANNER_MAX_LIMIT: int = 10
    ORDER_QUERY_LIMIT: int = 50
    DEFAULT_PRICE_MIN: Decimal = Decimal("0")
    DEFAULT_PRICE_MAX: Decimal = Decimal("2000")

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
