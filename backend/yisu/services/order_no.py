"""
订单号生成
格式：前缀 + 下单时间(%Y%m%d%H%M%S) + 4 位随机数，如 TT202401011200001234

随机后缀冲突时重试，超过次数后改用一次 8 位十六进制后缀，仍冲突则报错；
orders.order_no 的唯一索引兜底并发场景
"""
from datetime import datetime
from typing import Callable, Optional
import logging
import random
import uuid
from sqlalchemy.orm import Session
from yisu.config import settings
from yisu.exceptions import ConflictError
from yisu.models.ontology import Order

logger = logging.getLogger(__name__)


class OrderNoAllocator:
    """订单号分配器"""

    def __init__(
        self,
        exists: Callable[[str], bool],
        prefix: Optional[str] = None,
        max_attempts: Optional[int] = None,
        now: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ):
        self._exists = exists
        self.prefix = settings.ORDER_NO_PREFIX if prefix is None else prefix
        self.max_attempts = settings.ORDER_NO_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self._now = now
        self._rng = rng or random.Random()

    @classmethod
    def for_session(cls, db: Session, **kwargs) -> "OrderNoAllocator":
        """以数据库中已有订单号作为冲突判断"""
        def exists(order_no: str) -> bool:
            return db.query(Order.id).filter(Order.order_no == order_no).first() is not None
        return cls(exists, **kwargs)

    def allocate(self) -> str:
        """
        分配订单号

        Raises:
            ConflictError: 随机后缀与回退后缀均已被占用
        """
        stamp = f"{self.prefix}{self._now().strftime('%Y%m%d%H%M%S')}"

        for attempt in range(1, self.max_attempts + 1):
            candidate = f"{stamp}{self._rng.randint(1000, 9999)}"
            if not self._exists(candidate):
                return candidate
            logger.warning(f"Order number collision on {candidate} (attempt {attempt})")

        candidate = f"{stamp}{uuid.uuid4().hex[:8].upper()}"
        if not self._exists(candidate):
            logger.info(f"Order number allocated with fallback suffix: {candidate}")
            return candidate

        logger.error(f"Order number allocation exhausted at {stamp}")
        raise ConflictError("Unable to allocate a unique order number, please retry")
