"""
预订规则 - 纯函数

- 间夜数计算（按自然日，忽略时刻）
- 总价计算
- 取消政策别名归一
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from yisu.models.ontology import CancelPolicy

DateLike = Union[date, datetime]

# 历史数据 / 本地化取值到标准取消政策的映射
CANCEL_POLICY_ALIASES = {
    "free_cancellation": CancelPolicy.FREE_CANCELLATION,
    "free_cancel": CancelPolicy.FREE_CANCELLATION,
    "free": CancelPolicy.FREE_CANCELLATION,
    "免费取消": CancelPolicy.FREE_CANCELLATION,
    "non_refundable": CancelPolicy.NON_REFUNDABLE,
    "no_refund": CancelPolicy.NON_REFUNDABLE,
    "不可取消": CancelPolicy.NON_REFUNDABLE,
}


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def calc_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    计算间夜数

    两个日期都截断到当天零点后按自然日相减；结果 <= 0 表示离店不晚于入住。
    """
    return (_to_date(check_out) - _to_date(check_in)).days


def calc_total_price(unit_price: Decimal, nights: int, room_count: int) -> Decimal:
    """总价 = 单价 × 间夜数 × 房间数"""
    return Decimal(unit_price) * nights * room_count


def normalize_cancel_policy(value: Optional[Union[str, CancelPolicy]]) -> CancelPolicy:
    """
    将取消政策取值归一为 CancelPolicy

    空值视为免费取消；无法识别的取值抛出 ValueError。
    """
    if value is None or value == "":
        return CancelPolicy.FREE_CANCELLATION
    if isinstance(value, CancelPolicy):
        return value
    policy = CANCEL_POLICY_ALIASES.get(str(value).strip().lower())
    if policy is None:
        raise ValueError(f"Unknown cancel policy: {value}")
    return policy
