"""
领域事件定义 (Domain Events)
目录与订单的关键变化均发布为事件，供审计日志等订阅方消费
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, Dict, Any


class EventType(str, Enum):
    """事件类型枚举"""
    # 酒店相关
    HOTEL_CREATED = "hotel.created"
    HOTEL_UPDATED = "hotel.updated"
    HOTEL_STATUS_CHANGED = "hotel.status_changed"
    HOTEL_DELETED = "hotel.deleted"
    ROOM_TYPE_CHANGED = "room_type.changed"

    # 订单相关
    ORDER_CREATED = "order.created"
    ORDER_CANCELLED = "order.cancelled"


@dataclass
class BaseEventData:
    """事件数据基类"""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = str(value)
        return result


@dataclass
class HotelChangedData(BaseEventData):
    """酒店创建 / 编辑 / 删除事件数据"""
    hotel_id: int = 0
    hotel_name: str = ""
    operator_id: Optional[int] = None
    operator_role: str = ""
    status: str = ""


@dataclass
class HotelStatusChangedData(BaseEventData):
    """酒店发布状态变更事件数据"""
    hotel_id: int = 0
    hotel_name: str = ""
    old_status: str = ""
    new_status: str = ""
    reason: str = ""
    operator_id: Optional[int] = None


@dataclass
class RoomTypeChangedData(BaseEventData):
    """房型新增 / 修改 / 删除事件数据"""
    hotel_id: int = 0
    room_type_id: int = 0
    action: str = ""  # created / updated / deleted
    operator_id: Optional[int] = None


@dataclass
class OrderCreatedData(BaseEventData):
    """下单事件数据"""
    order_id: int = 0
    order_no: str = ""
    hotel_id: int = 0
    room_type_id: int = 0
    room_count: int = 0
    nights: int = 0
    total_price: Decimal = Decimal("0")


@dataclass
class OrderCancelledData(BaseEventData):
    """取消订单事件数据"""
    order_id: int = 0
    order_no: str = ""
    reason: str = ""
    restored_inventory: int = 0
