"""
订单服务 - 订单生命周期
负责订单查询与游客取消；下单见 BookingService

取消规则由 OrderEntity 判断，持久化使用条件更新，
并发重复取消只会有一个成功
"""
from typing import List, Optional, Callable
import logging
from sqlalchemy.orm import Session
from yisu.config import settings
from yisu.domain.order import OrderEntity, cancellable_statuses
from yisu.exceptions import NotFoundError, ConflictError, ValidationError
from yisu.models.events import EventType, OrderCancelledData
from yisu.models.ontology import Order, RoomType
from yisu.services.event_bus import event_bus, build_event, Event

logger = logging.getLogger(__name__)


def order_to_dict(order: Order) -> dict:
    """订单对外视图，酒店 / 房型信息全部来自快照"""
    return {
        "id": order.id,
        "order_no": order.order_no,
        "status": order.status,
        "source": order.source,
        "hotel_id": order.hotel_id,
        "hotel_name": order.hotel_name_snapshot,
        "hotel_city": order.hotel_city_snapshot or "",
        "hotel_address": order.hotel_address_snapshot or "",
        "star_rating": order.star_rating_snapshot or 0,
        "room_type_id": order.room_type_id,
        "room_type_name": order.room_type_name_snapshot,
        "bed_type": order.bed_type_snapshot or "",
        "check_in_date": order.check_in_date,
        "check_out_date": order.check_out_date,
        "nights": order.nights,
        "room_count": order.room_count,
        "guest_name": order.guest_name,
        "phone": order.phone,
        "remarks": order.remarks or "",
        "price_snapshot": order.price_snapshot,
        "total_price": order.total_price,
        "cancel_policy": order.cancel_policy_snapshot,
        "breakfast_included": bool(order.breakfast_included_snapshot),
        "max_guests": order.max_guests_snapshot,
        "cancel_reason": order.cancel_reason or "",
        "cancelled_at": order.cancelled_at,
        "created_at": order.created_at,
    }


class OrderService:
    """订单服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def get_order(self, order_id: int) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_order_by_no(self, order_no: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.order_no == order_no).first()

    def query_by_phone(self, phone: str, limit: Optional[int] = None) -> List[Order]:
        """按手机号查询订单，最新的在前"""
        phone = (phone or "").strip()
        if not phone:
            raise ValidationError("phone is required")

        max_limit = settings.ORDER_QUERY_LIMIT
        limit = max_limit if limit is None else max(1, min(limit, max_limit))
        return (
            self.db.query(Order)
            .filter(Order.phone == phone)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )

    def cancel_order(self, order_id: int, phone: str, reason: Optional[str] = None) -> Order:
        """
        游客取消订单

        Raises:
            NotFoundError: 订单不存在
            AuthorizationError: 手机号校验失败
            ConflictError: 已取消 / 已完成 / 不可取消，或并发取消失败
        """
        order = self.get_order(order_id)
        entity = OrderEntity(order)
        entity.ensure_cancellable(phone)
        values = entity.cancel(reason)

        updated = (
            self.db.query(Order)
            .filter(Order.id == order.id, Order.status.in_(cancellable_statuses()))
            .update(values, synchronize_session=False)
        )
        if updated == 0:
            self.db.rollback()
            raise ConflictError("Order already cancelled")

        restored = self._restore_inventory(order)
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order {order.order_no} cancelled, reason={order.cancel_reason}")
        self._publish_event(build_event(
            EventType.ORDER_CANCELLED,
            OrderCancelledData(
                order_id=order.id,
                order_no=order.order_no,
                reason=order.cancel_reason,
                restored_inventory=restored,
            ),
            source="order_service",
        ))
        return order

    def _restore_inventory(self, order: Order) -> int:
        """库存权威模式下归还库存；房型已删除时跳过"""
        if not settings.INVENTORY_AUTHORITATIVE:
            return 0
        updated = (
            self.db.query(RoomType)
            .filter(RoomType.id == order.room_type_id, RoomType.hotel_id == order.hotel_id)
            .update(
                {RoomType.inventory: RoomType.inventory + order.room_count},
                synchronize_session=False,
            )
        )
        if updated == 0:
            logger.info(f"Room type {order.room_type_id} no longer exists, inventory not restored")
            return 0
        return order.room_count
