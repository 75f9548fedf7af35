"""
下单服务 - 预订引擎
校验请求、复制酒店 / 房型快照并写入订单

库存权威模式下，库存扣减使用条件更新：
UPDATE room_types SET inventory = inventory - n WHERE id = ? AND inventory >= n
扣减与订单写入在同一事务内提交
"""
from typing import Callable
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from yisu.config import settings
from yisu.domain.rules import calc_nights, calc_total_price
from yisu.exceptions import NotFoundError, ConflictError, ValidationError
from yisu.models.events import EventType, OrderCreatedData
from yisu.models.ontology import Hotel, RoomType, Order, HotelStatus, OrderStatus
from yisu.models.schemas import OrderCreate
from yisu.services.event_bus import event_bus, build_event, Event
from yisu.services.order_no import OrderNoAllocator

logger = logging.getLogger(__name__)


def _is_order_no_conflict(error: IntegrityError) -> bool:
    """唯一索引冲突的报错中会带上 order_no 列名或索引名"""
    return "order_no" in str(error.orig)


class BookingService:
    """下单服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 allocator: OrderNoAllocator = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish
        self.allocator = allocator or OrderNoAllocator.for_session(db)

    def create_order(self, data: OrderCreate) -> Order:
        """
        创建订单

        校验顺序：间夜数 -> 酒店已发布 -> 房型存在 -> 售罄 -> 房间数

        Raises:
            ValidationError: 日期或房间数不合法
            NotFoundError: 酒店未发布或房型不存在
            ConflictError: 售罄、库存不足或订单号分配失败
        """
        nights = calc_nights(data.check_in_date, data.check_out_date)
        if nights <= 0:
            raise ValidationError("checkOutDate must be later than checkInDate")

        hotel = self.db.query(Hotel).filter(
            Hotel.id == data.hotel_id,
            Hotel.status == HotelStatus.APPROVED,
        ).first()
        if not hotel:
            raise NotFoundError("Hotel not found or not available")

        room_type = next((rt for rt in hotel.room_types if rt.id == data.room_type_id), None)
        if room_type is None:
            raise NotFoundError("Room type not found")

        if (room_type.inventory or 0) <= 0:
            raise ConflictError("This room type is sold out")

        max_rooms = settings.MAX_ROOM_COUNT
        if not 1 <= data.room_count <= max_rooms:
            raise ValidationError(f"roomCount must be between 1 and {max_rooms}")

        unit_price = room_type.price
        total_price = calc_total_price(unit_price, nights, data.room_count)

        # 快照必须在扣减之前读取
        order = Order(
            order_no=self.allocator.allocate(),
            status=OrderStatus.PENDING,
            source=data.source,
            hotel_id=hotel.id,
            room_type_id=room_type.id,
            merchant_id=hotel.created_by,
            check_in_date=data.check_in_date,
            check_out_date=data.check_out_date,
            nights=nights,
            room_count=data.room_count,
            guest_name=data.guest_name,
            phone=data.phone,
            remarks=(data.remarks or "").strip(),
            hotel_name_snapshot=hotel.name_cn or hotel.name_en,
            hotel_city_snapshot=hotel.city or "",
            hotel_address_snapshot=hotel.address or "",
            star_rating_snapshot=hotel.star_rating,
            room_type_name_snapshot=room_type.type,
            bed_type_snapshot=room_type.bed_type or "",
            breakfast_included_snapshot=bool(room_type.breakfast_included),
            cancel_policy_snapshot=room_type.cancel_policy,
            max_guests_snapshot=room_type.max_guests,
            price_snapshot=unit_price,
            total_price=total_price,
        )

        if settings.INVENTORY_AUTHORITATIVE:
            self._reserve_inventory(room_type, data.room_count)

        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError as e:
            # 回滚同时撤销库存扣减
            self.db.rollback()
            if not _is_order_no_conflict(e):
                raise
            logger.warning(f"Order number {order.order_no} rejected by unique index")
            raise ConflictError("Unable to allocate a unique order number, please retry")
        self.db.refresh(order)

        logger.info(
            f"Order {order.order_no} created: hotel={hotel.id} room_type={room_type.id} "
            f"nights={nights} rooms={data.room_count} total={total_price}"
        )
        self._publish_event(build_event(
            EventType.ORDER_CREATED,
            OrderCreatedData(
                order_id=order.id,
                order_no=order.order_no,
                hotel_id=order.hotel_id,
                room_type_id=order.room_type_id,
                room_count=order.room_count,
                nights=order.nights,
                total_price=order.total_price,
            ),
            source="booking_service",
        ))
        return order

    def _reserve_inventory(self, room_type: RoomType, room_count: int) -> None:
        updated = (
            self.db.query(RoomType)
            .filter(RoomType.id == room_type.id, RoomType.inventory >= room_count)
            .update(
                {RoomType.inventory: RoomType.inventory - room_count},
                synchronize_session=False,
            )
        )
        if updated == 0:
            self.db.rollback()
            raise ConflictError("Not enough rooms available for this room type")
