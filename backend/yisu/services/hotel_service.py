"""
酒店服务 - 目录存储与发布流程
管理 Hotel 聚合根及其拥有的 RoomType 集合

- 商户创建酒店（status=pending）
- 商户编辑酒店或房型会重置为 pending；管理员编辑不改变发布状态
- 发布状态只能通过 PublicationWorkflow 修改
"""
from typing import List, Optional, Callable
import logging
from sqlalchemy.orm import Session
from yisu.domain.hotel import PublicationWorkflow
from yisu.exceptions import NotFoundError, ValidationError
from yisu.models.events import (
    EventType, HotelChangedData, HotelStatusChangedData, RoomTypeChangedData
)
from yisu.models.ontology import Hotel, RoomType, HotelStatus, User
from yisu.models.schemas import (
    HotelCreate, HotelUpdate, HotelStatusUpdate,
    RoomTypeCreate, RoomTypeUpdate, RoomTypeUpsert
)
from yisu.security.policy import authorize, is_admin
from yisu.services.event_bus import event_bus, build_event, Event

logger = logging.getLogger(__name__)

_HOTEL_CONTENT_FIELDS = (
    "name_cn", "name_en", "address", "city", "star_rating", "opening_date",
    "tags", "amenities", "banner_image", "images", "featured",
)
_REQUIRED_FIELDS = {"name_cn", "name_en", "address", "star_rating", "opening_date", "featured"}


def room_type_to_dict(room_type: RoomType) -> dict:
    return {
        "id": room_type.id,
        "type": room_type.type,
        "price": room_type.price,
        "bed_type": room_type.bed_type or "",
        "breakfast_included": bool(room_type.breakfast_included),
        "cancel_policy": room_type.cancel_policy,
        "max_guests": room_type.max_guests,
        "inventory": room_type.inventory,
    }


def geo_to_dict(hotel: Hotel) -> Optional[dict]:
    if hotel.geo_lng is None or hotel.geo_lat is None:
        return None
    return {"lng": hotel.geo_lng, "lat": hotel.geo_lat}


def hotel_to_dict(hotel: Hotel) -> dict:
    """商户 / 管理员视角的完整酒店信息"""
    return {
        "id": hotel.id,
        "name_cn": hotel.name_cn,
        "name_en": hotel.name_en,
        "address": hotel.address,
        "city": hotel.city,
        "star_rating": hotel.star_rating,
        "opening_date": hotel.opening_date,
        "tags": hotel.tags,
        "amenities": hotel.amenities or [],
        "banner_image": hotel.banner_image,
        "images": hotel.images or [],
        "geo": geo_to_dict(hotel),
        "featured": bool(hotel.featured),
        "status": hotel.status,
        "reason": hotel.reason,
        "created_by": hotel.created_by,
        "room_types": [room_type_to_dict(rt) for rt in hotel.room_types],
        "created_at": hotel.created_at,
        "updated_at": hotel.updated_at,
    }


class HotelService:
    """酒店服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    # ============== 查询 ==============

    def list_hotels(self, user: User) -> List[Hotel]:
        """管理员查看全部酒店，商户只看自己的"""
        query = self.db.query(Hotel)
        if not is_admin(user):
            query = query.filter(Hotel.created_by == user.id)
        return query.order_by(Hotel.updated_at.desc(), Hotel.id.desc()).all()

    def get_hotel(self, hotel_id: int) -> Hotel:
        hotel = self.db.query(Hotel).filter(Hotel.id == hotel_id).first()
        if not hotel:
            raise NotFoundError("Hotel not found")
        return hotel

    def get_managed_hotel(self, hotel_id: int, user: User) -> Hotel:
        """获取调用者有权管理的酒店"""
        hotel = self.get_hotel(hotel_id)
        authorize(user, hotel.created_by)
        return hotel

    # ============== 酒店写操作 ==============

    def create_hotel(self, data: HotelCreate, user: User) -> Hotel:
        """商户创建酒店，初始为待审核"""
        hotel = Hotel(
            name_cn=data.name_cn.strip(),
            name_en=data.name_en.strip(),
            address=data.address.strip(),
            city=(data.city or "").strip() or None,
            star_rating=data.star_rating,
            opening_date=data.opening_date,
            tags=data.tags,
            amenities=data.amenities,
            banner_image=data.banner_image,
            images=data.images,
            featured=data.featured,
            status=HotelStatus.PENDING,
            created_by=user.id,
        )
        self._apply_geo(hotel, data.geo)
        hotel.room_types = [RoomType(**rt.model_dump()) for rt in data.room_types]

        self.db.add(hotel)
        self.db.commit()
        self.db.refresh(hotel)

        logger.info(f"Hotel {hotel.id} created by user {user.id}")
        self._publish(EventType.HOTEL_CREATED, self._changed_data(hotel, user))
        return hotel

    def update_hotel(self, hotel_id: int, data: HotelUpdate, user: User) -> Hotel:
        """编辑酒店内容；传入 roomTypes 时按 id 整体替换房型集合"""
        hotel = self.get_managed_hotel(hotel_id, user)
        update_data = data.model_dump(exclude_unset=True)

        for key in _HOTEL_CONTENT_FIELDS:
            if key in update_data:
                value = update_data[key]
                if value is None and key in _REQUIRED_FIELDS:
                    raise ValidationError(f"{key} must not be null")
                if key in ("name_cn", "name_en", "address"):
                    value = value.strip()
                if key == "city":
                    value = (value or "").strip() or None
                setattr(hotel, key, value)
        if "geo" in update_data:
            self._apply_geo(hotel, data.geo)
        if data.room_types is not None:
            self._replace_room_types(hotel, data.room_types)

        self._after_content_edit(hotel, user)
        self.db.commit()
        self.db.refresh(hotel)

        logger.info(f"Hotel {hotel.id} updated by user {user.id}, status={hotel.status.value}")
        self._publish(EventType.HOTEL_UPDATED, self._changed_data(hotel, user))
        return hotel

    def update_status(self, hotel_id: int, data: HotelStatusUpdate, user: User) -> Hotel:
        """管理员设置发布状态"""
        hotel = self.get_hotel(hotel_id)
        old_status = PublicationWorkflow(hotel).review(data.status, data.reason)
        self.db.commit()
        self.db.refresh(hotel)

        logger.info(f"Hotel {hotel.id} status {old_status.value} -> {hotel.status.value} by admin {user.id}")
        self._publish(EventType.HOTEL_STATUS_CHANGED, HotelStatusChangedData(
            hotel_id=hotel.id,
            hotel_name=hotel.name_cn,
            old_status=old_status.value,
            new_status=hotel.status.value,
            reason=hotel.reason or "",
            operator_id=user.id,
        ))
        return hotel

    def delete_hotel(self, hotel_id: int, user: User) -> None:
        """删除酒店（订单通过快照引用，不受影响）"""
        hotel = self.get_managed_hotel(hotel_id, user)
        event_data = self._changed_data(hotel, user)
        self.db.delete(hotel)
        self.db.commit()

        logger.info(f"Hotel {hotel_id} deleted by user {user.id}")
        self._publish(EventType.HOTEL_DELETED, event_data)

    # ============== 房型写操作 ==============

    def add_room_type(self, hotel_id: int, data: RoomTypeCreate, user: User) -> RoomType:
        hotel = self.get_managed_hotel(hotel_id, user)
        room_type = RoomType(**data.model_dump())
        hotel.room_types.append(room_type)
        self._after_content_edit(hotel, user)
        self.db.commit()
        self.db.refresh(room_type)

        self._publish_room_type(hotel, room_type.id, "created", user)
        return room_type

    def update_room_type(self, hotel_id: int, room_type_id: int,
                         data: RoomTypeUpdate, user: User) -> RoomType:
        hotel = self.get_managed_hotel(hotel_id, user)
        room_type = self._find_room_type(hotel, room_type_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                raise ValidationError(f"{key} must not be null")
            setattr(room_type, key, value)

        self._after_content_edit(hotel, user)
        self.db.commit()
        self.db.refresh(room_type)

        self._publish_room_type(hotel, room_type.id, "updated", user)
        return room_type

    def delete_room_type(self, hotel_id: int, room_type_id: int, user: User) -> None:
        hotel = self.get_managed_hotel(hotel_id, user)
        room_type = self._find_room_type(hotel, room_type_id)
        if len(hotel.room_types) <= 1:
            raise ValidationError("A hotel must keep at least one room type")

        hotel.room_types.remove(room_type)
        self._after_content_edit(hotel, user)
        self.db.commit()

        self._publish_room_type(hotel, room_type_id, "deleted", user)

    # ============== 内部方法 ==============

    def _find_room_type(self, hotel: Hotel, room_type_id: int) -> RoomType:
        for room_type in hotel.room_types:
            if room_type.id == room_type_id:
                return room_type
        raise NotFoundError("Room type not found")

    def _replace_room_types(self, hotel: Hotel, items: List[RoomTypeUpsert]) -> None:
        """带 id 的更新、不带 id 的新增、未出现的删除"""
        existing = {rt.id: rt for rt in hotel.room_types}
        seen = set()
        kept = []
        for item in items:
            values = item.model_dump(exclude={"id"})
            if item.id is None:
                kept.append(RoomType(**values))
                continue
            if item.id in seen:
                raise ValidationError(f"Duplicate room type id {item.id}")
            room_type = existing.get(item.id)
            if room_type is None:
                raise NotFoundError("Room type not found")
            for key, value in values.items():
                setattr(room_type, key, value)
            seen.add(item.id)
            kept.append(room_type)
        hotel.room_types = kept

    def _after_content_edit(self, hotel: Hotel, user: User) -> None:
        """商户的任何内容编辑都需要重新审核"""
        if not is_admin(user):
            PublicationWorkflow(hotel).submit_edit()

    @staticmethod
    def _apply_geo(hotel: Hotel, geo) -> None:
        hotel.geo_lng = geo.lng if geo else None
        hotel.geo_lat = geo.lat if geo else None

    @staticmethod
    def _changed_data(hotel: Hotel, user: User) -> HotelChangedData:
        return HotelChangedData(
            hotel_id=hotel.id,
            hotel_name=hotel.name_cn,
            operator_id=user.id,
            operator_role=user.role.value,
            status=hotel.status.value if hotel.status else "",
        )

    def _publish_room_type(self, hotel: Hotel, room_type_id: int, action: str, user: User) -> None:
        logger.info(f"Room type {room_type_id} of hotel {hotel.id} {action} by user {user.id}")
        self._publish(EventType.ROOM_TYPE_CHANGED, RoomTypeChangedData(
            hotel_id=hotel.id,
            room_type_id=room_type_id,
            action=action,
            operator_id=user.id,
        ))

    def _publish(self, event_type: EventType, data) -> None:
        self._publish_event(build_event(event_type, data, source="hotel_service"))
