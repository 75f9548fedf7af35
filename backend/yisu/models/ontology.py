"""
持久化对象定义
Hotel 为聚合根，RoomType 为其拥有的子实体（id 创建时分配，编辑时保持稳定）；
Order 为独立聚合，通过快照而非外键引用酒店与房型
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Date,
    ForeignKey, Text, Enum as SQLEnum, Boolean, Numeric, JSON, Index
)
from sqlalchemy.orm import relationship
from yisu.database import Base


# ============== 枚举定义 ==============

class UserRole(str, Enum):
    """用户角色"""
    ADMIN = "admin"            # 管理员
    MERCHANT = "merchant"      # 商户


class HotelStatus(str, Enum):
    """酒店发布状态"""
    PENDING = "pending"        # 待审核
    APPROVED = "approved"      # 已发布
    REJECTED = "rejected"      # 已驳回
    OFFLINE = "offline"        # 已下线


class CancelPolicy(str, Enum):
    """取消政策"""
    FREE_CANCELLATION = "free_cancellation"   # 免费取消
    NON_REFUNDABLE = "non_refundable"         # 不可取消


class OrderStatus(str, Enum):
    """订单状态"""
    PENDING = "pending"        # 待确认
    CONFIRMED = "confirmed"    # 已确认
    CANCELLED = "cancelled"    # 已取消
    COMPLETED = "completed"    # 已完成


class OrderSource(str, Enum):
    """下单来源"""
    MOBILE = "mobile"
    PC = "pc"
    MANUAL = "manual"


# ============== 对象定义 ==============

class User(Base):
    """商户或管理员账号"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.MERCHANT)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    hotels = relationship("Hotel", back_populates="owner")


class Hotel(Base):
    """
    酒店对象 - 目录聚合根
    仅 status=approved 的酒店对公众可见、可预订
    """
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    name_cn = Column(String(100), nullable=False)            # 中文名
    name_en = Column(String(200), nullable=False)            # 英文名
    address = Column(String(255), nullable=False)
    city = Column(String(50), index=True)
    star_rating = Column(Integer, nullable=False)             # 3/4/5
    opening_date = Column(Date, nullable=False)
    amenities = Column(JSON, default=list)                   # 设施列表
    banner_image = Column(String(500))
    images = Column(JSON, default=list)
    geo_lng = Column(Float)
    geo_lat = Column(Float)
    featured = Column(Boolean, default=False, nullable=False)  # 首页 Banner

    status = Column(SQLEnum(HotelStatus), default=HotelStatus.PENDING, nullable=False, index=True)
    reason = Column(Text)                                    # 驳回原因

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="hotels")
    room_types = relationship(
        "RoomType", back_populates="hotel",
        cascade="all, delete-orphan", order_by="RoomType.id"
    )
    tag_rows = relationship("HotelTag", cascade="all, delete-orphan", order_by="HotelTag.id")

    @property
    def tags(self) -> List[str]:
        return [row.tag for row in self.tag_rows]

    @tags.setter
    def tags(self, values: Optional[List[str]]) -> None:
        cleaned = [v.strip() for v in (values or []) if v and v.strip()]
        self.tag_rows = [HotelTag(tag=v) for v in dict.fromkeys(cleaned)]

    @property
    def min_price(self):
        """最低房价；无房型时为 0"""
        prices = [rt.price for rt in self.room_types]
        return min(prices) if prices else 0


class HotelTag(Base):
    """酒店标签（独立成行以便按标签检索与聚合）"""
    __tablename__ = "hotel_tags"

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    tag = Column(String(50), nullable=False, index=True)


class RoomType(Base):
    """
    房型对象 - 酒店拥有的子实体
    price/inventory 由商户编辑流程写入、由下单流程读取（并在库存权威模式下扣减）
    """
    __tablename__ = "room_types"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)                # 房型名称
    price = Column(Numeric(10, 2), nullable=False)           # 每晚价格
    bed_type = Column(String(50), default="")
    breakfast_included = Column(Boolean, default=False)
    cancel_policy = Column(SQLEnum(CancelPolicy), default=CancelPolicy.FREE_CANCELLATION, nullable=False)
    max_guests = Column(Integer, default=2)
    inventory = Column(Integer, default=10, nullable=False)  # 总库存（不按日期）
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    hotel = relationship("Hotel", back_populates="room_types")


class Order(Base):
    """
    订单对象 - 独立聚合根
    *_snapshot 字段在下单时从目录复制，之后不再随目录变化
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_no = Column(String(40), unique=True, nullable=False, index=True)
    status = Column(SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    source = Column(SQLEnum(OrderSource), default=OrderSource.MOBILE, nullable=False)

    # 引用（按 id，不建外键）
    hotel_id = Column(Integer, nullable=False, index=True)
    room_type_id = Column(Integer, nullable=False)
    merchant_id = Column(Integer, index=True)

    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    nights = Column(Integer, nullable=False)
    room_count = Column(Integer, nullable=False, default=1)

    guest_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False, index=True)
    remarks = Column(Text, default="")

    # 酒店快照
    hotel_name_snapshot = Column(String(200), nullable=False)
    hotel_city_snapshot = Column(String(50), default="")
    hotel_address_snapshot = Column(String(255), default="")
    star_rating_snapshot = Column(Integer, default=0)

    # 房型快照
    room_type_name_snapshot = Column(String(50), nullable=False)
    bed_type_snapshot = Column(String(50), default="")
    breakfast_included_snapshot = Column(Boolean, default=False)
    cancel_policy_snapshot = Column(SQLEnum(CancelPolicy), default=CancelPolicy.FREE_CANCELLATION, nullable=False)
    max_guests_snapshot = Column(Integer, default=2)

    # 价格快照
    price_snapshot = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    # 取消信息
    cancel_reason = Column(Text, default="")
    cancelled_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_orders_phone_created_at", "phone", "created_at"),
        Index("ix_orders_merchant_created_at", "merchant_id", "created_at"),
    )
