"""
Pydantic 模式定义
用于 API 请求/响应验证；对外 JSON 字段使用 camelCase
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel
from yisu.domain.rules import normalize_cancel_policy
from yisu.models.ontology import (
    UserRole, HotelStatus, CancelPolicy, OrderStatus, OrderSource
)


class ApiModel(BaseModel):
    """camelCase 输入输出，同时接受 snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _parse_calendar_date(v: Any) -> Any:
    """接受 ISO 日期或日期时间，统一截断为日期"""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v.strip()) > 10:
        return datetime.fromisoformat(v.strip().replace("Z", "+00:00")).date()
    return v


# ============== 认证 Schemas ==============

class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.MERCHANT


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None


class UserResponse(ApiModel):
    id: int
    username: str
    role: UserRole


class LoginResponse(ApiModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


# ============== 房型 Schemas ==============

class RoomTypeBase(ApiModel):
    type: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0)
    bed_type: str = Field(default="", max_length=50)
    breakfast_included: bool = False
    cancel_policy: CancelPolicy = CancelPolicy.FREE_CANCELLATION
    max_guests: int = Field(default=2, ge=1, le=10)
    inventory: int = Field(default=10, ge=0)

    @field_validator("cancel_policy", mode="before")
    @classmethod
    def parse_cancel_policy(cls, v: Any) -> CancelPolicy:
        """兼容历史 / 本地化取值，如“免费取消”“不可取消”"""
        return normalize_cancel_policy(v)


class RoomTypeCreate(RoomTypeBase):
    pass


class RoomTypeUpdate(ApiModel):
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    bed_type: Optional[str] = Field(None, max_length=50)
    breakfast_included: Optional[bool] = None
    cancel_policy: Optional[CancelPolicy] = None
    max_guests: Optional[int] = Field(None, ge=1, le=10)
    inventory: Optional[int] = Field(None, ge=0)

    @field_validator("cancel_policy", mode="before")
    @classmethod
    def parse_cancel_policy(cls, v: Any) -> Optional[CancelPolicy]:
        return None if v is None else normalize_cancel_policy(v)


class RoomTypeUpsert(RoomTypeBase):
    """随酒店整体编辑时的房型：带 id 为更新，不带为新增"""
    id: Optional[int] = None


class RoomTypeResponse(ApiModel):
    id: int
    type: str
    price: float
    bed_type: Optional[str] = ""
    breakfast_included: bool = False
    cancel_policy: CancelPolicy
    max_guests: int
    inventory: int


# ============== 酒店 Schemas ==============

class GeoPoint(ApiModel):
    lng: float = Field(..., ge=-180, le=180)
    lat: float = Field(..., ge=-90, le=90)


class HotelBase(ApiModel):
    name_cn: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=50)
    star_rating: int = Field(..., ge=3, le=5)
    opening_date: date
    tags: List[str] = []
    amenities: List[str] = []
    banner_image: Optional[str] = None
    images: List[str] = []
    geo: Optional[GeoPoint] = None
    featured: bool = False


class HotelCreate(HotelBase):
    room_types: List[RoomTypeCreate] = Field(..., min_length=1)


class HotelUpdate(ApiModel):
    name_cn: Optional[str] = Field(None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=50)
    star_rating: Optional[int] = Field(None, ge=3, le=5)
    opening_date: Optional[date] = None
    tags: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    banner_image: Optional[str] = None
    images: Optional[List[str]] = None
    geo: Optional[GeoPoint] = None
    featured: Optional[bool] = None
    room_types: Optional[List[RoomTypeUpsert]] = Field(None, min_length=1)


class HotelStatusUpdate(ApiModel):
    status: HotelStatus
    reason: Optional[str] = None


class HotelResponse(ApiModel):
    """商户 / 管理员视角的酒店详情"""
    id: int
    name_cn: str
    name_en: str
    address: str
    city: Optional[str] = None
    star_rating: int
    opening_date: date
    tags: List[str] = []
    amenities: List[str] = []
    banner_image: Optional[str] = None
    images: List[str] = []
    geo: Optional[GeoPoint] = None
    featured: bool
    status: HotelStatus
    reason: Optional[str] = None
    created_by: int
    room_types: List[RoomTypeResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============== 公共目录 Schemas ==============

class PriceRange(ApiModel):
    min: float
    max: float


class HotelMetaResponse(ApiModel):
    cities: List[str]
    tags: List[str]
    star_ratings: List[int]
    price_range: PriceRange


class BannerItem(ApiModel):
    hotel_id: int
    title: str
    subtitle: str = ""
    image_url: str = ""
    star_rating: int
    address: str
    min_price: float


class BannerResponse(ApiModel):
    items: List[BannerItem]


class HotelCard(ApiModel):
    id: int
    name_cn: str
    name_en: str
    city: Optional[str] = None
    address: str
    star_rating: int
    tags: List[str] = []
    banner_image: Optional[str] = None
    images: List[str] = []
    featured: bool
    min_price: float


class Pagination(ApiModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class HotelListResponse(ApiModel):
    items: List[HotelCard]
    pagination: Pagination


class PublicHotelDetail(ApiModel):
    id: int
    name_cn: str
    name_en: str
    address: str
    city: Optional[str] = None
    star_rating: int
    opening_date: date
    tags: List[str] = []
    amenities: List[str] = []
    banner_image: Optional[str] = None
    images: List[str] = []
    geo: Optional[GeoPoint] = None
    featured: bool
    min_price: float
    room_types: List[RoomTypeResponse]


# ============== 订单 Schemas ==============

class OrderCreate(ApiModel):
    hotel_id: int
    room_type_id: int
    check_in_date: date
    check_out_date: date
    room_count: int = 1
    guest_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    remarks: str = ""
    source: OrderSource = OrderSource.MOBILE

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _parse_calendar_date(v)

    @field_validator("guest_name", "phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class OrderCancel(ApiModel):
    phone: str = Field(..., min_length=1)
    reason: Optional[str] = None


class OrderResponse(ApiModel):
    id: int
    order_no: str
    status: OrderStatus
    source: OrderSource
    hotel_id: int
    hotel_name: str
    hotel_city: str = ""
    hotel_address: str = ""
    star_rating: int = 0
    room_type_id: int
    room_type_name: str
    bed_type: str = ""
    check_in_date: date
    check_out_date: date
    nights: int
    room_count: int
    guest_name: str
    phone: str
    remarks: str = ""
    price_snapshot: float
    total_price: float
    cancel_policy: CancelPolicy
    breakfast_included: bool
    max_guests: int
    cancel_reason: str = ""
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
