"""
公共目录查询服务
只暴露 status=approved 的酒店：筛选项聚合、首页推荐、分页检索、详情

酒店价格 = 房型最低价；无房型时为 0
"""
from decimal import Decimal
from math import ceil
from typing import List, Optional, Tuple
import logging
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from yisu.config import settings
from yisu.exceptions import NotFoundError, ValidationError
from yisu.models.ontology import Hotel, HotelTag, RoomType, HotelStatus
from yisu.services.hotel_service import room_type_to_dict, geo_to_dict

logger = logging.getLogger(__name__)

STAR_RATINGS = [3, 4, 5]

SORT_RECOMMENDED = "recommended"
SORT_PRICE_ASC = "priceAsc"
SORT_PRICE_DESC = "priceDesc"
SORT_MODES = (SORT_RECOMMENDED, SORT_PRICE_ASC, SORT_PRICE_DESC)


def clamp_pagination(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
    """page >= 1；page_size 限制在 [1, MAX_PAGE_SIZE]"""
    if page is None or page < 1:
        page = 1
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    page_size = max(1, min(page_size, settings.MAX_PAGE_SIZE))
    return page, page_size


def parse_tags(raw: Optional[List[str]]) -> List[str]:
    """支持重复参数与逗号分隔两种写法"""
    tags = []
    for item in raw or []:
        tags.extend(t.strip() for t in item.split(","))
    return list(dict.fromkeys(t for t in tags if t))


class CatalogQueryService:
    """公共目录查询服务（只读）"""

    def __init__(self, db: Session):
        self.db = db

    def _approved(self):
        return self.db.query(Hotel).filter(Hotel.status == HotelStatus.APPROVED)

    def _min_price_subquery(self):
        return (
            self.db.query(
                RoomType.hotel_id.label("hotel_id"),
                func.min(RoomType.price).label("min_price"),
            )
            .group_by(RoomType.hotel_id)
            .subquery()
        )

    # ============== 筛选项 ==============

    def get_facets(self) -> dict:
        """城市、标签去重，星级固定，价格区间取所有房型价格的最小/最大值"""
        cities = [
            row[0] for row in
            self.db.query(Hotel.city)
            .filter(Hotel.status == HotelStatus.APPROVED, Hotel.city.isnot(None), Hotel.city != "")
            .distinct()
            .order_by(Hotel.city)
            .all()
        ]
        tags = [
            row[0] for row in
            self.db.query(HotelTag.tag)
            .join(Hotel, Hotel.id == HotelTag.hotel_id)
            .filter(Hotel.status == HotelStatus.APPROVED, HotelTag.tag != "")
            .distinct()
            .order_by(HotelTag.tag)
            .all()
        ]
        low, high = (
            self.db.query(func.min(RoomType.price), func.max(RoomType.price))
            .join(Hotel, Hotel.id == RoomType.hotel_id)
            .filter(Hotel.status == HotelStatus.APPROVED)
            .one()
        )
        if low is None or high is None:
            low, high = settings.DEFAULT_PRICE_MIN, settings.DEFAULT_PRICE_MAX

        return {
            "cities": cities,
            "tags": tags,
            "star_ratings": list(STAR_RATINGS),
            "price_range": {"min": low, "max": high},
        }

    # ============== 首页推荐 ==============

    def get_featured(self, limit: Optional[int] = None) -> List[dict]:
        """featured 酒店卡片，数量限制在 [1, BANNER_MAX_LIMIT]"""
        if limit is None:
            limit = settings.BANNER_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.BANNER_MAX_LIMIT))

        hotels = (
            self._approved()
            .filter(Hotel.featured.is_(True))
            .order_by(Hotel.id)
            .limit(limit)
            .all()
        )
        return [self._banner_card(h) for h in hotels]

    @staticmethod
    def _banner_card(hotel: Hotel) -> dict:
        images = hotel.images or []
        return {
            "hotel_id": hotel.id,
            "title": hotel.name_cn,
            "subtitle": hotel.name_en or "",
            "image_url": hotel.banner_image or (images[0] if images else ""),
            "star_rating": hotel.star_rating,
            "address": hotel.address,
            "min_price": hotel.min_price,
        }

    # ============== 检索 ==============

    def list_hotels(
        self,
        city: Optional[str] = None,
        keyword: Optional[str] = None,
        star: Optional[int] = None,
        tags: Optional[List[str]] = None,
        sort: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> dict:
        """
        分页检索已发布酒店

        - city 精确匹配；keyword 对中英文名/地址/城市做不区分大小写的子串匹配
        - tags 为“与”语义：所有标签都必须存在
        - recommended: featured 优先 -> 星级降序 -> 最低价升序
        """
        sort = sort or SORT_RECOMMENDED
        if sort not in SORT_MODES:
            raise ValidationError(f"sort must be one of {', '.join(SORT_MODES)}")
        page, page_size = clamp_pagination(page, page_size)

        min_price = self._min_price_subquery()
        price_col = func.coalesce(min_price.c.min_price, 0)
        query = (
            self.db.query(Hotel, price_col.label("min_price"))
            .outerjoin(min_price, min_price.c.hotel_id == Hotel.id)
            .filter(Hotel.status == HotelStatus.APPROVED)
        )

        if city and city.strip():
            query = query.filter(Hotel.city == city.strip())
        if keyword and keyword.strip():
            kw = keyword.strip().lower()
            query = query.filter(or_(
                func.lower(Hotel.name_cn).contains(kw, autoescape=True),
                func.lower(Hotel.name_en).contains(kw, autoescape=True),
                func.lower(Hotel.address).contains(kw, autoescape=True),
                func.lower(Hotel.city).contains(kw, autoescape=True),
            ))
        if star is not None:
            query = query.filter(Hotel.star_rating == star)
        for tag in parse_tags(tags):
            query = query.filter(Hotel.id.in_(
                select(HotelTag.hotel_id).where(HotelTag.tag == tag)
            ))

        total = query.count()

        if sort == SORT_PRICE_ASC:
            query = query.order_by(price_col.asc(), Hotel.id.asc())
        elif sort == SORT_PRICE_DESC:
            query = query.order_by(price_col.desc(), Hotel.id.asc())
        else:
            query = query.order_by(
                Hotel.featured.desc(), Hotel.star_rating.desc(), price_col.asc(), Hotel.id.asc()
            )

        rows = query.offset((page - 1) * page_size).limit(page_size).all()
        return {
            "items": [self._card(hotel, price) for hotel, price in rows],
            "pagination": {
                "page": page,
                "page_size": page_size,
                "total": total,
                "total_pages": ceil(total / page_size) if total else 0,
            },
        }

    @staticmethod
    def _card(hotel: Hotel, min_price) -> dict:
        return {
            "id": hotel.id,
            "name_cn": hotel.name_cn,
            "name_en": hotel.name_en,
            "city": hotel.city,
            "address": hotel.address,
            "star_rating": hotel.star_rating,
            "tags": hotel.tags,
            "banner_image": hotel.banner_image,
            "images": hotel.images or [],
            "featured": bool(hotel.featured),
            "min_price": Decimal(min_price or 0),
        }

    # ============== 详情 ==============

    def get_detail(self, hotel_id: int) -> dict:
        """已发布酒店详情，房型按价格升序"""
        hotel = self._approved().filter(Hotel.id == hotel_id).first()
        if not hotel:
            raise NotFoundError("Hotel not found")

        room_types = sorted(hotel.room_types, key=lambda rt: (rt.price, rt.id))
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
            "min_price": hotel.min_price,
            "room_types": [room_type_to_dict(rt) for rt in room_types],
        }
