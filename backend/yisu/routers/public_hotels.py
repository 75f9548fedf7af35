"""
公共酒店路由（游客，无需登录）
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from yisu.database import get_db
from yisu.models.schemas import (
    HotelMetaResponse, BannerResponse, HotelListResponse, PublicHotelDetail
)
from yisu.services.catalog_query_service import CatalogQueryService

router = APIRouter(prefix="/public/hotels", tags=["公共酒店"])


@router.get("/meta", response_model=HotelMetaResponse)
def get_meta(db: Session = Depends(get_db)):
    """筛选项：城市、标签、星级、价格区间"""
    return HotelMetaResponse(**CatalogQueryService(db).get_facets())


@router.get("/banners", response_model=BannerResponse)
def get_banners(
    limit: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """首页 Banner"""
    return BannerResponse(items=CatalogQueryService(db).get_featured(limit))


@router.get("", response_model=HotelListResponse)
def list_hotels(
    city: Optional[str] = None,
    keyword: Optional[str] = None,
    star: Optional[int] = None,
    tags: Optional[List[str]] = Query(None),
    page: Optional[int] = None,
    page_size: Optional[int] = Query(None, alias="pageSize"),
    sort: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """酒店列表：筛选、排序、分页"""
    result = CatalogQueryService(db).list_hotels(
        city=city, keyword=keyword, star=star, tags=tags,
        sort=sort, page=page, page_size=page_size,
    )
    return HotelListResponse(**result)


@router.get("/{hotel_id}", response_model=PublicHotelDetail)
def get_hotel_detail(hotel_id: int, db: Session = Depends(get_db)):
    """酒店详情（房型按价格升序）"""
    return PublicHotelDetail(**CatalogQueryService(db).get_detail(hotel_id))
