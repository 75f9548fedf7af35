"""
酒店管理路由（商户 / 管理员）
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from yisu.database import get_db
from yisu.models.ontology import User
from yisu.models.schemas import (
    HotelCreate, HotelUpdate, HotelStatusUpdate, HotelResponse,
    RoomTypeCreate, RoomTypeUpdate, RoomTypeResponse
)
from yisu.services.hotel_service import HotelService, hotel_to_dict, room_type_to_dict
from yisu.security.auth import require_admin, require_merchant, require_any_role

router = APIRouter(prefix="/hotels", tags=["酒店管理"])


@router.get("", response_model=List[HotelResponse])
def list_hotels(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """获取酒店列表（管理员全部，商户仅自己的）"""
    hotels = HotelService(db).list_hotels(current_user)
    return [HotelResponse(**hotel_to_dict(h)) for h in hotels]


@router.post("", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
def create_hotel(
    data: HotelCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_merchant)
):
    """商户录入酒店，提交后待审核"""
    hotel = HotelService(db).create_hotel(data, current_user)
    return HotelResponse(**hotel_to_dict(hotel))


@router.get("/{hotel_id}", response_model=HotelResponse)
def get_hotel(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """获取酒店详情"""
    hotel = HotelService(db).get_managed_hotel(hotel_id, current_user)
    return HotelResponse(**hotel_to_dict(hotel))


@router.put("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: int,
    data: HotelUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """编辑酒店（商户编辑后重新进入待审核）"""
    hotel = HotelService(db).update_hotel(hotel_id, data, current_user)
    return HotelResponse(**hotel_to_dict(hotel))


@router.put("/{hotel_id}/status", response_model=HotelResponse)
def update_hotel_status(
    hotel_id: int,
    data: HotelStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """审核：通过 / 驳回 / 下线"""
    hotel = HotelService(db).update_status(hotel_id, data, current_user)
    return HotelResponse(**hotel_to_dict(hotel))


@router.delete("/{hotel_id}")
def delete_hotel(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """删除酒店"""
    HotelService(db).delete_hotel(hotel_id, current_user)
    return {"message": "Hotel deleted"}


# ============== 房型 ==============

@router.post("/{hotel_id}/room-types", response_model=RoomTypeResponse,
             status_code=status.HTTP_201_CREATED)
def add_room_type(
    hotel_id: int,
    data: RoomTypeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """新增房型"""
    room_type = HotelService(db).add_room_type(hotel_id, data, current_user)
    return RoomTypeResponse(**room_type_to_dict(room_type))


@router.put("/{hotel_id}/room-types/{room_type_id}", response_model=RoomTypeResponse)
def update_room_type(
    hotel_id: int,
    room_type_id: int,
    data: RoomTypeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """修改房型"""
    room_type = HotelService(db).update_room_type(hotel_id, room_type_id, data, current_user)
    return RoomTypeResponse(**room_type_to_dict(room_type))


@router.delete("/{hotel_id}/room-types/{room_type_id}")
def delete_room_type(
    hotel_id: int,
    room_type_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """删除房型（至少保留一个）"""
    HotelService(db).delete_room_type(hotel_id, room_type_id, current_user)
    return {"message": "Room type deleted"}
