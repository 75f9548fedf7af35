"""
公共订单路由（游客下单 / 查询 / 取消，凭手机号校验）
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from yisu.database import get_db
from yisu.models.schemas import OrderCreate, OrderCancel, OrderResponse
from yisu.services.booking_service import BookingService
from yisu.services.order_service import OrderService, order_to_dict

router = APIRouter(prefix="/public/orders", tags=["公共订单"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(data: OrderCreate, db: Session = Depends(get_db)):
    """下单"""
    order = BookingService(db).create_order(data)
    return OrderResponse(**order_to_dict(order))


@router.get("/query", response_model=List[OrderResponse])
def query_orders(
    phone: str = Query(..., min_length=1),
    limit: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """按手机号查询订单"""
    orders = OrderService(db).query_by_phone(phone, limit)
    return [OrderResponse(**order_to_dict(o)) for o in orders]


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, data: OrderCancel, db: Session = Depends(get_db)):
    """取消订单"""
    order = OrderService(db).cancel_order(order_id, data.phone, data.reason)
    return OrderResponse(**order_to_dict(order))
