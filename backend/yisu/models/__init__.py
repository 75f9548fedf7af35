# Persistence Models
from yisu.models.ontology import (
    User, Hotel, HotelTag, RoomType, Order,
    UserRole, HotelStatus, CancelPolicy, OrderStatus, OrderSource
)

__all__ = [
    'User', 'Hotel', 'HotelTag', 'RoomType', 'Order',
    'UserRole', 'HotelStatus', 'CancelPolicy', 'OrderStatus', 'OrderSource'
]
