# Business Services
from yisu.services.user_service import UserService
from yisu.services.hotel_service import HotelService
from yisu.services.catalog_query_service import CatalogQueryService
from yisu.services.booking_service import BookingService
from yisu.services.order_service import OrderService
from yisu.services.order_no import OrderNoAllocator

__all__ = [
    'UserService', 'HotelService', 'CatalogQueryService',
    'BookingService', 'OrderService', 'OrderNoAllocator'
]
