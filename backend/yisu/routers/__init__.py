# API Routers
from yisu.routers import auth, hotels, public_hotels, public_orders

__all__ = ['auth', 'hotels', 'public_hotels', 'public_orders']
