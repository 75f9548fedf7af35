# Domain layer
from yisu.domain.hotel import PublicationWorkflow
from yisu.domain.order import OrderEntity, cancellable_statuses
from yisu.domain.rules import calc_nights, calc_total_price, normalize_cancel_policy

__all__ = [
    'PublicationWorkflow', 'OrderEntity', 'cancellable_statuses',
    'calc_nights', 'calc_total_price', 'normalize_cancel_policy'
]
