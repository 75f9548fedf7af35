"""
Order 领域实体 - 订单状态机与取消规则

pending 是唯一初始状态；cancelled / completed 为终态。
核心中只定义取消转换，确认 / 完成属于后台管理操作。
"""
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime
import logging

from yisu.domain.state_machine import StateMachine, StateMachineConfig, StateTransition
from yisu.exceptions import AuthorizationError, ConflictError
from yisu.models.ontology import CancelPolicy, OrderStatus

if TYPE_CHECKING:
    from yisu.models.ontology import Order

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "user cancelled"

ORDER_STATE_MACHINE = StateMachineConfig(
    name="Order",
    states=[s.value for s in OrderStatus],
    transitions=[
        StateTransition(
            from_state=OrderStatus.PENDING.value,
            to_state=OrderStatus.CANCELLED.value,
            trigger="cancel",
        ),
        StateTransition(
            from_state=OrderStatus.CONFIRMED.value,
            to_state=OrderStatus.CANCELLED.value,
            trigger="cancel",
        ),
    ],
    initial_state=OrderStatus.PENDING.value,
    terminal_states=[OrderStatus.CANCELLED.value, OrderStatus.COMPLETED.value],
)


def cancellable_statuses() -> List[OrderStatus]:
    """可以执行取消的订单状态"""
    return [
        OrderStatus(t.from_state)
        for t in ORDER_STATE_MACHINE.transitions
        if t.trigger == "cancel"
    ]


class OrderEntity:
    """
    Order 领域实体

    封装 ORM 模型，取消政策只读取下单时的快照，不读取实时房型。
    """

    def __init__(self, orm_model: "Order"):
        self._orm_model = orm_model
        self._state_machine = StateMachine(ORDER_STATE_MACHINE, current_state=self.status.value)

    @property
    def id(self) -> int:
        return self._orm_model.id

    @property
    def status(self) -> OrderStatus:
        return OrderStatus(self._orm_model.status)

    @property
    def cancel_policy(self) -> CancelPolicy:
        return CancelPolicy(self._orm_model.cancel_policy_snapshot)

    def is_refundable(self) -> bool:
        return self.cancel_policy != CancelPolicy.NON_REFUNDABLE

    def ensure_cancellable(self, phone: str) -> None:
        """
        校验取消前置条件，依次为：手机号、终态、取消政策快照

        Raises:
            AuthorizationError: 手机号与下单手机号不一致
            ConflictError: 已取消 / 已完成 / 不可取消
        """
        if (phone or "").strip() != self._orm_model.phone:
            raise AuthorizationError("Phone verification failed")

        if self.status == OrderStatus.CANCELLED:
            raise ConflictError("Order already cancelled")

        if self.status == OrderStatus.COMPLETED:
            raise ConflictError("Completed order cannot be cancelled")

        if not self.is_refundable():
            raise ConflictError("This order is non-refundable and cannot be cancelled")

        if not self._state_machine.can_transition_to(OrderStatus.CANCELLED.value, "cancel"):
            raise ConflictError(f"Order in status {self.status.value} cannot be cancelled")

    def cancel(self, reason: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        执行取消转换

        Returns:
            需要持久化的字段值；由调用方以条件更新方式写入
        """
        if not self._state_machine.transition_to(OrderStatus.CANCELLED.value, "cancel"):
            raise ConflictError(f"Order in status {self.status.value} cannot be cancelled")
        return {
            "status": OrderStatus.CANCELLED,
            "cancel_reason": (reason or "").strip() or DEFAULT_CANCEL_REASON,
            "cancelled_at": now or datetime.now(),
        }
