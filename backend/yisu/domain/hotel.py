"""
酒店发布流程 - 发布状态机

- 商户创建 -> pending
- 商户编辑任何内容（含房型） -> pending，清空驳回原因
- 管理员可直接设置任意状态；驳回必须填写原因，其他状态清空原因
"""
from typing import Optional, TYPE_CHECKING
import logging

from yisu.domain.state_machine import StateMachine, StateMachineConfig, StateTransition
from yisu.exceptions import ValidationError
from yisu.models.ontology import HotelStatus

if TYPE_CHECKING:
    from yisu.models.ontology import Hotel

logger = logging.getLogger(__name__)

_STATES = [s.value for s in HotelStatus]


def _has_reason(context) -> bool:
    return bool((context.get("reason") or "").strip())


def _review_transitions():
    transitions = []
    for source in _STATES:
        transitions.append(StateTransition(source, HotelStatus.PENDING.value, "edit"))
        for target in _STATES:
            trigger = f"review:{target}"
            condition = _has_reason if target == HotelStatus.REJECTED.value else None
            transitions.append(StateTransition(source, target, trigger, condition))
    return transitions


HOTEL_STATE_MACHINE = StateMachineConfig(
    name="Hotel",
    states=_STATES,
    transitions=_review_transitions(),
    initial_state=HotelStatus.PENDING.value,
)


class PublicationWorkflow:
    """发布流程：唯一允许修改酒店发布状态的入口"""

    def __init__(self, hotel: "Hotel"):
        self._hotel = hotel
        current = HotelStatus(hotel.status).value if hotel.status else HotelStatus.PENDING.value
        self._state_machine = StateMachine(HOTEL_STATE_MACHINE, current_state=current)

    @property
    def status(self) -> HotelStatus:
        return HotelStatus(self._state_machine.current_state)

    def submit_edit(self) -> None:
        """商户编辑后重新进入待审核"""
        self._state_machine.transition_to(HotelStatus.PENDING.value, "edit")
        self._hotel.status = HotelStatus.PENDING
        self._hotel.reason = None

    def review(self, status: HotelStatus, reason: Optional[str] = None) -> HotelStatus:
        """
        管理员设置发布状态

        Returns:
            变更前的状态
        """
        previous = self.status
        status = HotelStatus(status)
        if not self._state_machine.transition_to(status.value, f"review:{status.value}", {"reason": reason}):
            raise ValidationError("Reason is required for rejected status")

        self._hotel.status = status
        self._hotel.reason = reason.strip() if status == HotelStatus.REJECTED else None
        return previous
