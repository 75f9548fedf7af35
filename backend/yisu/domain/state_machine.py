"""
状态机引擎 - 校验状态转换并记录转换历史
"""
from typing import Dict, List, Any, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


@dataclass
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
        condition: 可选的转换条件
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        """检查转换是否被允许"""
        if self.condition is None:
            return True
        return bool(self.condition(context))


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
        terminal_states: 终态（不允许任何转出）
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str
    terminal_states: List[str] = field(default_factory=list)


@dataclass
class TransitionRecord:
    """一次已执行的状态转换"""

    previous_state: str
    current_state: str
    trigger: str
    timestamp: datetime


class StateMachine:
    """
    状态机

    Example:
        >>> machine = StateMachine(order_config, current_state="pending")
        >>> if machine.can_transition_to("cancelled", "cancel"):
        ...     machine.transition_to("cancelled", "cancel")
    """

    def __init__(self, config: StateMachineConfig, current_state: Optional[str] = None):
        self._config = config
        self._current_state = current_state or config.initial_state
        if self._current_state not in config.states:
            raise ValueError(f"Unknown {config.name} state: {self._current_state}")
        self._history: List[TransitionRecord] = []
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # 构建转换映射: from_state -> trigger -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        """获取当前状态"""
        return self._current_state

    @property
    def config(self) -> StateMachineConfig:
        return self._config

    def is_terminal(self) -> bool:
        """当前是否处于终态"""
        return self._current_state in self._config.terminal_states

    def allowed_triggers(self) -> List[str]:
        """当前状态下可用的触发动作"""
        return list(self._transition_map.get(self._current_state, {}).keys())

    def can_transition_to(self, target_state: str, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        检查是否可以转换到目标状态

        Args:
            target_state: 目标状态
            trigger: 触发动作
            context: 可选的上下文数据

        Returns:
            True 如果转换被允许
        """
        if target_state not in self._config.states or self.is_terminal():
            return False

        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        if transition is None or transition.to_state != target_state:
            return False

        return transition.is_allowed(context or {})

    def transition_to(self, target_state: str, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        执行状态转换

        Returns:
            True 如果转换成功
        """
        if not self.can_transition_to(target_state, trigger, context):
            logger.warning(
                f"Invalid {self._config.name} transition: "
                f"{self._current_state} -> {target_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = target_state
        self._history.append(TransitionRecord(
            previous_state=previous_state,
            current_state=target_state,
            trigger=trigger,
            timestamp=datetime.now(),
        ))

        logger.debug(f"{self._config.name} transition: {previous_state} -> {target_state} (trigger: {trigger})")
        return True

    def get_history(self) -> List[TransitionRecord]:
        """获取转换历史"""
        return list(self._history)
