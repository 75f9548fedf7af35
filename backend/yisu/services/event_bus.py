"""
事件总线 - 内存级发布/订阅模式
实现轻量级事件驱动架构，解耦业务模块
"""
from typing import Callable, Dict, List, Any
from dataclasses import dataclass, field
from datetime import datetime
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件基类"""
    event_type: str
    timestamp: datetime
    data: Dict[str, Any]
    source: str  # 触发来源（服务名）
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class EventBus:
    """
    内存级事件总线（线程安全）

    使用方式：
    1. 订阅事件：event_bus.subscribe("order.created", handler_func)
    2. 发布事件：event_bus.publish(Event(...))
    3. 取消订阅：event_bus.unsubscribe("order.created", handler_func)
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._subscriber_lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """
        订阅事件

        Args:
            event_type: 事件类型（如 "order.created"）
            handler: 处理函数，接收 Event 对象作为参数
        """
        with self._subscriber_lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.debug(f"Handler {handler.__name__} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        """取消订阅"""
        with self._subscriber_lock:
            if event_type in self._subscribers and handler in self._subscribers[event_type]:
                self._subscribers[event_type].remove(handler)

    def publish(self, event: Event) -> None:
        """
        发布事件（同步执行所有处理器）

        处理器异常只记录日志，不影响其他处理器，也不影响发布方
        """
        with self._subscriber_lock:
            handlers = self._subscribers.get(event.event_type, []).copy()

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {handler.__name__} error for {event.event_type}: {e}",
                    exc_info=True
                )


# 全局事件总线实例
event_bus = EventBus()


def build_event(event_type, data, source: str) -> Event:
    """由事件数据对象构造 Event"""
    return Event(
        event_type=getattr(event_type, "value", event_type),
        timestamp=datetime.now(),
        data=data.to_dict(),
        source=source,
    )
