"""
事件处理器 - 审计日志
"""
import logging

from yisu.models.events import EventType
from yisu.services.event_bus import Event, event_bus

logger = logging.getLogger("yisu.audit")


def audit_log_handler(event: Event) -> None:
    """将领域事件写入审计日志"""
    logger.info(f"{event.event_type} from {event.source}: {event.data}")


def register_event_handlers() -> None:
    """为所有事件类型注册审计处理器（应用启动时调用）"""
    for event_type in EventType:
        event_bus.subscribe(event_type.value, audit_log_handler)
