"""
事件总线单元测试
"""
import pytest
from datetime import datetime
from decimal import Decimal

from yisu.models.events import EventType, OrderCreatedData
from yisu.services import event_handlers
from yisu.services.event_bus import EventBus, Event, build_event
from yisu.services.event_handlers import register_event_handlers


class TestEventBus:
    """事件总线测试"""

    @pytest.fixture
    def event_bus(self):
        return EventBus()

    @pytest.fixture
    def sample_event(self):
        return Event(
            event_type="test.event",
            timestamp=datetime.now(),
            data={"key": "value"},
            source="test"
        )

    def test_subscribe_and_publish(self, event_bus, sample_event):
        received = []
        event_bus.subscribe("test.event", received.append)
        event_bus.publish(sample_event)
        assert received == [sample_event]

    def test_subscribe_is_idempotent(self, event_bus, sample_event):
        received = []
        event_bus.subscribe("test.event", received.append)
        event_bus.subscribe("test.event", received.append)
        event_bus.publish(sample_event)
        assert len(received) == 1

    def test_unsubscribe(self, event_bus, sample_event):
        received = []
        event_bus.subscribe("test.event", received.append)
        event_bus.unsubscribe("test.event", received.append)
        event_bus.publish(sample_event)
        assert received == []

    def test_handler_exception_isolation(self, event_bus, sample_event):
        """一个处理器抛异常不影响其他处理器"""
        received = []

        def failing_handler(event):
            raise RuntimeError("boom")

        event_bus.subscribe("test.event", failing_handler)
        event_bus.subscribe("test.event", received.append)
        event_bus.publish(sample_event)
        assert len(received) == 1

    def test_build_event_serializes_data(self):
        event = build_event(
            EventType.ORDER_CREATED,
            OrderCreatedData(order_id=1, order_no="TT1", total_price=Decimal("798.00")),
            source="booking_service",
        )
        assert event.event_type == "order.created"
        assert event.source == "booking_service"
        assert event.data["total_price"] == "798.00"
        assert isinstance(event.data["timestamp"], str)
        assert event.event_id

    def test_register_audit_handler(self, caplog, monkeypatch):
        bus = EventBus()
        monkeypatch.setattr(event_handlers, "event_bus", bus)
        register_event_handlers()
        with caplog.at_level("INFO", logger="yisu.audit"):
            bus.publish(Event("order.cancelled", datetime.now(), {"order_no": "TT1"}, "order_service"))
        assert "order.cancelled" in caplog.text
