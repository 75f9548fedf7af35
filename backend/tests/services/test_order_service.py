"""
订单服务单元测试 - 取消与查询
"""
import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from yisu.config import settings
from yisu.domain.order import DEFAULT_CANCEL_REASON
from yisu.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from yisu.models.ontology import Order, OrderStatus, CancelPolicy
from yisu.models.schemas import OrderCreate
from yisu.services.booking_service import BookingService
from yisu.services.order_service import OrderService, order_to_dict

PHONE = "13800138000"


@pytest.fixture
def service(db_session, published_events):
    return OrderService(db_session, event_publisher=published_events.append)


@pytest.fixture
def book(db_session, approved_hotel):
    """下单快捷方法"""
    booking = BookingService(db_session, event_publisher=lambda e: None)

    def _book(room_type, phone=PHONE, room_count=1):
        return booking.create_order(OrderCreate(
            hotel_id=approved_hotel.id,
            room_type_id=room_type.id,
            check_in_date=date(2024, 1, 1),
            check_out_date=date(2024, 1, 3),
            room_count=room_count,
            guest_name="张三",
            phone=phone,
        ))
    return _book


class TestCancelOrder:

    def test_cancel_success(self, service, book, standard_room):
        order = book(standard_room)
        cancelled = service.cancel_order(order.id, PHONE, "行程变更")

        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancel_reason == "行程变更"
        assert isinstance(cancelled.cancelled_at, datetime)

    def test_default_reason(self, service, book, standard_room):
        order = book(standard_room)
        assert service.cancel_order(order.id, PHONE).cancel_reason == DEFAULT_CANCEL_REASON

    def test_not_found(self, service):
        with pytest.raises(NotFoundError, match="Order not found"):
            service.cancel_order(9999, PHONE)

    def test_phone_mismatch(self, service, book, standard_room):
        order = book(standard_room)
        with pytest.raises(AuthorizationError):
            service.cancel_order(order.id, "13900000000")

    def test_cancel_twice(self, service, book, standard_room):
        order = book(standard_room)
        service.cancel_order(order.id, PHONE)
        with pytest.raises(ConflictError, match="Order already cancelled"):
            service.cancel_order(order.id, PHONE)

    def test_completed_cannot_cancel(self, service, db_session, book, standard_room):
        order = book(standard_room)
        order.status = OrderStatus.COMPLETED
        db_session.commit()
        with pytest.raises(ConflictError, match="Completed order cannot be cancelled"):
            service.cancel_order(order.id, PHONE)

    def test_confirmed_can_cancel(self, service, db_session, book, standard_room):
        order = book(standard_room)
        order.status = OrderStatus.CONFIRMED
        db_session.commit()
        assert service.cancel_order(order.id, PHONE).status == OrderStatus.CANCELLED

    def test_non_refundable_snapshot(self, service, book, deluxe_room):
        order = book(deluxe_room)
        with pytest.raises(ConflictError, match="This order is non-refundable and cannot be cancelled"):
            service.cancel_order(order.id, PHONE)

    def test_live_policy_edit_does_not_unlock(self, service, db_session, book, deluxe_room):
        """房型改为免费取消后，已有不可取消订单仍不可取消"""
        order = book(deluxe_room)
        deluxe_room.cancel_policy = CancelPolicy.FREE_CANCELLATION
        db_session.commit()
        with pytest.raises(ConflictError, match="non-refundable"):
            service.cancel_order(order.id, PHONE)

    def test_live_policy_edit_does_not_block(self, service, db_session, book, standard_room):
        order = book(standard_room)
        standard_room.cancel_policy = CancelPolicy.NON_REFUNDABLE
        db_session.commit()
        assert service.cancel_order(order.id, PHONE).status == OrderStatus.CANCELLED

    def test_restores_inventory(self, service, db_session, book, standard_room):
        order = book(standard_room, room_count=3)
        db_session.refresh(standard_room)
        assert standard_room.inventory == 7

        service.cancel_order(order.id, PHONE)
        db_session.refresh(standard_room)
        assert standard_room.inventory == 10

    def test_room_type_deleted_skips_restore(self, service, db_session, book, approved_hotel, standard_room,
                                             published_events):
        order = book(standard_room)
        approved_hotel.room_types.remove(standard_room)
        db_session.commit()

        cancelled = service.cancel_order(order.id, PHONE)
        assert cancelled.status == OrderStatus.CANCELLED
        assert published_events[-1].data["restored_inventory"] == 0

    def test_advisory_mode_does_not_restore(self, service, db_session, book, standard_room, monkeypatch):
        order = book(standard_room)
        monkeypatch.setattr(settings, "INVENTORY_AUTHORITATIVE", False)
        service.cancel_order(order.id, PHONE)
        db_session.refresh(standard_room)
        assert standard_room.inventory == 9

    def test_stale_read_loses_race(self, service, db_session, book, standard_room):
        """读取订单后被并发取消，条件更新失败"""
        order = book(standard_room)
        db_session.query(Order).filter(Order.id == order.id).update(
            {"status": OrderStatus.CANCELLED}, synchronize_session=False
        )
        db_session.flush()

        with pytest.raises(ConflictError, match="Order already cancelled"):
            service.cancel_order(order.id, PHONE)

    def test_publishes_event(self, service, book, standard_room, published_events):
        order = book(standard_room, room_count=2)
        service.cancel_order(order.id, PHONE, "不想去了")

        event = published_events[-1]
        assert event.event_type == "order.cancelled"
        assert event.data["order_no"] == order.order_no
        assert event.data["reason"] == "不想去了"
        assert event.data["restored_inventory"] == 2


class TestQueryByPhone:

    def test_newest_first(self, service, db_session, book, standard_room):
        first = book(standard_room)
        second = book(standard_room)
        first.created_at = datetime.now() - timedelta(days=1)
        db_session.commit()

        orders = service.query_by_phone(PHONE)
        assert [o.id for o in orders] == [second.id, first.id]

    def test_filters_by_phone(self, service, book, standard_room):
        book(standard_room, phone="13900000000")
        mine = book(standard_room)
        assert [o.id for o in service.query_by_phone(f" {PHONE} ")] == [mine.id]

    def test_limit(self, service, book, standard_room):
        for _ in range(3):
            book(standard_room)
        assert len(service.query_by_phone(PHONE, limit=2)) == 2

    def test_limit_capped(self, service, book, standard_room, monkeypatch):
        monkeypatch.setattr(settings, "ORDER_QUERY_LIMIT", 2)
        for _ in range(3):
            book(standard_room)
        assert len(service.query_by_phone(PHONE, limit=100)) == 2

    def test_blank_phone(self, service):
        with pytest.raises(ValidationError):
            service.query_by_phone("  ")

    def test_unknown_phone_empty(self, service):
        assert service.query_by_phone("10000000000") == []


class TestOrderToDict:

    def test_projection_uses_snapshots(self, db_session, book, standard_room):
        order = book(standard_room, room_count=2)
        standard_room.type = "新名字"
        db_session.commit()
        db_session.refresh(order)

        data = order_to_dict(order)
        assert data["room_type_name"] == "标准间"
        assert data["hotel_name"] == "易宿大酒店"
        assert data["total_price"] == Decimal("1596")
        assert data["cancel_reason"] == ""
        assert data["cancelled_at"] is None
