"""
订单号分配单元测试
"""
import random
import re
from datetime import datetime

import pytest

from yisu.exceptions import ConflictError
from yisu.services.order_no import OrderNoAllocator

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0)


def _allocator(taken=(), **kwargs):
    taken = set(taken)
    return OrderNoAllocator(lambda no: no in taken, now=lambda: FIXED_NOW, **kwargs)


class TestOrderNoAllocator:

    def test_format(self):
        order_no = _allocator().allocate()
        assert re.fullmatch(r"TT20240101120000\d{4}", order_no)
        assert 1000 <= int(order_no[-4:]) <= 9999

    def test_custom_prefix(self):
        assert _allocator(prefix="YS").allocate().startswith("YS20240101120000")

    def test_retries_on_collision(self):
        rng = random.Random(7)
        first = f"TT20240101120000{random.Random(7).randint(1000, 9999)}"
        order_no = _allocator(taken={first}, rng=rng).allocate()
        assert order_no != first
        assert re.fullmatch(r"TT20240101120000\d{4}", order_no)

    def test_fallback_after_max_attempts(self):
        """所有 4 位后缀都被占用时退化为 8 位十六进制后缀"""
        taken = {f"TT20240101120000{n}" for n in range(1000, 10000)}
        order_no = _allocator(taken=taken, max_attempts=3).allocate()
        assert order_no not in taken
        assert re.fullmatch(r"TT20240101120000[0-9A-F]{8}", order_no)

    def test_all_candidates_taken_raises_conflict(self):
        """随机后缀与回退后缀都被占用时有限次后报冲突"""
        calls = []

        def exists(order_no):
            calls.append(order_no)
            return True

        allocator = OrderNoAllocator(exists, now=lambda: FIXED_NOW, max_attempts=5)
        with pytest.raises(ConflictError, match="Unable to allocate a unique order number"):
            allocator.allocate()
        assert len(calls) == 6

    def test_zero_attempts_goes_straight_to_fallback(self):
        calls = []

        def exists(order_no):
            calls.append(order_no)
            return False

        order_no = OrderNoAllocator(exists, now=lambda: FIXED_NOW, max_attempts=0).allocate()
        assert calls == [order_no]
        assert re.fullmatch(r"TT20240101120000[0-9A-F]{8}", order_no)

    def test_existence_check_called_per_attempt(self):
        calls = []

        def exists(order_no):
            calls.append(order_no)
            return len(calls) < 3

        order_no = OrderNoAllocator(exists, now=lambda: FIXED_NOW).allocate()
        assert len(calls) == 3
        assert order_no == calls[-1]

    def test_many_allocations_distinct(self):
        issued = set()
        allocator = OrderNoAllocator(lambda no: no in issued, now=lambda: FIXED_NOW)
        for _ in range(200):
            issued.add(allocator.allocate())
        assert len(issued) == 200

    def test_for_session_sees_existing_orders(self, db_session, approved_hotel):
        from yisu.models.schemas import OrderCreate
        from yisu.services.booking_service import BookingService
        from datetime import date

        order = BookingService(db_session, event_publisher=lambda e: None).create_order(OrderCreate(
            hotel_id=approved_hotel.id,
            room_type_id=approved_hotel.room_types[0].id,
            check_in_date=date(2024, 1, 1),
            check_out_date=date(2024, 1, 2),
            guest_name="张三",
            phone="13800138000",
        ))
        allocator = OrderNoAllocator.for_session(db_session)
        assert allocator._exists(order.order_no) is True
        assert allocator._exists("TT000") is False
