"""
预订规则单元测试
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from yisu.domain.rules import calc_nights, calc_total_price, normalize_cancel_policy
from yisu.models.ontology import CancelPolicy


class TestCalcNights:

    def test_two_nights(self):
        assert calc_nights(date(2024, 1, 1), date(2024, 1, 3)) == 2

    def test_same_day_is_zero(self):
        assert calc_nights(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_checkout_before_checkin_is_negative(self):
        assert calc_nights(date(2024, 1, 3), date(2024, 1, 1)) < 0

    def test_time_of_day_ignored(self):
        """入住晚上、离店早上仍按自然日计算"""
        assert calc_nights(datetime(2024, 1, 1, 23, 0), datetime(2024, 1, 2, 1, 0)) == 1
        assert calc_nights(datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 22, 0)) == 0

    def test_across_month_boundary(self):
        assert calc_nights(date(2024, 2, 28), date(2024, 3, 1)) == 2


class TestCalcTotalPrice:

    def test_unit_times_nights_times_rooms(self):
        assert calc_total_price(Decimal("399"), 2, 3) == Decimal("2394")

    def test_keeps_cents(self):
        assert calc_total_price(Decimal("199.50"), 3, 1) == Decimal("598.50")


class TestNormalizeCancelPolicy:

    @pytest.mark.parametrize("value", [None, "", "free_cancellation", "free_cancel", "FREE", "免费取消"])
    def test_free_aliases(self, value):
        assert normalize_cancel_policy(value) == CancelPolicy.FREE_CANCELLATION

    @pytest.mark.parametrize("value", ["non_refundable", "no_refund", " Non_Refundable ", "不可取消"])
    def test_non_refundable_aliases(self, value):
        assert normalize_cancel_policy(value) == CancelPolicy.NON_REFUNDABLE

    def test_enum_passthrough(self):
        assert normalize_cancel_policy(CancelPolicy.NON_REFUNDABLE) == CancelPolicy.NON_REFUNDABLE

    def test_unknown_rejected(self):
        with pytest.raises(ValueError):
            normalize_cancel_policy("partial_refund")
