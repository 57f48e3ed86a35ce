"""
Unit tests for calendar period presets.
"""
from datetime import date

import pytest

from worklog.utils.periods import period_range, bucket_label, month_label, month_range


class TestPeriodRange:

    @pytest.mark.parametrize(
        "period,today,expected",
        [
            ("weekly", date(2024, 1, 10), (date(2024, 1, 7), date(2024, 1, 13))),
            # Sunday starts its own week
            ("weekly", date(2024, 1, 7), (date(2024, 1, 7), date(2024, 1, 13))),
            ("monthly", date(2024, 2, 10), (date(2024, 2, 1), date(2024, 2, 29))),
            ("this-month", date(2023, 2, 10), (date(2023, 2, 1), date(2023, 2, 28))),
            ("last-month", date(2024, 1, 15), (date(2023, 12, 1), date(2023, 12, 31))),
            ("quarterly", date(2024, 5, 20), (date(2024, 4, 1), date(2024, 6, 30))),
            ("yearly", date(2024, 5, 20), (date(2024, 1, 1), date(2024, 12, 31))),
        ],
    )
    def test_presets(self, period, today, expected):
        assert period_range(period, today=today) == expected

    def test_unknown_period_falls_back_to_month(self):
        assert period_range("fortnightly", today=date(2024, 3, 5)) == month_range(2024, 3)

    def test_custom_range_wins(self):
        start, end = date(2024, 1, 5), date(2024, 1, 9)
        assert period_range("yearly", start, end, today=date(2024, 6, 1)) == (start, end)


class TestLabels:

    @pytest.mark.parametrize("day,label", [(1, "Week 1"), (7, "Week 1"), (8, "Week 2"), (29, "Week 5")])
    def test_weekly_bucket(self, day, label):
        assert bucket_label(date(2024, 1, day), "weekly") == label

    def test_monthly_bucket(self):
        assert bucket_label(date(2024, 3, 15), "monthly") == "Mar 2024"

    def test_month_label(self):
        assert month_label(date(2024, 3, 15)) == "March 2024"
