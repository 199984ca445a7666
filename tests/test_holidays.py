"""
Unit tests for holiday scope and date coverage.
"""

from datetime import date

from backend.app.services.slots.sources import GlobalScope, HolidayPeriod, StaffScope


def test_absolute_period_is_inclusive():
    period = HolidayPeriod(GlobalScope(), date(2030, 8, 1), date(2030, 8, 15))

    assert period.covers(date(2030, 8, 1))
    assert period.covers(date(2030, 8, 15))
    assert not period.covers(date(2030, 7, 31))
    assert not period.covers(date(2030, 8, 16))
    # Not recurring: next year is open
    assert not period.covers(date(2031, 8, 5))


def test_recurring_period_ignores_year():
    christmas = HolidayPeriod(GlobalScope(), date(2020, 12, 25), date(2020, 12, 25), recurring=True)

    assert christmas.covers(date(2030, 12, 25))
    assert not christmas.covers(date(2030, 12, 24))


def test_recurring_period_across_new_year():
    winter = HolidayPeriod(GlobalScope(), date(2020, 12, 30), date(2021, 1, 2), recurring=True)

    assert winter.covers(date(2030, 12, 31))
    assert winter.covers(date(2031, 1, 2))
    assert not winter.covers(date(2031, 1, 3))


def test_recurring_leap_day_falls_back_to_feb_28():
    leap = HolidayPeriod(GlobalScope(), date(2028, 2, 29), date(2028, 2, 29), recurring=True)

    assert leap.covers(date(2030, 2, 28))
    assert leap.covers(date(2032, 2, 29))


def test_scope():
    closure = HolidayPeriod(GlobalScope(), date(2030, 1, 1), date(2030, 1, 1))
    leave = HolidayPeriod(StaffScope(7), date(2030, 1, 1), date(2030, 1, 1))

    assert closure.applies_to(7)
    assert closure.applies_to(8)
    assert leave.applies_to(7)
    assert not leave.applies_to(8)
