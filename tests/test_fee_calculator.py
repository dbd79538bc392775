from types import SimpleNamespace

from gigplanner.domain.fees import calculate_fee, compute_hours, resolve_fee


def musician(**kwargs):
    defaults = {"id": 1, "pay_rate": None, "category_id": None}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def slot(start_time=None, end_time=None, duration=None):
    return SimpleNamespace(start_time=start_time, end_time=end_time, duration=duration)


def rate(musician_id=1, event_category_id=7, hourly_rate=50.0):
    return SimpleNamespace(
        musician_id=musician_id, event_category_id=event_category_id, hourly_rate=hourly_rate
    )


def test_override_wins_over_everything() -> None:
    assignment = SimpleNamespace(actual_fee=200.0, musician_id=1)
    fee = calculate_fee(assignment, musician(pay_rate=80), slot(duration=3), [rate()], 7)
    assert fee == 200.0


def test_zero_actual_fee_is_not_an_override() -> None:
    assignment = SimpleNamespace(actual_fee=0, musician_id=1)
    result = resolve_fee(assignment, musician(pay_rate=80), slot(duration=2))
    assert result.rule == "musician_rate"
    assert result.amount == 160.0


def test_pay_rate_table_times_hours() -> None:
    result = resolve_fee(None, musician(pay_rate=80), slot(duration=3), [rate(hourly_rate=50)], 7)
    assert result.amount == 150.0
    assert result.rule == "pay_rate_table"
    assert result.hours == 3


def test_pay_rate_for_other_event_category_is_ignored() -> None:
    result = resolve_fee(None, musician(pay_rate=80), slot(duration=2), [rate(event_category_id=3)], 7)
    assert result.amount == 160.0
    assert result.rule == "musician_rate"


def test_negative_rates_fall_through() -> None:
    result = resolve_fee(
        None, musician(pay_rate=-80, category_id=4), slot(duration=2), [rate(hourly_rate=-50)], 7
    )
    assert result.rule == "category_default"
    assert result.amount == 270.0


def test_category_default_rate() -> None:
    assert calculate_fee(None, musician(category_id=4), slot(duration=1)) == 135.0


def test_unknown_category_uses_fallback_rate() -> None:
    assert calculate_fee(None, musician(category_id=99), slot(duration=2)) == 200.0


def test_flat_minimum_ignores_hours() -> None:
    result = resolve_fee(None, musician(), slot(duration=6))
    assert result.amount == 150.0
    assert result.rule == "flat_minimum"


def test_no_inputs_never_raises() -> None:
    assert calculate_fee() == 150.0


def test_hours_wrap_past_midnight() -> None:
    assert compute_hours("22:00", "01:00") == 3.0


def test_hours_round_to_one_decimal() -> None:
    assert compute_hours("20:00", "21:20") == 1.3


def test_explicit_duration_takes_precedence() -> None:
    assert compute_hours("20:00", "21:00", duration=4) == 4


def test_malformed_times_fall_back_to_default() -> None:
    assert compute_hours("late", "21:00") == 3.0
    assert compute_hours(None, None, default_hours=2) == 2
    assert compute_hours("20:00", "20:00") == 3.0
