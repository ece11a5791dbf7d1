import time

import pytest

from rosclient.builtin_interfaces import Duration, Time, WireTime


@pytest.mark.parametrize(
    "nanos",
    [
        999_999_999,
        1_000_000_000,
        1_000_000_001,
        1_999_999_999,
        2_000_000_000,
        2_000_000_001,
        -999_999_999,
        -1_000_000_000,
        -1_000_000_001,
        -1_999_999_999,
        -2_000_000_000,
        -2_000_000_001,
        0,
        1,
        -1,
    ],
)
def test_repr_conversion(nanos):
    t = Time.from_nanos(nanos)
    assert Time.from_wire(t.to_wire()) == t


@pytest.mark.parametrize(
    "nanos",
    [0, 1, -1, 999_999_999, -999_999_999, 2_000_000_001, -2_000_000_001],
)
def test_wire_fraction_is_non_negative_and_below_one_second(nanos):
    wire = Time.from_nanos(nanos).to_wire()
    assert 0 <= wire.nanosec < 1_000_000_000


def test_negative_nanosecond_borrows_a_second():
    assert Time.from_nanos(-1).to_wire() == WireTime(sec=-1, nanosec=999_999_999)


def test_negative_whole_second_has_zero_fraction():
    assert Time.from_nanos(-1_000_000_000).to_wire() == WireTime(sec=-1, nanosec=0)


def test_wire_seconds_saturate_on_overflow():
    big = Time.from_nanos((2**31 + 5) * 1_000_000_000)
    assert big.to_wire().sec == 2**31 - 1


def test_wire_seconds_saturate_on_underflow():
    small = Time.from_nanos(-(2**31 + 5) * 1_000_000_000)
    assert small.to_wire().sec == -(2**31)


def test_from_wire_keeps_oversized_fraction():
    assert Time.from_wire(WireTime(sec=1, nanosec=1_500_000_000)).to_nanos() == 2_500_000_000


def test_time_ordering_and_constants():
    assert Time.ZERO.to_nanos() == 0
    assert Time.DUMMY.to_nanos() == 1234567890123
    assert Time.ZERO < Time.DUMMY
    assert Time.from_nanos(-1) < Time.ZERO


def test_now_is_close_to_system_clock():
    before = time.time_ns()
    now = Time.now()
    after = time.time_ns()
    assert before <= now.to_nanos() <= after


def test_duration_zero_and_secs():
    assert Duration.zero().to_nanos() == 0
    assert Duration.from_secs(7).to_nanos() == 7_000_000_000


@pytest.mark.parametrize("nanos", [0, 1, 999_999_999, 1_000_000_000, 123_456_789_012])
def test_duration_round_trip_non_negative(nanos):
    assert Duration.from_nanos(nanos).to_nanos() == nanos


def test_duration_from_millis_matches_nanos():
    assert Duration.from_millis(1500) == Duration.from_nanos(1_500_000_000)


def test_duration_fraction_in_range_for_negative():
    d = Duration.from_nanos(-1)
    assert 0 <= d.nanosec < 1_000_000_000


def test_duration_saturates_positive():
    d = Duration.from_nanos((2**31) * 1_000_000_000)
    assert d == Duration(2**31 - 1, 2**32 - 1)


@pytest.mark.parametrize("nanos", [-(2**31) * 1_000_000_000, -(2**31) * 1_000_000_000 - 5])
def test_duration_saturates_negative(nanos):
    assert Duration.from_nanos(nanos) == Duration(-(2**31), 0)