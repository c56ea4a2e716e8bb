"""
Tests for the request spacing of the rate gate.
"""

import threading

import pytest

from nsshards.exceptions import InvalidArgument
from nsshards.ratelimit import RateGate, RequestClass


class TestRateGateConfiguration:
    """Test cases for constructing a RateGate."""

    def test_defaults(self):
        """Test the default periods match the NS limits."""
        gate = RateGate()

        assert gate.standardPeriod == 0.6
        assert gate.recruitmentTelegramPeriod == 180.0
        assert gate.nonRecruitmentTelegramPeriod == 60.0
        assert gate.enabled

    @pytest.mark.parametrize(
        "overrides",
        [
            {"standardPeriod": 0.5},
            {"recruitmentTelegramPeriod": 179},
            {"nonRecruitmentTelegramPeriod": 29.9},
        ],
    )
    def test_periods_below_floor_rejected(self, overrides):
        """Test that periods shorter than NS allows are rejected."""
        with pytest.raises(InvalidArgument):
            RateGate(**overrides)

    @pytest.mark.parametrize("period", [None, "1", True])
    def test_non_numeric_period_rejected(self, period):
        """Test that periods must be numbers of seconds."""
        with pytest.raises(InvalidArgument):
            RateGate(standardPeriod=period)

    def test_periods_at_floor_accepted(self):
        """Test that the floors themselves are valid periods."""
        gate = RateGate(
            standardPeriod=0.6,
            recruitmentTelegramPeriod=180,
            nonRecruitmentTelegramPeriod=30,
        )

        assert gate.nonRecruitmentTelegramPeriod == 30.0


class TestStandardRequests:
    """Test cases for spacing standard requests."""

    def test_first_request_does_not_wait(self, gate, clock):
        """Test that nothing is waited on before any request was made."""
        with gate.admission():
            pass

        assert clock.sleeps == []

    def test_back_to_back_requests_are_spaced(self, gate, clock):
        """Test that successive admissions are at least the standard period apart."""
        admitted = []
        for _ in range(5):
            with gate.admission():
                admitted.append(clock())

        for before, after in zip(admitted, admitted[1:]):
            assert after - before >= 0.6 - 1e-9

    def test_elapsed_time_is_not_waited_again(self, gate, clock):
        """Test that only the remainder of the period is waited."""
        with gate.admission():
            pass
        clock.advance(0.25)

        with gate.admission():
            pass

        assert sum(clock.sleeps) == pytest.approx(0.35)

    def test_failed_request_is_not_recorded(self, gate, clock):
        """Test that the gate is only marked after a successful request."""
        with pytest.raises(RuntimeError):
            with gate.admission():
                raise RuntimeError("request failed")

        assert gate.lastStandard is None
        assert gate.lastTelegram is None

    def test_standard_request_does_not_touch_telegram_clock(self, gate):
        """Test that a standard request only updates the standard timestamp."""
        with gate.admission(RequestClass.STANDARD):
            pass

        assert gate.lastStandard is not None
        assert gate.lastTelegram is None

    def test_disabled_gate_never_waits(self, clock):
        """Test that a disabled gate admits immediately."""
        gate = RateGate(enabled=False, clock=clock, sleep=clock.sleep)
        for _ in range(3):
            with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
                pass

        assert clock.sleeps == []


class TestTelegramRequests:
    """Test cases for spacing telegrams."""

    def test_telegram_updates_both_timestamps(self, gate, clock):
        """Test that a telegram counts as both a telegram and a standard request."""
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass

        assert gate.lastTelegram == clock()
        assert gate.lastStandard == clock()

    def test_telegram_after_standard_waits_standard_period(self, gate, clock):
        """Test that the first telegram still waits for the standard period."""
        with gate.admission():
            pass
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass

        assert sum(clock.sleeps) == pytest.approx(0.6)

    def test_recruitment_telegrams_are_spaced(self, gate, clock):
        """Test that recruitment telegrams wait the recruitment period."""
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass
        start = clock()
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass

        assert clock() - start >= 180.0

    def test_non_recruitment_telegrams_are_spaced(self, gate, clock):
        """Test that other telegrams wait the non-recruitment period."""
        with gate.admission(RequestClass.NON_RECRUITMENT_TELEGRAM):
            pass
        start = clock()
        with gate.admission(RequestClass.NON_RECRUITMENT_TELEGRAM):
            pass

        assert clock() - start == pytest.approx(60.0)

    def test_telegram_waits_telegram_then_standard_period(self, clock):
        """Test the telegram cooldown is waited first, then the standard one."""
        gate = RateGate(standardPeriod=1.0, clock=clock, sleep=clock.sleep)
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass
        clock.advance(179.5)
        # A standard request made just before the telegram cooldown ends
        with gate.admission():
            pass
        assert clock.sleeps == []

        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            admitted = clock()

        assert clock.sleeps == [0.5, 0.5]
        assert admitted >= 1000.0 + 180.0
        assert admitted >= 1000.0 + 179.5 + 1.0

    def test_standard_request_ignores_telegram_cooldown(self, gate, clock):
        """Test that standard requests are not held back by a recent telegram."""
        with gate.admission(RequestClass.RECRUITMENT_TELEGRAM):
            pass
        with gate.admission():
            pass

        assert sum(clock.sleeps) == pytest.approx(0.6)


class TestConcurrentAdmission:
    """Test cases for sharing a RateGate between threads."""

    def test_threads_are_serialised(self, gate, clock):
        """Test that concurrent callers are still admitted a period apart."""
        admitted = []
        barrier = threading.Barrier(6)

        def caller():
            barrier.wait()
            with gate.admission():
                admitted.append(clock())

        threads = [threading.Thread(target=caller) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(admitted) == 6
        admitted.sort()
        for before, after in zip(admitted, admitted[1:]):
            assert after - before >= gate.standardPeriod - 1e-9
