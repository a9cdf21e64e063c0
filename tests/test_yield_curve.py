from decimal import Decimal

import pytest

from sandglass.errors import InvalidMarketConfigError
from sandglass.models import MarketCurve, MarketType
from sandglass.yield_curve import (
    CURVES,
    YEAR_SECONDS,
    fixed_accrual_curve,
    linear_decay_curve,
    market_curve,
)
from tests.conftest import DAY, START_TIME, make_clock, make_config

CACHED = MarketCurve(
    market_apy=Decimal("0.05"),
    market_end_price=Decimal("1.05"),
    market_sol_price=Decimal("1.02"),
)


def test_year_seconds():
    assert YEAR_SECONDS == 31_536_000


def test_every_market_type_has_a_curve():
    assert set(CURVES) == set(MarketType)


# =============================================================================
# LINEAR_DECAY
# =============================================================================


class TestLinearDecay:

    def setup_method(self):
        self.config = make_config(
            market_type=MarketType.LINEAR_DECAY,
            start_time=START_TIME,
            end_time=START_TIME + 1000,
            start_price=1_000_000,
            initial_end_price=1_100_000,
        )

    def curve_at(self, offset: int) -> MarketCurve:
        return linear_decay_curve(self.config, Decimal(0), make_clock(START_TIME + offset))

    def test_starts_at_initial_end_price(self):
        assert self.curve_at(0).market_end_price == Decimal("1.1")

    def test_decays_linearly(self):
        assert self.curve_at(500).market_end_price == Decimal("1.05")
        assert self.curve_at(333).market_end_price == Decimal("1.0667")

    def test_reaches_normalized_start_price_at_maturity(self):
        assert self.curve_at(1000).market_end_price == Decimal(1)

    def test_returns_raw_start_price_after_maturity(self):
        assert self.curve_at(1001).market_end_price == Decimal(1_000_000)

    def test_apy_and_sol_price_are_constant(self):
        curve = self.curve_at(250)
        assert curve.market_apy == Decimal(0)
        assert curve.market_sol_price == Decimal(1)

    def test_ignores_spot_price(self):
        clock = make_clock(START_TIME + 500)
        assert linear_decay_curve(self.config, Decimal("123.4"), clock) == \
            linear_decay_curve(self.config, Decimal(0), clock)


# =============================================================================
# FIXED_ACCRUAL
# =============================================================================


class TestFixedAccrualCached:

    def test_spot_below_recorded_price_keeps_cached_curve(self, accrual_config):
        clock = make_clock(START_TIME + 10 * DAY)
        assert fixed_accrual_curve(accrual_config, Decimal("1.01"), clock) == CACHED

    def test_closed_market_keeps_cached_curve(self, accrual_config):
        clock = make_clock(accrual_config.end_time)
        assert fixed_accrual_curve(accrual_config, Decimal("2"), clock) == CACHED

    def test_unavailable_oracle_keeps_cached_curve(self, accrual_config):
        clock = make_clock(START_TIME + 10 * DAY)
        assert fixed_accrual_curve(accrual_config, Decimal(0), clock) == CACHED

    def test_time_based_update_skip_window(self):
        now = START_TIME + 10 * DAY
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            compounding_period=DAY,
            update_skip_time=3600,
            last_update_time=now - 60,
            market_apy=50_000,
            market_sol_price=1_020_000,
            market_end_price=1_050_000,
        )
        assert fixed_accrual_curve(config, Decimal("1.5"), make_clock(now)) == CACHED

    def test_epoch_based_update_skip_window(self):
        epoch_start = START_TIME + 10 * DAY
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            compounding_period=0,
            update_skip_time=3600,
            start_epoch=100,
            last_update_epoch=110,
            market_apy=50_000,
            market_sol_price=1_020_000,
            market_end_price=1_050_000,
        )
        at_boundary = make_clock(epoch_start + 3600, epoch=110, epoch_start=epoch_start)
        stale_epoch = make_clock(epoch_start + 7200, epoch=109, epoch_start=epoch_start)
        no_epochs = make_clock(epoch_start + 7200, epoch=100, epoch_start=epoch_start)

        for clock in (at_boundary, stale_epoch):
            assert fixed_accrual_curve(config, Decimal("1.5"), clock) == CACHED

        config_start_epoch = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            start_epoch=100,
            last_update_epoch=100,
            market_apy=50_000,
            market_sol_price=1_020_000,
            market_end_price=1_050_000,
        )
        assert fixed_accrual_curve(config_start_epoch, Decimal("1.5"), no_epochs) == CACHED


class TestFixedAccrualRefresh:

    def test_time_based_compounding(self):
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            start_time=START_TIME,
            end_time=START_TIME + 730 * DAY,
            start_price=999_999,
            compounding_period=DAY,
            update_skip_time=3600,
            last_update_time=START_TIME,
            market_sol_price=1_000_000,
        )
        clock = make_clock(START_TIME + 365 * DAY)

        curve = fixed_accrual_curve(config, Decimal("1.05"), clock)

        # One year of growth from 0.999999 to 1.05
        assert curve.market_apy == Decimal("0.050001")
        # Two years at the same rate
        assert curve.market_end_price == Decimal("1.102501")
        assert curve.market_sol_price == Decimal("1.05")

    def test_epoch_based_compounding(self):
        epoch_start = START_TIME + 100 * DAY
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            start_time=START_TIME,
            end_time=START_TIME + 200 * DAY,
            start_price=999_999,
            compounding_period=0,
            update_skip_time=3600,
            start_epoch=100,
            last_update_epoch=150,
            market_sol_price=1_000_000,
        )
        clock = make_clock(epoch_start + 3601, epoch=150, epoch_start=epoch_start)

        curve = fixed_accrual_curve(config, Decimal("1.05"), clock)

        assert curve.market_end_price == Decimal("1.102501")
        assert Decimal("0.1949") < curve.market_apy < Decimal("0.1950")
        assert (curve.market_apy * 1_000_000) % 1 == 0
        assert curve.market_sol_price == Decimal("1.05")

    def test_epoch_start_at_market_start_is_rejected(self):
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            compounding_period=0,
            start_epoch=0,
            last_update_epoch=0,
        )
        clock = make_clock(START_TIME + DAY, epoch=5, epoch_start=START_TIME)

        with pytest.raises(InvalidMarketConfigError):
            fixed_accrual_curve(config, Decimal("1.5"), clock)

    def test_market_starting_on_epoch_boundary_keeps_cached_curve_in_start_epoch(self):
        config = make_config(
            market_type=MarketType.FIXED_ACCRUAL,
            compounding_period=0,
            update_skip_time=3600,
            start_epoch=5,
            last_update_epoch=5,
            market_apy=50_000,
            market_sol_price=1_020_000,
            market_end_price=1_050_000,
        )
        clock = make_clock(START_TIME + 7200, epoch=5, epoch_start=START_TIME)

        assert fixed_accrual_curve(config, Decimal("1.5"), clock) == CACHED


def test_market_curve_dispatches_on_type(linear_config, accrual_config):
    clock = make_clock(START_TIME + 10 * DAY)
    assert market_curve(linear_config, Decimal(0), clock) == linear_decay_curve(linear_config, Decimal(0), clock)
    assert market_curve(accrual_config, Decimal("1.01"), clock) == CACHED
