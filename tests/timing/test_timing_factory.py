from datetime import datetime

import pytest

from src.nexlinx_ems.nexlinx_ems.core.enums import ArrivalStatus, DepartureStatus
from src.nexlinx_ems.nexlinx_ems.core.exceptions import ProcessingError
from src.nexlinx_ems.nexlinx_ems.timing.factory import TimingStrategyFactory
from src.nexlinx_ems.nexlinx_ems.timing.strategies.early_strategy import EarlyStrategy
from src.nexlinx_ems.nexlinx_ems.timing.strategies.grace_strategy import GraceStrategy
from src.nexlinx_ems.nexlinx_ems.timing.strategies.incomplete_strategy import IncompleteStrategy
from src.nexlinx_ems.nexlinx_ems.timing.strategies.late_strategy import LateStrategy
from src.nexlinx_ems.nexlinx_ems.timing.strategies.on_time_strategy import OnTimeStrategy

START = datetime(2025, 3, 10, 9, 0)
END = datetime(2025, 3, 10, 17, 0)


@pytest.mark.parametrize(
    "check_in, expected",
    [
        (datetime(2025, 3, 10, 8, 45), EarlyStrategy),
        (datetime(2025, 3, 10, 9, 0, 40), OnTimeStrategy),
        (datetime(2025, 3, 10, 9, 30), GraceStrategy),
        (datetime(2025, 3, 10, 9, 31), LateStrategy),
    ],
)
def test_factory_picks_arrival_strategy(check_in, expected):
    factory = TimingStrategyFactory()
    assert isinstance(factory.for_arrival(check_in=check_in, shift_start=START, grace_minutes=30), expected)


def test_arrival_decisions_carry_minutes():
    factory = TimingStrategyFactory()

    def decide(check_in):
        strategy = factory.for_arrival(check_in=check_in, shift_start=START, grace_minutes=30)
        return strategy.decide_arrival(check_in=check_in, shift_start=START, grace_minutes=30)

    early = decide(datetime(2025, 3, 10, 8, 45))
    assert (early.status, early.early_minutes, early.deduction_minutes) == (ArrivalStatus.EARLY, 15, 0)

    grace = decide(datetime(2025, 3, 10, 9, 20))
    assert (grace.status, grace.grace_minutes_used, grace.deduction_minutes) == (ArrivalStatus.GRACE, 20, 0)

    late = decide(datetime(2025, 3, 10, 9, 45))
    assert (late.status, late.late_minutes, late.deduction_minutes) == (ArrivalStatus.LATE, 45, 45)


def test_departure_decisions():
    factory = TimingStrategyFactory()

    def decide(check_out):
        strategy = factory.for_departure(check_out=check_out, shift_end=END)
        return strategy.decide_departure(check_out=check_out, shift_end=END)

    early = decide(datetime(2025, 3, 10, 16, 20))
    assert (early.status, early.early_departure_minutes, early.deduction_minutes) == (DepartureStatus.EARLY, 40, 40)
    assert decide(datetime(2025, 3, 10, 17, 30)).status == DepartureStatus.ON_TIME
    late = decide(datetime(2025, 3, 10, 18, 15))
    assert (late.status, late.late_departure_minutes) == (DepartureStatus.LATE, 75)
    assert decide(None).status == DepartureStatus.INCOMPLETE


def test_incomplete_strategy_cannot_judge_arrival():
    with pytest.raises(ProcessingError):
        IncompleteStrategy().decide_arrival(check_in=START, shift_start=START, grace_minutes=30)
