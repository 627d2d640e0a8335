import pytest

from src.class_attendance.class_attendance.reports.calculator.standard_calculator import StandardRateCalculator


def test_percentage_of_enrolled():
    calc = StandardRateCalculator()

    assert calc.percentage(3, 4) == 75.0
    assert calc.percentage(1, 3) == pytest.approx(33.333, rel=1e-3)


def test_zero_enrolled_is_zero_not_an_error():
    calc = StandardRateCalculator()

    assert calc.percentage(0, 0) == 0.0
    assert calc.coarse_ratio(5, 0) == 0.0


def test_coarse_ratio_ignores_session_count():
    calc = StandardRateCalculator()

    # Ten presence rows across two enrolled sections reads as 5.0.
    assert calc.coarse_ratio(10, 2) == 5.0
    assert calc.coarse_ratio(1, 2) == 0.5
