from datetime import datetime

from src.company_management.company_management.attendance.factory import AttendanceStrategyFactory
from src.company_management.company_management.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.company_management.company_management.attendance.strategies.present_strategy import PresentStrategy
from src.company_management.company_management.core.enums import AttendanceStatus


def test_factory_logout_before_threshold_is_half_day():
    login = datetime(2025, 1, 1, 9, 0)
    logout = datetime(2025, 1, 1, 12, 59, 59)

    factory = AttendanceStrategyFactory(half_day_minutes=240)
    strategy = factory.for_logout(login_time=login, logout_time=logout)

    assert isinstance(strategy, HalfDayStrategy)
    decision = strategy.decide_logout(login_time=login, logout_time=logout, current=AttendanceStatus.PRESENT)
    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.note == "worked 239 minutes"


def test_factory_logout_at_threshold_keeps_status():
    login = datetime(2025, 1, 1, 9, 0)
    logout = datetime(2025, 1, 1, 13, 0)

    factory = AttendanceStrategyFactory(half_day_minutes=240)
    strategy = factory.for_logout(login_time=login, logout_time=logout)

    assert isinstance(strategy, PresentStrategy)
    decision = strategy.decide_logout(login_time=login, logout_time=logout, current=AttendanceStatus.PRESENT)
    assert decision.status == AttendanceStatus.PRESENT
