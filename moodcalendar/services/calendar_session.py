"""
Calendar Session
Process-wide UI state (the month and year cursors) held by one explicit object.
"""

from datetime import date
from typing import Callable, Generic, List, Optional, TypeVar

from moodcalendar.utils.calendar_dates import YearMonth, validate_year
from moodcalendar.core.logger import get_logger

logger = get_logger("calendar_session")

T = TypeVar("T")


class ObservableValue(Generic[T]):
    """
    A single current value with synchronous change listeners.

    Listeners run inside ``set`` in registration order, only when the value
    actually changes. There is no history: late subscribers read ``value``.
    """

    def __init__(self, initial: T, name: str = "value"):
        self._value = initial
        self._name = name
        self._listeners: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, new_value: T) -> bool:
        if new_value == self._value:
            return False
        old = self._value
        self._value = new_value
        logger.debug(f"{self._name} cursor moved {old} -> {new_value}")
        for listener in list(self._listeners):
            listener(new_value)
        return True

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class CalendarSession:
    """Owns the currently viewed month and year."""

    def __init__(self, today: Optional[date] = None):
        today = today or date.today()
        self.current_month: ObservableValue[YearMonth] = ObservableValue(
            YearMonth.from_date(today), name="month"
        )
        self.current_year: ObservableValue[int] = ObservableValue(
            validate_year(today.year), name="year"
        )
