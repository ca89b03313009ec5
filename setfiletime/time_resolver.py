"""
Модуль вычисления целевого времени файлов.

Целевое время вычисляется один раз до обработки списка: текущее время,
текущее время минус N лет/месяцев/дней (-t) или явная дата YYYY[MM[DD]] (-o).
"""

import re
import time
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from .logger import SetFileTimeLogger


SECONDS_IN_DAY = 3600. * 24.
DAYS_IN_YEAR = 365.25
SECONDS_IN_YEAR = DAYS_IN_YEAR * SECONDS_IN_DAY
SECONDS_IN_MONTH = SECONDS_IN_YEAR / 12.

UNIT_SECONDS = {
    'Y': SECONDS_IN_YEAR,
    'M': SECONDS_IN_MONTH,
    'D': SECONDS_IN_DAY,
}

# Каждая найденная буква перезаписывает единицу, поэтому "5dY" - это годы
UNIT_CHECK_ORDER = (
    ('M', 'M'),
    ('m', 'M'),
    ('D', 'D'),
    ('d', 'D'),
    ('Y', 'Y'),
    ('y', 'Y'),
)

DEFAULT_UNIT = 'Y'
DATE_LENGTHS = (4, 6, 8)

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


class TimeSpecError(ValueError):
    """Исключение для некорректного задания времени (фатальная ошибка)."""
    pass


class FutureTimeError(TimeSpecError):
    """Исключение для явной даты, лежащей в будущем."""
    pass


def parse_leading_int(text: str) -> int:
    """
    Разбирает целое число в начале строки, как strtol(text, NULL, 10).
    
    Пробелы в начале и знак допускаются, хвост после цифр игнорируется.
    Если строка не начинается с числа, возвращается 0.
    """
    match = _LEADING_INT.match(text)
    if not match:
        return 0
    return int(match.group(1))


def age_unit(spec: str) -> str:
    """
    Определяет единицу смещения для аргумента -t.
    
    Returns:
        str: 'Y', 'M' или 'D'
    """
    unit = DEFAULT_UNIT
    for letter, value in UNIT_CHECK_ORDER:
        if letter in spec:
            unit = value
    return unit


def relative_deduction(spec: str) -> int:
    """Возвращает количество секунд, вычитаемых из текущего времени."""
    age = parse_leading_int(spec)
    return int(age * UNIT_SECONDS[age_unit(spec)])


def normalize_date(year: int, month: int, day: int) -> datetime:
    """
    Строит локальную полночь для даты, нормализуя выход за границы.
    
    Месяц 13 переходит в январь следующего года, 30 февраля - в март,
    день 0 - в последний день предыдущего месяца.
    """
    years, month_index = divmod(month - 1, 12)
    first_day = datetime(year + years, month_index + 1, 1)
    return first_day + timedelta(days=day - 1)


def parse_date_spec(spec: str) -> datetime:
    """
    Разбирает аргумент -o вида YYYY[MM[DD]].
    
    Всё после восьмого символа (время суток) отбрасывается.
    
    Raises:
        TimeSpecError: Если длина не 4, 6 или 8 символов или дата непредставима
    """
    work = spec[:8]
    if len(work) not in DATE_LENGTHS:
        raise TimeSpecError(f"{spec} must be 4, 6 or 8 characters long: YYYY[MM[DD]].")
    
    year = parse_leading_int(work[0:4])
    month = 1
    day = 1
    if len(work) >= 6:
        month = parse_leading_int(work[4:6])
    if len(work) == 8:
        day = parse_leading_int(work[6:8])
    
    try:
        return normalize_date(year, month, day)
    except (ValueError, OverflowError) as e:
        raise TimeSpecError(f"{spec} is not a representable date: {e}")


class TimeResolver:
    """Класс для вычисления целевого времени по опциям командной строки."""
    
    def __init__(self, logger: SetFileTimeLogger):
        self.logger = logger
    
    def resolve_relative(self, spec: str, now: int) -> int:
        """
        Вычисляет время "N единиц назад" для аргумента -t.
        
        Время в будущем (отрицательное N) допускается с предупреждением.
        
        Args:
            spec: Аргумент вида N[Yy|Mm|Dd]
            now: Текущее время в секундах
            
        Returns:
            int: Целевое время в секундах с начала эпохи
        """
        result = now - relative_deduction(spec)
        if result > now:
            self.logger.log_warning("You may not set a future time")
        return result
    
    def resolve_absolute(self, spec: str, now: int) -> int:
        """
        Вычисляет время по явной дате для аргумента -o.
        
        Raises:
            TimeSpecError: Если дата задана некорректно
            FutureTimeError: Если дата позже текущего времени
        """
        midnight = parse_date_spec(spec)
        try:
            when = int(midnight.timestamp())
        except (OverflowError, OSError, ValueError) as e:
            raise TimeSpecError(f"{spec} is not a representable date: {e}")
        
        if when > now:
            raise FutureTimeError(f"{spec} is a time in the future.")
        return when
    
    def resolve(self, time_specs: Iterable[Tuple[str, str]], now: Optional[int] = None) -> int:
        """
        Вычисляет целевое время по опциям в порядке их указания.
        
        Args:
            time_specs: Пары (буква опции, аргумент), например ('t', '2y')
            now: Текущее время (по умолчанию time.time())
            
        Returns:
            int: Целевое время в секундах с начала эпохи
        """
        if now is None:
            now = int(time.time())
        
        target = now
        source = 'now'
        for option, value in time_specs:
            if option == 't':
                target = self.resolve_relative(value, now)
            elif option == 'o':
                target = self.resolve_absolute(value, now)
            else:
                raise TimeSpecError(f"Unknown time option: {option}")
            source = f"-{option} {value}"
        
        self.logger.log_target_time(target, source)
        return target
