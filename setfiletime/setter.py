"""
Модуль обработки списка файлов.

Объединяет разбор списка и установку времени файлов: один проход
по списку с подсчетом статистики. Ошибки по отдельным строкам
и путям не прерывают проход.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from .config_loader import Config
from .file_ops import FileOperationError, FileOps
from .logger import SetFileTimeLogger
from .scanner import LINE_MALFORMED, LINE_OVERLONG, LineScanner


class RunStats:
    """Класс для хранения статистики обработки списка."""

    def __init__(self):
        self.lines_read = 0
        self.updated = 0
        self.failed = 0
        self.malformed = 0
        self.overlong = 0
        self.start_time = None
        self.end_time = None
        self.errors = []

    def add_error(self, path: Union[bytes, str], error: Exception):
        """Добавляет ошибку в список."""
        self.errors.append({
            'path': path,
            'error': str(error),
            'timestamp': datetime.now()
        })

    @property
    def skipped(self) -> int:
        """Количество строк, для которых обновление не выполнялось."""
        return self.malformed + self.overlong

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность обработки в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def get_success_rate(self) -> float:
        """Возвращает процент успешно обновленных путей."""
        attempted = self.updated + self.failed
        if attempted == 0:
            return 0.0
        return (self.updated / attempted) * 100

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'lines_read': self.lines_read,
            'updated': self.updated,
            'failed': self.failed,
            'malformed': self.malformed,
            'overlong': self.overlong,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'success_rate': self.get_success_rate(),
            'error_count': len(self.errors)
        }


class TimestampSetter:
    """Основной класс для установки времени файлов по списку."""

    def __init__(self, config: Config, logger: SetFileTimeLogger):
        """
        Инициализация.

        Args:
            config: Конфигурация приложения
            logger: Логгер для записи операций
        """
        self.config = config
        self.logger = logger
        self.file_ops = FileOps(logger)
        self.scanner = LineScanner(config.scanner)
        self.stats = RunStats()

    def run(self, list_file: Union[str, Path], target_time: int) -> RunStats:
        """
        Обрабатывает файл списка целиком.

        Args:
            list_file: Путь к файлу списка
            target_time: Время в секундах с начала эпохи

        Returns:
            RunStats: Статистика обработки

        Raises:
            ListFileError: Если файл списка некорректен или не открывается
        """
        self.file_ops.validate_list_file(list_file)

        self.stats = RunStats()
        self.stats.start_time = datetime.now()
        self.logger.log_run_start(list_file)

        with self.file_ops.open_list_file(list_file) as stream:
            for line in self.scanner.scan(stream):
                self.stats.lines_read += 1

                if line.status == LINE_OVERLONG:
                    self.stats.overlong += 1
                    self.logger.log_overlong_line(list_file, line.number, self.scanner.max_length)
                    continue

                if line.status == LINE_MALFORMED:
                    self.stats.malformed += 1
                    self.logger.log_malformed_line(list_file, line.raw)
                    continue

                self._apply(line.path, target_time)

        self.stats.end_time = datetime.now()
        self.logger.log_run_end(
            self.stats.lines_read,
            self.stats.updated,
            self.stats.failed,
            self.stats.skipped
        )
        self.logger.log_run_stats(self.stats.to_dict())
        return self.stats

    def _apply(self, path: bytes, target_time: int) -> None:
        """Устанавливает время одного файла и обновляет статистику."""
        try:
            self.file_ops.set_file_time(path, target_time)
        except FileOperationError as e:
            # Ошибка по одному пути не прерывает обработку списка
            cause = e.__cause__ or e
            self.stats.failed += 1
            self.stats.add_error(path, cause)
            self.logger.log_path_error(path, cause)
            return

        self.stats.updated += 1


def create_setter(config: Config, logger: SetFileTimeLogger) -> TimestampSetter:
    """
    Удобная функция для создания объекта обработки списка.

    Args:
        config: Конфигурация приложения
        logger: Логгер

    Returns:
        TimestampSetter: Объект обработки списка
    """
    return TimestampSetter(config, logger)
