"""
Модуль для настройки и управления логированием утилиты.

Диагностика выводится в stderr (с цветом, если это терминал),
при наличии настройки дополнительно пишется в файл с ротацией.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from .config_loader import LoggingConfig


LOGGER_NAME = 'setfiletime'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""
    
    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }
    
    def format(self, record):
        """Форматирует запись лога с цветом."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # Запись может уйти и в файловый обработчик
            record.levelname = levelname


def _display_path(path: Union[bytes, str, Path]) -> str:
    """Преобразует путь (в том числе bytes) в строку для вывода."""
    if isinstance(path, bytes):
        return os.fsdecode(path)
    return str(path)


class SetFileTimeLogger:
    """Класс для управления логированием утилиты setfiletime."""
    
    def __init__(self, config: LoggingConfig, stream=None):
        """
        Инициализация логгера.
        
        Args:
            config: Конфигурация логирования
            stream: Поток для консольного вывода (по умолчанию sys.stderr)
        """
        self.config = config
        self.stream = stream
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()
    
    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным и (опционально) файловым выводом."""
        level = getattr(logging, self.config.level.upper())
        
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)
        
        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)
        
        stream = self.stream if self.stream is not None else sys.stderr
        console_fmt = '%(name)s: [%(levelname)s] %(message)s'
        if hasattr(stream, 'isatty') and stream.isatty():
            console_formatter = ColoredFormatter(fmt=console_fmt)
        else:
            console_formatter = logging.Formatter(fmt=console_fmt)
        
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)
        
        if self.config.log_file:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # MB -> байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)
        
        # Предотвращаем дублирование сообщений
        self.logger.propagate = False
    
    def get_logger(self) -> logging.Logger:
        """
        Возвращает настроенный логгер.
        
        Returns:
            logging.Logger: Настроенный логгер
        """
        if self.logger is None:
            raise RuntimeError("Logger is not initialized")
        return self.logger
    
    def close(self) -> None:
        """Закрывает обработчики логгера."""
        if self.logger is None:
            return
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)
    
    def log_config_loaded(self, config_path: str) -> None:
        """Логирует успешную загрузку конфигурации."""
        self.logger.debug(f"⚙️ Configuration loaded from {config_path}")
    
    def log_target_time(self, target_time: int, source: str) -> None:
        """
        Логирует вычисленное целевое время.
        
        Args:
            target_time: Время в секундах с начала эпохи
            source: Как было получено время (now, -t, -o)
        """
        try:
            stamp = datetime.fromtimestamp(target_time).strftime('%Y-%m-%d %H:%M:%S')
        except (OverflowError, OSError, ValueError):
            stamp = "out of datetime range"
        self.logger.debug(f"⏰ Target time ({source}): {stamp} ({target_time})")
    
    def log_run_start(self, list_file: Union[str, Path]) -> None:
        """Логирует начало обработки списка."""
        self.logger.debug(f"🚀 Processing list {_display_path(list_file)}")
    
    def log_run_end(self, lines_read: int, updated: int, failed: int, skipped: int) -> None:
        """
        Логирует завершение обработки списка.
        
        Args:
            lines_read: Прочитано строк
            updated: Обновлено файлов
            failed: Ошибок при обновлении
            skipped: Пропущено некорректных строк
        """
        self.logger.info(
            f"✅ Done: {lines_read} lines read, {updated} updated, "
            f"{failed} failed, {skipped} lines skipped"
        )
    
    def log_run_stats(self, stats: Dict) -> None:
        """Логирует подробную статистику обработки (только DEBUG)."""
        duration = stats.get('duration_seconds')
        duration_text = f"{duration:.2f}s" if duration is not None else "n/a"
        self.logger.debug(
            f"📊 Stats: success rate {stats.get('success_rate', 0.0):.1f}%, "
            f"malformed {stats.get('malformed', 0)}, overlong {stats.get('overlong', 0)}, "
            f"duration {duration_text}"
        )
    
    def log_path_updated(self, path: Union[bytes, str]) -> None:
        """Логирует успешное обновление времени файла."""
        self.logger.debug(f"📁 {_display_path(path)}")
    
    def log_path_error(self, path: Union[bytes, str], error: Exception) -> None:
        """
        Логирует ошибку обновления времени файла.

        Формат совпадает с perror(3): "путь: описание ошибки".
        """
        reason = getattr(error, 'strerror', None) or str(error)
        self.logger.error(f"{_display_path(path)}: {reason}")
    
    def log_malformed_line(self, list_file: Union[str, Path], line: bytes) -> None:
        """Логирует строку списка без признака конца пути."""
        self.logger.error(f"Malformed line in: {_display_path(list_file)}\n{_display_path(line)}\n")
    
    def log_overlong_line(self, list_file: Union[str, Path], line_number: int, limit: int) -> None:
        """Логирует строку списка, превышающую максимальную длину пути."""
        self.logger.error(
            f"Line {line_number} in {_display_path(list_file)} is longer than {limit} bytes, skipped"
        )
    
    def log_warning(self, message: str) -> None:
        """Логирует предупреждение."""
        self.logger.warning(message)
    
    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.
        
        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")


def setup_logger(config: LoggingConfig) -> logging.Logger:
    """
    Удобная функция для быстрой настройки логгера.
    
    Args:
        config: Конфигурация логирования
        
    Returns:
        logging.Logger: Настроенный логгер
    """
    return SetFileTimeLogger(config).get_logger()


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Получает логгер по имени."""
    return logging.getLogger(name)
