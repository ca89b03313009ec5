"""
Модуль для операций с файловой системой.

Проверяет и открывает файл списка, устанавливает время доступа
и модификации для путей из списка.
"""

import os
import stat
from pathlib import Path
from typing import BinaryIO, Union

from .logger import SetFileTimeLogger


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


class ListFileError(FileOperationError):
    """Исключение для некорректного файла списка (фатальная ошибка)."""
    pass


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, logger: SetFileTimeLogger):
        """
        Инициализация операций с файлами.

        Args:
            logger: Логгер для записи операций
        """
        self.logger = logger

    def validate_list_file(self, list_file: Union[str, Path]) -> os.stat_result:
        """
        Проверяет, что файл списка существует и является обычным файлом.

        Символические ссылки разыменовываются.

        Args:
            list_file: Путь к файлу списка

        Returns:
            os.stat_result: Результат stat для файла списка

        Raises:
            ListFileError: Если stat не удался или это не обычный файл
        """
        try:
            sb = os.stat(list_file)
        except OSError as e:
            raise ListFileError(f"{list_file}: {e.strerror or e}")

        if not stat.S_ISREG(sb.st_mode):
            raise ListFileError(f"{list_file} is not a regular file")

        return sb

    def open_list_file(self, list_file: Union[str, Path]) -> BinaryIO:
        """
        Открывает файл списка для чтения в двоичном режиме.

        Raises:
            ListFileError: Если файл не удалось открыть
        """
        try:
            return open(list_file, 'rb')
        except OSError as e:
            raise ListFileError(f"{list_file}: {e.strerror or e}")

    def set_file_time(self, path: Union[bytes, str], target_time: int) -> None:
        """
        Устанавливает время доступа и модификации файла одним вызовом.

        Args:
            path: Путь к файлу
            target_time: Время в секундах с начала эпохи

        Raises:
            FileOperationError: Если время установить не удалось
                (исходная ошибка доступна в __cause__)
        """
        try:
            os.utime(path, (target_time, target_time))
        except (OSError, OverflowError, ValueError) as e:
            # ValueError - например, нулевой байт в пути
            raise FileOperationError(f"{path!r}: {e}") from e

        self.logger.log_path_updated(path)


def create_file_ops(logger: SetFileTimeLogger) -> FileOps:
    """Удобная функция для создания объекта операций с файлами."""
    return FileOps(logger)
