"""
Модуль построчного разбора списка путей.

Каждая строка списка завершается маркером !*END*! (в любом месте строки)
или переводом строки. Маркер ищется первым, поэтому с его помощью можно
однозначно задать путь, содержащий необычные символы в конце.
"""

from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Tuple

from .config_loader import ScannerConfig


LINE_OK = 'ok'
LINE_MALFORMED = 'malformed'
LINE_OVERLONG = 'overlong'

NEWLINE = b'\n'


@dataclass
class ScannedLine:
    """Результат разбора одной строки списка."""
    number: int
    raw: bytes
    path: Optional[bytes]
    status: str


def extract_path(line: bytes, sentinel: bytes) -> Optional[bytes]:
    """
    Выделяет путь из строки списка.

    Args:
        line: Строка вместе с завершающим переводом строки (если он есть)
        sentinel: Маркер конца пути

    Returns:
        bytes или None: Путь или None, если строка не завершена
    """
    end = line.find(sentinel)
    if end != -1:
        return line[:end]

    end = line.find(NEWLINE)
    if end != -1:
        return line[:end]

    return None


class LineScanner:
    """Класс для чтения списка путей с ограничением длины строки."""

    def __init__(self, config: ScannerConfig):
        """
        Инициализация сканера.

        Args:
            config: Конфигурация разбора (максимальная длина, маркер)
        """
        self.config = config
        self.max_length = config.max_path_length
        self.sentinel = config.sentinel.encode('utf-8')

    def _read_line(self, stream: BinaryIO) -> Tuple[bytes, bool]:
        """
        Читает одну строку не длиннее max_length байт (вместе с '\\n').

        Returns:
            Tuple[bytes, bool]: (строка, признак превышения длины)
        """
        chunk = stream.readline(self.max_length)
        if len(chunk) < self.max_length or chunk.endswith(NEWLINE):
            return chunk, False

        # Буфер заполнен без перевода строки: дочитываем остаток строки
        overflow = False
        while True:
            rest = stream.readline(self.max_length)
            if not rest:
                break
            overflow = True
            if rest.endswith(NEWLINE):
                break
        return chunk, overflow

    def scan(self, stream: BinaryIO) -> Iterator[ScannedLine]:
        """
        Перебирает строки списка до конца файла.

        Args:
            stream: Файл списка, открытый в двоичном режиме

        Yields:
            ScannedLine: Разобранная строка
        """
        number = 0
        while True:
            line, overflow = self._read_line(stream)
            if not line:
                return
            number += 1

            path = extract_path(line, self.sentinel)
            if overflow:
                # Маркер внутри буфера завершает путь, остаток строки не важен
                if path is None:
                    yield ScannedLine(number, line, None, LINE_OVERLONG)
                else:
                    yield ScannedLine(number, line, path, LINE_OK)
                continue

            if path is None:
                yield ScannedLine(number, line, None, LINE_MALFORMED)
            else:
                yield ScannedLine(number, line, path, LINE_OK)
