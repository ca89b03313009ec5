"""
Тесты для модуля scanner.py
"""

import io

import pytest

from setfiletime.config_loader import ScannerConfig
from setfiletime.scanner import (
    LINE_MALFORMED,
    LINE_OK,
    LINE_OVERLONG,
    LineScanner,
    extract_path,
)


SENTINEL = b"!*END*!"


class TestExtractPath:
    """Тесты для выделения пути из строки."""

    def test_sentinel_with_garbage(self):
        """Тест маркера с мусором после него."""
        assert extract_path(b"foo.txt!*END*!garbage\n", SENTINEL) == b"foo.txt"

    def test_newline(self):
        """Тест обычной строки с переводом строки."""
        assert extract_path(b"foo.txt\n", SENTINEL) == b"foo.txt"

    def test_no_terminator(self):
        """Тест строки без признака конца."""
        assert extract_path(b"foo.txt", SENTINEL) is None

    def test_sentinel_searched_first(self):
        """Тест приоритета маркера над переводом строки."""
        assert extract_path(b"a\nb!*END*!", SENTINEL) == b"a\nb"

    def test_sentinel_without_newline(self):
        """Тест маркера в последней строке без перевода строки."""
        assert extract_path(b"last!*END*!", SENTINEL) == b"last"

    def test_path_used_as_is(self):
        """Тест отсутствия обрезки пробелов и \\r."""
        assert extract_path(b" spaced name \r\n", SENTINEL) == b" spaced name \r"

    def test_empty_line(self):
        """Тест пустой строки."""
        assert extract_path(b"\n", SENTINEL) == b""


class TestLineScanner:
    """Тесты для класса LineScanner."""

    @pytest.fixture
    def scanner(self):
        """Создает сканер с длиной строки по умолчанию."""
        return LineScanner(ScannerConfig(max_path_length=4096, sentinel="!*END*!"))

    def test_scan_mixed_lines(self, scanner):
        """Тест разбора обычных, маркированных и незавершенных строк."""
        stream = io.BytesIO(b"one\ntwo!*END*!x\nthree")

        lines = list(scanner.scan(stream))

        assert [line.number for line in lines] == [1, 2, 3]
        assert [line.status for line in lines] == [LINE_OK, LINE_OK, LINE_MALFORMED]
        assert lines[0].path == b"one"
        assert lines[1].path == b"two"
        assert lines[2].path is None
        assert lines[2].raw == b"three"

    def test_malformed_line_does_not_stop_scan(self, scanner):
        """Тест продолжения после некорректной строки."""
        lines = list(scanner.scan(io.BytesIO(b"a\nb\n")))
        assert [line.path for line in lines] == [b"a", b"b"]

    def test_empty_stream(self, scanner):
        """Тест пустого файла списка."""
        assert list(scanner.scan(io.BytesIO(b""))) == []

    def test_custom_sentinel(self):
        """Тест маркера из конфигурации."""
        scanner = LineScanner(ScannerConfig(max_path_length=4096, sentinel="<<EOL>>"))

        lines = list(scanner.scan(io.BytesIO(b"foo<<EOL>>bar\nbaz!*END*!\n")))

        assert lines[0].path == b"foo"
        assert lines[1].path == b"baz!*END*!"

    def test_overlong_line_skipped(self):
        """Тест пропуска строки длиннее максимальной длины пути."""
        scanner = LineScanner(ScannerConfig(max_path_length=8))
        stream = io.BytesIO(b"short\n" + b"x" * 20 + b"\n" + b"next\n")

        lines = list(scanner.scan(stream))

        assert [line.status for line in lines] == [LINE_OK, LINE_OVERLONG, LINE_OK]
        assert [line.number for line in lines] == [1, 2, 3]
        assert lines[1].path is None
        assert lines[2].path == b"next"

    def test_sentinel_before_long_tail(self):
        """Тест маркера в пределах буфера при длинном хвосте строки."""
        scanner = LineScanner(ScannerConfig(max_path_length=64))
        stream = io.BytesIO(b"foo.txt!*END*!" + b"g" * 200 + b"\n" + b"next\n")

        lines = list(scanner.scan(stream))

        assert [line.status for line in lines] == [LINE_OK, LINE_OK]
        assert [line.number for line in lines] == [1, 2]
        assert lines[0].path == b"foo.txt"
        assert lines[1].path == b"next"

    def test_sentinel_beyond_limit(self):
        """Тест маркера, оказавшегося за пределом буфера."""
        scanner = LineScanner(ScannerConfig(max_path_length=8))

        lines = list(scanner.scan(io.BytesIO(b"x" * 20 + b"!*END*!\n")))

        assert len(lines) == 1
        assert lines[0].status == LINE_OVERLONG

    def test_line_at_limit(self):
        """Тест строки, ровно заполняющей буфер вместе с '\\n'."""
        scanner = LineScanner(ScannerConfig(max_path_length=8))

        lines = list(scanner.scan(io.BytesIO(b"1234567\n")))

        assert len(lines) == 1
        assert lines[0].status == LINE_OK
        assert lines[0].path == b"1234567"

    def test_line_one_byte_over_limit(self):
        """Тест строки, у которой за пределом буфера остался только '\\n'."""
        scanner = LineScanner(ScannerConfig(max_path_length=8))

        lines = list(scanner.scan(io.BytesIO(b"12345678\nnext\n")))

        assert [line.status for line in lines] == [LINE_OVERLONG, LINE_OK]

    def test_final_line_at_limit_without_newline(self):
        """Тест последней строки длиной в буфер без перевода строки."""
        scanner = LineScanner(ScannerConfig(max_path_length=8))

        lines = list(scanner.scan(io.BytesIO(b"12345678")))

        assert len(lines) == 1
        assert lines[0].status == LINE_MALFORMED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
