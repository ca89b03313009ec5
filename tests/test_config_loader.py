"""
Тесты для модуля config_loader.py
"""

import pytest
import tempfile
import os
from pathlib import Path

from setfiletime.config_loader import (
    ConfigLoader,
    Config,
    DEFAULT_SENTINEL,
    RunOptions,
    ScannerConfig,
    default_config,
    load_config,
    platform_path_max,
)


SHIPPED_CONFIG = Path(__file__).resolve().parent.parent / "config" / "settings.ini"


def _write_config(content: str) -> str:
    """Записывает временный файл конфигурации и возвращает путь."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.ini', delete=False, encoding='utf-8') as f:
        f.write(content)
        return f.name


class TestConfigLoader:
    """Тесты для класса ConfigLoader."""

    def test_load_shipped_config(self):
        """Тест загрузки конфигурации из репозитория."""
        config = load_config(str(SHIPPED_CONFIG))

        assert config.logging.level == "INFO"
        assert config.logging.log_file is None
        assert config.logging.max_log_size == 10
        assert config.logging.backup_count == 5
        assert config.scanner.sentinel == DEFAULT_SENTINEL
        assert config.scanner.max_path_length == platform_path_max()

    def test_load_full_config(self):
        """Тест загрузки всех параметров."""
        temp_config = _write_config("""[logging]
level = DEBUG
log_file = logs/setfiletime.log
max_log_size = 2
backup_count = 1

[scanner]
max_path_length = 1024
sentinel = <<EOL>>
""")
        try:
            config = load_config(temp_config)

            assert config.logging.level == "DEBUG"
            assert config.logging.log_file == Path("logs/setfiletime.log")
            assert config.logging.max_log_size == 2
            assert config.logging.backup_count == 1
            assert config.scanner.max_path_length == 1024
            assert config.scanner.sentinel == "<<EOL>>"
        finally:
            os.unlink(temp_config)

    def test_missing_sections_use_defaults(self):
        """Тест значений по умолчанию для отсутствующих секций."""
        temp_config = _write_config("[other]\nkey = value\n")
        try:
            config = load_config(temp_config)
            assert config == default_config()
        finally:
            os.unlink(temp_config)

    def test_config_file_not_found(self):
        """Тест ошибки при отсутствии явно указанного файла."""
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent_config.ini")

    def test_default_path_missing_uses_defaults(self, tmp_path, monkeypatch):
        """Тест запуска без файла конфигурации по умолчанию."""
        monkeypatch.chdir(tmp_path)
        assert load_config() == default_config()

    def test_default_path_loaded_when_present(self, tmp_path, monkeypatch):
        """Тест загрузки config/settings.ini из текущего каталога."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "settings.ini").write_text("[logging]\nlevel = WARNING\n")

        assert load_config().logging.level == "WARNING"

    def test_invalid_log_level(self):
        """Тест валидации некорректного уровня логирования."""
        temp_config = _write_config("[logging]\nlevel = INVALID_LEVEL\n")
        try:
            with pytest.raises(ValueError, match="Invalid logging level"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_invalid_max_path_length(self):
        """Тест валидации максимальной длины пути."""
        temp_config = _write_config("[scanner]\nmax_path_length = 0\n")
        try:
            with pytest.raises(ValueError, match="max_path_length"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_empty_sentinel(self):
        """Тест валидации пустого маркера."""
        temp_config = _write_config("[scanner]\nsentinel =\n")
        try:
            with pytest.raises(ValueError, match="sentinel"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_non_integer_value(self):
        """Тест нечислового значения."""
        temp_config = _write_config("[logging]\nbackup_count = many\n")
        try:
            with pytest.raises(ValueError, match="Error loading configuration"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_reload_config(self):
        """Тест перезагрузки конфигурации."""
        loader = ConfigLoader(str(SHIPPED_CONFIG))
        config1 = loader.load_config()
        config2 = loader.reload_config()

        assert config1 == config2
        assert loader.get_config() is config2

    def test_get_config_without_load(self):
        """Тест получения конфигурации без предварительной загрузки."""
        loader = ConfigLoader(str(SHIPPED_CONFIG))

        with pytest.raises(ValueError, match="Configuration is not loaded"):
            loader.get_config()


class TestDefaults:
    """Тесты для значений по умолчанию."""

    def test_default_config(self):
        """Тест конфигурации по умолчанию."""
        config = default_config()

        assert isinstance(config, Config)
        assert config.logging.level == "INFO"
        assert config.logging.log_file is None
        assert config.scanner.sentinel == "!*END*!"
        assert config.scanner.max_path_length > 0

    def test_scanner_config_default_length(self):
        """Тест длины пути по умолчанию."""
        assert ScannerConfig().max_path_length == platform_path_max()

    def test_run_options_defaults(self):
        """Тест параметров запуска по умолчанию."""
        options = RunOptions()

        assert options.time_specs == []
        assert options.list_file is None
        assert options.config_path is None
        assert options.verbose is False
        assert options.extra_args == []
        assert options.show_help is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
