"""
Модуль для загрузки и валидации конфигурации утилиты.

Обеспечивает загрузку параметров из config/settings.ini с валидацией
и значениями по умолчанию для отсутствующих секций.
"""

import configparser
import os
from pathlib import Path
from typing import List, Optional, Tuple
from dataclasses import dataclass, field


DEFAULT_CONFIG_PATH = "config/settings.ini"
DEFAULT_SENTINEL = "!*END*!"
FALLBACK_PATH_MAX = 4096


def platform_path_max() -> int:
    """Возвращает максимальную длину пути для текущей платформы."""
    try:
        limit = os.pathconf("/", "PC_PATH_MAX")
    except (AttributeError, ValueError, OSError):
        return FALLBACK_PATH_MAX
    # -1 означает, что ограничение не определено
    return limit if limit > 0 else FALLBACK_PATH_MAX


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = "INFO"
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class ScannerConfig:
    """Конфигурация разбора списка путей."""
    max_path_length: int = field(default_factory=platform_path_max)
    sentinel: str = DEFAULT_SENTINEL


@dataclass
class Config:
    """Основная конфигурация приложения."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""
    
    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Инициализация загрузчика конфигурации.
        
        Args:
            config_path: Путь к файлу конфигурации
        """
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None
    
    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла.
        
        Returns:
            Config: Объект конфигурации
            
        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ValueError: Если конфигурация некорректна
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        
        config_parser = configparser.ConfigParser(interpolation=None)
        
        try:
            config_parser.read(self.config_path, encoding='utf-8')
            
            self._config = Config(
                logging=self._load_logging_config(config_parser),
                scanner=self._load_scanner_config(config_parser)
            )
        except (configparser.Error, ValueError) as e:
            raise ValueError(f"Error loading configuration: {e}")
        
        self._validate_config()
        return self._config
    
    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'
        defaults = LoggingConfig()
        
        if not parser.has_section(section):
            return defaults
        
        log_file = parser.get(section, 'log_file', fallback='').strip()
        
        return LoggingConfig(
            level=parser.get(section, 'level', fallback=defaults.level),
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=defaults.max_log_size),
            backup_count=parser.getint(section, 'backup_count', fallback=defaults.backup_count)
        )
    
    def _load_scanner_config(self, parser: configparser.ConfigParser) -> ScannerConfig:
        """Загружает конфигурацию разбора списка путей."""
        section = 'scanner'
        defaults = ScannerConfig()
        
        if not parser.has_section(section):
            return defaults
        
        return ScannerConfig(
            max_path_length=parser.getint(section, 'max_path_length', fallback=defaults.max_path_length),
            sentinel=parser.get(section, 'sentinel', fallback=defaults.sentinel)
        )
    
    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Configuration is not loaded")
        validate_config(self._config)
    
    def get_config(self) -> Config:
        """
        Возвращает загруженную конфигурацию.
        
        Raises:
            ValueError: Если конфигурация не загружена
        """
        if self._config is None:
            raise ValueError("Configuration is not loaded. Call load_config() first.")
        return self._config
    
    def reload_config(self) -> Config:
        """Перезагружает конфигурацию из файла."""
        self._config = None
        return self.load_config()


def validate_config(config: Config) -> None:
    """
    Проверяет значения конфигурации.
    
    Raises:
        ValueError: Если какое-либо значение некорректно
    """
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config.logging.level.upper() not in valid_levels:
        raise ValueError(f"Invalid logging level: {config.logging.level}")
    
    if config.logging.max_log_size <= 0:
        raise ValueError("max_log_size must be greater than 0")
    
    if config.logging.backup_count < 0:
        raise ValueError("backup_count cannot be negative")
    
    if config.scanner.max_path_length <= 0:
        raise ValueError("max_path_length must be greater than 0")
    
    if not config.scanner.sentinel:
        raise ValueError("sentinel cannot be empty")


def default_config() -> Config:
    """Возвращает конфигурацию со значениями по умолчанию."""
    return Config()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Удобная функция для загрузки конфигурации.
    
    Если путь не указан явно и файла по умолчанию нет, используются
    значения по умолчанию. Явно указанный путь обязан существовать.
    
    Args:
        config_path: Путь к файлу конфигурации
        
    Returns:
        Config: Объект конфигурации
    """
    if config_path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            return default_config()
        config_path = DEFAULT_CONFIG_PATH
    
    loader = ConfigLoader(config_path)
    return loader.load_config()


@dataclass
class RunOptions:
    """Параметры одного запуска, собранные из командной строки."""
    time_specs: List[Tuple[str, str]] = field(default_factory=list)
    list_file: Optional[str] = None
    config_path: Optional[str] = None
    verbose: bool = False
    extra_args: List[str] = field(default_factory=list)
    show_help: bool = False
