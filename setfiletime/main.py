"""
Главный модуль CLI интерфейса утилиты setfiletime.

Разбирает опции командной строки, вычисляет целевое время и запускает
обработку списка файлов. Фатальные ошибки завершают программу с кодом 1,
ошибки по отдельным путям на код возврата не влияют.
"""

import argparse
import re
import sys
from typing import List, Optional

from .config_loader import Config, RunOptions, load_config, DEFAULT_CONFIG_PATH
from .file_ops import ListFileError
from .logger import SetFileTimeLogger
from .setter import TimestampSetter, create_setter
from .time_resolver import TimeResolver, TimeSpecError


EXIT_SUCCESS = 0
EXIT_FAILURE = 1

USAGE = "%(prog)s [-h] [-t N[Yy|Mm|Dd]] [-o YYYY[MM[DD]]] [-c CONFIG] [-v] listfile"

DESCRIPTION = """\
Updates the access and modification time of every file named in LISTFILE
to the time the program starts, or as optionally specified.

LISTFILE holds one path per line. A line ends at a newline or at the
marker !*END*! (text after the marker is ignored)."""

EPILOG = """\
Examples:

  # Set times to now
  setfiletime files.txt

  # Two years ago
  setfiletime -t 2 files.txt

  # Eighteen months ago
  setfiletime -t 18m files.txt

  # Midnight of 1 March 2020 (out of range days roll forward: 20200230 -> 1 March)
  setfiletime -o 20200301 files.txt
"""


# Опции, значение которых всегда берется из следующего аргумента
VALUE_OPTIONS = {
    '-t': 't',
    '--ago': 't',
    '-o': 'o',
    '--on': 'o',
}

ATTACHED_FORMS = {
    't': '--ago=',
    'o': '--on=',
}

_MISSING_VALUE = re.compile(r"argument -(\w)/--\w+: expected one argument")


class UsageError(Exception):
    """Исключение для некорректного использования командной строки."""
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """Парсер, который не завершает процесс сам, а сообщает об ошибке исключением."""

    def error(self, message):
        match = _MISSING_VALUE.match(message)
        if match:
            raise UsageError(f"Option {match.group(1)} requires an argument")
        raise UsageError(message)


class TimeSpecAction(argparse.Action):
    """
    Сохраняет опции -t и -o в общий список в порядке их указания.

    Каждая пара - (буква опции, аргумент).
    """

    def __init__(self, option_strings, dest, letter=None, **kwargs):
        self.letter = letter
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        specs = list(getattr(namespace, self.dest, None) or [])
        specs.append((self.letter, values))
        setattr(namespace, self.dest, specs)


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = _ArgumentParser(
        prog='setfiletime',
        usage=USAGE,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False
    )

    parser.add_argument(
        '-h', '--help',
        action='store_true',
        help='Show this help message and exit'
    )
    parser.add_argument(
        '-t', '--ago',
        dest='time_specs',
        action=TimeSpecAction,
        letter='t',
        metavar='N[Yy|Mm|Dd]',
        help='Set times to N periods before now. Periods are years by default, '
             'or months (M|m), or days (D|d)'
    )
    parser.add_argument(
        '-o', '--on',
        dest='time_specs',
        action=TimeSpecAction,
        letter='o',
        metavar='YYYY[MM[DD]]',
        help='Set times to midnight of this date. It may not be in the future'
    )
    parser.add_argument(
        '-c', '--config',
        default=None,
        help=f'Configuration file (default: {DEFAULT_CONFIG_PATH} if it exists)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Report every updated path and the resolved time'
    )
    parser.add_argument(
        'listfile',
        nargs='?',
        help='File with one path per line'
    )

    return parser


def _option_name(arg: str) -> str:
    """Возвращает имя неизвестной опции для сообщения об ошибке."""
    if arg.startswith('--'):
        return arg.split('=', 1)[0]
    return arg[1:2]


def attach_option_values(argv: List[str]) -> List[str]:
    """
    Присоединяет значения опций -t и -o к самим опциям.

    Следующий аргумент всегда считается значением опции, даже если
    он начинается с '-': ['-t', '-2d'] превращается в ['--ago=-2d'].

    Raises:
        UsageError: Если у опции нет следующего аргумента
    """
    result = []
    args = iter(argv)
    for arg in args:
        if arg == '--':
            result.append(arg)
            result.extend(args)
            break

        letter = VALUE_OPTIONS.get(arg)
        if letter is None:
            result.append(arg)
            continue

        value = next(args, None)
        if value is None:
            raise UsageError(f"Option {letter} requires an argument")
        result.append(ATTACHED_FORMS[letter] + value)
    return result


def parse_options(argv: Optional[List[str]] = None,
                  parser: Optional[argparse.ArgumentParser] = None) -> RunOptions:
    """
    Разбирает командную строку в RunOptions.

    Неизвестная опция считается ошибкой, даже если указана опция -h.

    Args:
        argv: Аргументы (по умолчанию sys.argv[1:])
        parser: Парсер (по умолчанию create_parser())

    Returns:
        RunOptions: Параметры запуска

    Raises:
        UsageError: Неизвестная опция или опция без обязательного значения
    """
    if parser is None:
        parser = create_parser()
    if argv is None:
        argv = sys.argv[1:]

    args, unknown = parser.parse_known_args(attach_option_values(argv))

    extra_args = []
    for arg in unknown:
        if arg.startswith('-') and arg != '-':
            raise UsageError(f"Illegal option: {_option_name(arg)}")
        extra_args.append(arg)

    if args.help:
        return RunOptions(show_help=True)

    return RunOptions(
        time_specs=args.time_specs or [],
        list_file=args.listfile,
        config_path=args.config,
        verbose=args.verbose,
        extra_args=extra_args
    )


def print_usage(parser: argparse.ArgumentParser) -> None:
    """Выводит справку в stderr."""
    parser.print_help(sys.stderr)


class SetFileTimeCLI:
    """Класс для выполнения одного запуска утилиты."""

    def __init__(self, parser: Optional[argparse.ArgumentParser] = None):
        self.parser = parser if parser is not None else create_parser()
        self.config: Optional[Config] = None
        self.logger: Optional[SetFileTimeLogger] = None
        self.setter: Optional[TimestampSetter] = None

    def setup(self, options: RunOptions) -> bool:
        """
        Загружает конфигурацию и настраивает логгер.

        Args:
            options: Параметры запуска

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = load_config(options.config_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"setfiletime: {e}", file=sys.stderr)
            return False

        if options.verbose:
            self.config.logging.level = 'DEBUG'

        try:
            self.logger = SetFileTimeLogger(self.config.logging)
        except OSError as e:
            print(f"setfiletime: cannot open log file: {e}", file=sys.stderr)
            return False

        if options.config_path:
            self.logger.log_config_loaded(options.config_path)

        self.setter = create_setter(self.config, self.logger)
        return True

    def run(self, options: RunOptions) -> int:
        """
        Вычисляет целевое время и обрабатывает файл списка.

        Args:
            options: Параметры запуска

        Returns:
            int: Код возврата (0 - успех, 1 - фатальная ошибка)
        """
        try:
            target_time = TimeResolver(self.logger).resolve(options.time_specs)
        except TimeSpecError as e:
            print(e, file=sys.stderr)
            print_usage(self.parser)
            return EXIT_FAILURE

        if options.list_file is None:
            print("No file provided", file=sys.stderr)
            print_usage(self.parser)
            return EXIT_FAILURE

        for extra in options.extra_args:
            self.logger.log_warning(f"Ignoring extra argument: {extra}")

        try:
            self.setter.run(options.list_file, target_time)
        except ListFileError as e:
            print(e, file=sys.stderr)
            return EXIT_FAILURE
        except KeyboardInterrupt:
            self.logger.log_critical_error("Interrupted")
            return EXIT_FAILURE

        return EXIT_SUCCESS

    def cleanup(self) -> None:
        """Закрывает обработчики логгера."""
        if self.logger:
            self.logger.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    parser = create_parser()

    try:
        options = parse_options(argv, parser)
    except UsageError as e:
        print(e, file=sys.stderr)
        print_usage(parser)
        return EXIT_FAILURE

    if options.show_help:
        print_usage(parser)
        return EXIT_SUCCESS

    cli = SetFileTimeCLI(parser)
    if not cli.setup(options):
        return EXIT_FAILURE

    try:
        return cli.run(options)
    finally:
        cli.cleanup()


if __name__ == "__main__":
    sys.exit(main())
