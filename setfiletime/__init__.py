"""
setfiletime

Утилита для установки времени доступа и модификации файлов по списку путей.
"""

__version__ = "1.0.0"
__description__ = "Set access and modification times of files named in a list file"
