# source_query/logger.py

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from source_query.config import Config
from source_query.singleton import Singleton

ROOT_LOGGER_NAME = "app"
FILE_HANDLER_NAME = "source_query.file"
CONSOLE_HANDLER_NAME = "source_query.console"

# ANSI цвета
COLORS = {
    'DEBUG': '\033[36m',  # Cyan
    'INFO': '\033[32m',  # Green
    'WARNING': '\033[33m',  # Yellow
    'ERROR': '\033[31m',  # Red
    'CRITICAL': '\033[1;31m',  # Bold red
    'RESET': '\033[0m'
}


class ColoredFormatter(logging.Formatter):

    def format(self, record):
        color = COLORS.get(record.levelname, COLORS['RESET'])
        # Сохраняем оригинальный формат во время форматирования
        orig_fmt = self._style._fmt
        try:
            self._style._fmt = f"{color}{orig_fmt}{COLORS['RESET']}"
            return super().format(record)
        finally:
            self._style._fmt = orig_fmt


class Logger(Singleton):
    """
    Единый логгер приложения. Использование:
      logger = Logger(config)
      logger.info("Hello")
    Настраивает логгер "app"; классы библиотеки пишут в его потомков через LoggerMixin.
    """

    def __init__(self, config=None):
        # Защита от повторной инициализации
        if hasattr(self, '_initialized'):
            return

        config = config or Config()
        log_file = config.get("LOG.LOG_FILE", "./logs/app.log")
        level_file = config.get("LOG.LEVEL_FILE_LOG", "INFO")
        level_console = config.get("LOG.LEVEL_CONSOLE_LOG", "INFO")
        main_level = config.get("LOG.MAIN_LEVEL_LOG", "INFO")

        # Создаём папку логов
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        self._logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._logger.setLevel(getattr(logging, main_level))
        self._logger.propagate = False

        file_formatter = logging.Formatter(
            "[%(asctime)s][%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_formatter = ColoredFormatter(
            "[%(asctime)s][%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        # Добавляем только если ещё не добавлены; чужие обработчики (например, pytest) не в счёт
        self._handlers = [h for h in self._logger.handlers
                          if h.get_name() in (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME)]
        if self._handlers:
            self._initialized = True
            return

        file_handler = TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=14,  # 2 недели
            encoding="utf-8"
        )
        file_handler.setLevel(getattr(logging, level_file))
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setFormatter(file_formatter)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, level_console))
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(console_formatter)

        self._handlers = [file_handler, console_handler]
        for handler in self._handlers:
            self._logger.addHandler(handler)

        self._initialized = True

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self._logger.critical(msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        self._logger.exception(msg, *args, **kwargs)

    def get_logger(self) -> logging.Logger:
        return self._logger

    def close(self):
        """Закрывает свои обработчики (файл лога остаётся на диске)."""
        for handler in self._handlers:
            handler.close()
            self._logger.removeHandler(handler)
        self._handlers = []


class LoggerMixin:
    """
    Даёт классу self.logger — потомка логгера "app".
    Пока Logger не сконфигурирован, сообщения уходят в стандартную иерархию logging.
    """

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{type(self).__name__}")
