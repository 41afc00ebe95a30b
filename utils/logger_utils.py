from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, Handler, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, Self, TextIO

if TYPE_CHECKING:
    from pathlib import Path

__all__: list[str] = ["LoggerUtils"]

type LevelType = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT: Final[int] = 2

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "TransRouter"

_CONSOLE_FORMAT: Final[str] = "%(levelname)s: %(message)s"
_FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-44s\t%(funcName)s\t%(message)s"


class LogLevel(NamedTuple):
    """Logging level as both name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Process-wide logging setup for the TransRouter namespace.

    The first instantiation attaches a console handler (WARNING and above) and, when a file name
    is given, a rotating UTF-8 file handler (DEBUG and above) to the namespace root logger.
    Later instantiations return the same object and leave the handlers untouched.
    Modules obtain their logger through ``LoggerUtils.get_logger(__name__)`` and need no setup.

    Attributes:
        _LOGGER_NAMESPACE (str): Prefix of every logger handed out by ``get_logger``.
        _configured (bool): Whether handlers have been attached.
        _instance (LoggerUtils | None): The singleton instance.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, use_null_console: bool = False) -> None:
        """Attach handlers to the namespace root logger.

        Args:
            filename (str | Path): Absolute path of the log file. Empty disables file logging.
            use_null_console (bool): Discard console output instead of writing to stderr.
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        # The logger level must not be stricter than the handler levels.
        self.root_logger.setLevel(DEFAULT_LOG_LEVEL)

        use_null: bool = bool(use_null_console) or sys.stderr is None
        self._add_handler(NullHandler() if use_null else self._console_handler())

        filename = str(filename)
        if filename.strip():
            file_handler: RotatingFileHandler | None = self._file_handler(filename)
            if file_handler is not None:
                self._add_handler(file_handler)
        else:
            self.root_logger.debug("No log file configured. Logging to the file is not performed.")

        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Redirect ``warnings`` output to the logger. Signature follows ``warnings.showwarning``."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    @classmethod
    def initialize(cls, namespace: str) -> None:
        """Change the logger namespace before the first instantiation.

        Raises:
            RuntimeError: If handlers have already been attached.
        """
        if cls._configured:
            msg = "LoggerUtils is already configured. Reinitialization is not allowed."
            raise RuntimeError(msg)
        cls._LOGGER_NAMESPACE = namespace

    @staticmethod
    def _console_handler() -> StreamHandler[TextIO]:
        handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        handler.setLevel(logging.WARNING)
        handler.setFormatter(Formatter(_CONSOLE_FORMAT))
        return handler

    def _file_handler(self, filename: str) -> RotatingFileHandler | None:
        try:
            handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            self.root_logger.error("Incorrect log file name: %s\nLogging to the file is not performed.", filename)
            return None
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(Formatter(_FILE_FORMAT))
        return handler

    def _add_handler(self, handler: Handler) -> None:
        if any(type(h) is type(handler) for h in self.root_logger.handlers):
            self.root_logger.warning("%s is already configured.", type(handler).__name__)
            return
        self.root_logger.addHandler(handler)

    def set_level(self, level: LevelType) -> None:
        """Set the namespace root logger level, falling back to INFO for unknown names."""
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            self.root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s' specified.\nLogging level set to 'INFO'.", level)

    def get_level(self) -> LogLevel:
        level_value: int = self.root_logger.getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger inside the configured namespace.

        Args:
            name (str | None): Dotted module name. None returns the namespace root logger.

        Returns:
            logging.Logger: The logger instance.
        """
        namespace: str = LoggerUtils._LOGGER_NAMESPACE
        if not namespace:
            return logging.getLogger(name or None)
        return logging.getLogger(f"{namespace}.{name}" if name else namespace)
