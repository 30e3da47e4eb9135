from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, TextIO, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

__all__: list[str] = ["LoggerUtils"]

LevelType: TypeAlias = Literal[
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
DEFAULT_NAMESPACE: Final[str] = "UniversalTranslator"

_CONSOLE_FORMAT: Final[str] = "%(message)s"
_FILE_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-44s\t%(funcName)s\t%(message)s"
)


class LogLevel(NamedTuple):
    """Logging level as both name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Process-wide logging setup for the translator.

    All loggers live below one namespace so the console and file handlers only have to be
    attached once, to the namespace root. ``configure`` is idempotent; ``reset`` detaches
    everything again and is meant for tests.

    Attributes:
        _namespace (ClassVar[str]): Namespace prepended to every logger name.
        _configured (ClassVar[bool]): Whether handlers have been attached.
    """

    _namespace: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _original_showwarning: ClassVar[Callable[..., None] | None] = None

    @classmethod
    def configure(
        cls,
        filename: str | Path = "",
        *,
        level: LevelType = "INFO",
        use_null_console: bool = False,
    ) -> logging.Logger:
        """Attach console and optional file handlers to the namespace root logger.

        Args:
            filename (str | Path): Log file path. Empty disables file logging.
            level (LevelType): Level of the namespace root logger.
            use_null_console (bool): Use a NullHandler instead of writing to stderr.

        Returns:
            logging.Logger: The namespace root logger.
        """
        root_logger: logging.Logger = cls.get_logger()
        if cls._configured:
            root_logger.debug("Logging is already configured.")
            return root_logger

        cls.set_level(level)
        if use_null_console or sys.stderr is None:
            root_logger.addHandler(NullHandler())
        else:
            console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
            # stderr is for the operator; details go to the file.
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(Formatter(_CONSOLE_FORMAT))
            root_logger.addHandler(console_handler)

        filename = str(filename)
        if filename.strip():
            cls._attach_file_handler(root_logger, filename)

        cls._original_showwarning = warnings.showwarning
        warnings.showwarning = cls._warning_to_log
        cls._configured = True
        return root_logger

    @classmethod
    def _attach_file_handler(cls, root_logger: logging.Logger, filename: str) -> None:
        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            root_logger.error("Cannot open log file '%s'. Logging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(Formatter(_FILE_FORMAT))
        root_logger.addHandler(file_handler)

    @classmethod
    def _warning_to_log(
        cls,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Replacement for ``warnings.showwarning`` that routes warnings into the log."""
        _ = file, line
        cls.get_logger().warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    @classmethod
    def reset(cls) -> None:
        """Detach and close every handler on the namespace root logger.

        The namespace level is cleared so records propagate as if `configure` had never run.
        """
        root_logger: logging.Logger = cls.get_logger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)
        if cls._original_showwarning is not None:
            warnings.showwarning = cls._original_showwarning
            cls._original_showwarning = None
        cls._configured = False

    @classmethod
    def set_level(cls, level: str) -> None:
        """Set the namespace root level, falling back to INFO for unknown names."""
        root_logger: logging.Logger = cls.get_logger()
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            root_logger.setLevel(DEFAULT_LOG_LEVEL)
            root_logger.warning("Unknown logging level '%s' specified. Logging level set to 'INFO'.", level)

    @classmethod
    def get_level(cls) -> LogLevel:
        """Return the effective level of the namespace root logger."""
        level_value: int = cls.get_logger().getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger below the translator namespace.

        Args:
            name (str | None): Logger name, usually ``__name__``. None returns the namespace root.

        Returns:
            logging.Logger: The logger instance.
        """
        namespace: str = LoggerUtils._namespace
        if not namespace:
            return logging.getLogger(name)
        return logging.getLogger(f"{namespace}.{name}" if name else namespace)
