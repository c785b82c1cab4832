import logging
import sys


class Log:
    """Centralized logging for the extraction desk.

    Keyword context passed to any level method (for example ``document_id``)
    is appended to the message as ``key=value`` pairs, so log lines about one
    document can be grepped together.
    """

    _logger: logging.Logger = logging.getLogger("extractdesk")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level and attach a single stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._emit(logging.INFO, message, context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._emit(logging.ERROR, message, context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._emit(logging.WARNING, message, context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        """Log a debug message (prompts and raw collaborator replies)."""
        cls._emit(logging.DEBUG, message, context)

    @classmethod
    def _emit(cls, level: int, message: str, context: dict[str, object]) -> None:
        if not cls._logger.isEnabledFor(level):
            return
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} [{pairs}]"
        cls._logger.log(level, message)
