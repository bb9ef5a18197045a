import logging
import re
import sys
from typing import Any, Mapping, Optional, Pattern

DEFAULT_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s"

# Parameter names whose values are masked when logged as context
SENSITIVE_NAMES = re.compile(r"key|token|secret|passw(or)?d|auth|signature|session", re.IGNORECASE)
REDACTED = "***"


def redact(value: Any, pattern: Pattern[str] = SENSITIVE_NAMES) -> Any:
    """Copy ``value`` with the values of credential-like keys masked.

    Nested mappings and lists are walked; anything else is returned as is.
    """
    if isinstance(value, Mapping):
        return {
            key: REDACTED if isinstance(key, str) and pattern.search(key) else redact(item, pattern)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item, pattern) for item in value)
    return value


class Logger:
    """Logger used by the API client and its transports.

    Keyword context is appended to the message as ``key=value`` pairs. API
    wrappers usually carry keys and tokens as default parameters, so context
    values are passed through :func:`redact` before they are rendered, and a
    context keyword whose own name looks like a credential is masked whole.
    """

    def __init__(
        self,
        name: str = "apicaller",
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_to_console: bool = True,
        log_file: Optional[str] = None,
        redact_pattern: Optional[Pattern[str]] = SENSITIVE_NAMES,
    ):
        """Initialize the logger.

        Args:
            name: Logger name
            level: Minimum logging level
            format_string: Custom format string for log messages
            log_to_console: Whether to log to stdout
            log_file: Optional file path to log to
            redact_pattern: Names whose values are masked in context, None to log everything
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.redact_pattern = redact_pattern

        # Re-creating a logger with the same name must not duplicate output
        self.logger.handlers.clear()

        formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
        handlers = []
        if log_to_console:
            handlers.append(logging.StreamHandler(sys.stdout))
        if log_file:
            handlers.append(logging.FileHandler(log_file))
        for handler in handlers:
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, context)

    def render_context(self, context: Mapping[str, Any]) -> str:
        if self.redact_pattern is not None:
            context = redact(context, self.redact_pattern)
        return " ".join(f"{key}={value}" for key, value in context.items())

    def _log(self, level: int, message: str, context: Mapping[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} - {self.render_context(context)}"
        self.logger.log(level, message)


class DefaultLogger(Logger):
    """Pre-configured stdout logger for the API client."""

    def __init__(
        self,
        name: str = "apicaller",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
    ):
        super().__init__(name=name, level=level, log_to_console=True, log_file=log_file)
