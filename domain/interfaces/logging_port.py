from typing_extensions import Protocol
from typing import Any, Optional


class BoundLogger(Protocol):
    """Protocol for a bound logger with context."""

    def debug(self, event: str, **kwargs: Any) -> None:
        """Log a debug message (scan internals, dedup hits)."""
        ...
    
    def info(self, event: str, **kwargs: Any) -> None:
        """
        Log an info message.
        
        Args:
            event: Event name, snake_case (e.g. "payment_recorded")
            **kwargs: Additional context fields
        """
        ...
    
    def warning(self, event: str, **kwargs: Any) -> None:
        """
        Log a warning message.
        
        Args:
            event: Event name
            **kwargs: Additional context fields
        """
        ...
    
    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None:
        """
        Log an error message.
        
        Args:
            event: Event name
            exc_info: Whether to include exception info
            **kwargs: Additional context fields
        """
        ...


class LoggingPort(Protocol):
    """Protocol for logging operations."""
    
    def bind(self, **kwargs: Any) -> BoundLogger:
        """
        Create a bound logger with context.
        
        Args:
            **kwargs: Context fields to bind to all log messages
            
        Returns:
            A bound logger with the specified context
        """
        ...


class NoOpLogger:
    """Used by services constructed without a logging port (mostly tests)."""

    def debug(self, event: str, **kwargs: Any) -> None: pass
    def info(self, event: str, **kwargs: Any) -> None: pass
    def warning(self, event: str, **kwargs: Any) -> None: pass
    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None: pass


def bind_or_noop(logging_port: Optional[LoggingPort], **context: Any) -> BoundLogger:
    if logging_port is None:
        return NoOpLogger()
    return logging_port.bind(**context)
