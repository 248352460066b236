"""
Logging adapter that implements LoggingPort protocol.

This adapter wraps structlog so the application layer only depends on the port.
"""
from typing import Any
from infrastructure.logging.structlog_logs import logger as structlog_logger


class StructlogBoundLogger:
    """
    Wrapper for structlog bound logger that implements BoundLogger protocol.
    """
    
    def __init__(self, bound_logger):
        self._logger = bound_logger

    def debug(self, event: str, **kwargs: Any) -> None:
        self._logger.debug(event, **kwargs)
    
    def info(self, event: str, **kwargs: Any) -> None:
        self._logger.info(event, **kwargs)
    
    def warning(self, event: str, **kwargs: Any) -> None:
        self._logger.warning(event, **kwargs)
    
    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(event, exc_info=exc_info, **kwargs)


class LoggingAdapter:
    """
    Adapter that implements LoggingPort for structured JSON logging
    with context binding.
    """
    
    def bind(self, **kwargs: Any) -> StructlogBoundLogger:
        """
        Create a bound logger with context.
        
        Args:
            **kwargs: Context fields to bind to all log messages (installment_id, step, ...)
            
        Returns:
            A bound logger with the specified context
        """
        return StructlogBoundLogger(structlog_logger.bind(**kwargs))
