"""
Structured logging helpers.

Provides a decorator that records the duration and outcome of backend calls,
plus a standalone performance metric helper.
"""

import inspect
import time
from functools import wraps
from typing import Optional

import structlog


def log_operation(operation_name: str, component: Optional[str] = None):
    """Decorator to log the duration and outcome of a backend operation.

    Works with both coroutine functions and plain functions. Exceptions are
    logged and re-raised unchanged.
    """
    def decorator(func):
        logger = structlog.get_logger(func.__module__)
        context = {
            'log_type': "BACKEND",
            'component': component or func.__module__.split('.')[-1],
            'operation_type': operation_name,
        }

        def _log_failure(start_time: float, error: Exception) -> None:
            logger.error(
                f"Failed to complete {operation_name}",
                duration=time.time() - start_time,
                success=False,
                error_type=type(error).__name__,
                error=str(error),
                **context
            )

        def _log_success(start_time: float) -> None:
            logger.debug(
                f"Successfully completed {operation_name}",
                duration=time.time() - start_time,
                success=True,
                **context
            )

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(start_time, e)
                    raise
                _log_success(start_time)
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(start_time, e)
                raise
            _log_success(start_time)
            return result

        return wrapper
    return decorator


def log_performance_metrics(
    operation: str,
    duration: float,
    success: bool = True,
    **metrics
) -> None:
    """
    Log performance metrics.

    Args:
        operation: Operation name
        duration: Operation duration in seconds
        success: Whether operation was successful
        **metrics: Additional metrics to log
    """
    logger = structlog.get_logger('performance').bind(
        event_type="performance",
        log_type="PERFORMANCE"
    )

    logger.info(
        "Performance metric",
        operation=operation,
        duration=float(duration) if duration is not None else 0.0,
        success=bool(success),
        **metrics
    )
