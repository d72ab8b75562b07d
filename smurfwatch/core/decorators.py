"""
Service layer decorators for common functionality.

This module provides the error-handling decorator applied to service entry
points.
"""

import functools
import inspect
import structlog
from typing import Any, Awaitable, Callable, Dict, ParamSpec, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ServiceException, ValidationError
from .riot_api.errors import RiotAPIError, UpstreamUnavailableError

logger = structlog.get_logger(__name__)

# Type variables for generic decorator typing
P = ParamSpec("P")
R = TypeVar("R")


def _call_context(
    func: Callable[..., Any], args: tuple, kwargs: dict
) -> Dict[str, Any]:
    """Method arguments (minus ``self``), truncated for log entries."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    context: Dict[str, Any] = {}
    for name, value in bound_args.arguments.items():
        if name == "self":
            continue
        if isinstance(value, str) and len(value) > 100:
            context[name] = value[:100] + "..."
        else:
            context[name] = str(value)[:200] if value is not None else None
    return context


def service_error_handler(
    service_name: str,
    include_context: bool = True,
    default_error_type: Type[ServiceException] = ServiceException,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Decorator for handling async service method errors with structured logging.

    Riot API errors and service exceptions propagate unchanged. Payloads that
    fail model validation come from upstream and raise
    :class:`UpstreamUnavailableError`. Any other ``ValueError`` becomes
    :class:`ValidationError`; anything else is wrapped in ``default_error_type``
    with the original error attached.

    :param service_name: Name of the service (e.g., "AnalysisOrchestrator")
    :param include_context: Whether to include method parameters in error context
    :param default_error_type: Exception type to wrap unexpected errors
    :returns: Decorated coroutine function

    :example:
        @service_error_handler("AnalysisOrchestrator")
        async def get_unified_analysis(self, puuid: str) -> AnalysisResult:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        operation_name = func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            context: Dict[str, Any] = {
                "service": service_name,
                "operation": operation_name,
            }
            if include_context:
                context.update(_call_context(func, args, kwargs))

            try:
                logger.debug("Service method called", **context)
                result = await func(*args, **kwargs)
                logger.debug("Service method completed successfully", **context)
                return result

            except RiotAPIError as e:
                # Callers need the upstream status to decide on retry or abort
                logger.warning(
                    "Riot API error in service operation - propagating to caller",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    status_code=e.status_code,
                    **context,
                )
                raise

            except ServiceException as e:
                logger.error(
                    "Service operation failed",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    error_context=e.context,
                    **context,
                )
                raise

            except PydanticValidationError as e:
                logger.error(
                    "Malformed upstream payload in service operation",
                    error_count=e.error_count(),
                    error_message=str(e),
                    **context,
                )
                raise UpstreamUnavailableError(
                    f"Malformed upstream payload: {e.title}",
                    response_data={"errors": e.errors(include_url=False)},
                ) from e

            except ValueError as e:
                logger.error(
                    "Validation error in service operation",
                    error_message=str(e),
                    **context,
                )
                raise ValidationError(
                    message=str(e),
                    service=service_name,
                    operation=operation_name,
                    context=context if include_context else {},
                ) from e

            except Exception as e:
                logger.error(
                    "Unexpected error in service operation",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise default_error_type(
                    message=f"Unexpected error in {service_name}.{operation_name}: {e}",
                    service=service_name,
                    operation=operation_name,
                    context=context if include_context else {},
                    original_error=e,
                ) from e

        return wrapper

    return decorator
