"""
Utility functions for logging proxy failures, including the transport error
that caused them.
"""

import logging


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.

    Args:
        obj: The object to convert to string

    Returns:
        A string representation of the object, falling back to safe alternatives
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _cause_chain(exception: BaseException) -> list:
    """Return the exception followed by its explicit causes, without cycles."""
    chain = []
    seen = set()
    current = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        current = getattr(current, "__cause__", None)
    return chain


def format_exception_message(exception: BaseException) -> str:
    """
    Format an exception as "Type: message", appending each explicit cause.

    Args:
        exception: The exception to format

    Returns:
        A one-line description such as
        "UpstreamError: ... (caused by ConnectError: connection refused)"
    """
    if exception is None:
        return "None"

    parts = [
        f"{type(exc).__name__}: {_safe_str(exc)}" for exc in _cause_chain(exception)
    ]
    message = parts[0]
    for cause in parts[1:]:
        message += f" (caused by {cause})"
    return message


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its cause chain as a single record.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Proxy]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    logger.log(
        level,
        f"{prefix} {format_exception_message(exception)}",
        exc_info=exception if exception is not None else False,
    )
