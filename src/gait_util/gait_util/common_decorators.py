"""Defines commonly used function decorators."""

import functools

from gait_util.logconfig import create_logger

LOG = create_logger(__name__)


def unimplemented(message="This recipe is declared but not implemented.", error=NotImplementedError):
    """Decorator to mark functions as declared placeholders that always fail loudly.

    The decorated function body is never executed, the configured error type is
    raised instead so callers never receive a silent empty result.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            LOG.warning(f"{func.__name__} is not implemented: {message}")
            raise error(f"{func.__name__} is not implemented: {message}")

        return wrapper

    return decorator
