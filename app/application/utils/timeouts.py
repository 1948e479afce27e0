from __future__ import annotations

from concurrent.futures import Executor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, TypeVar

from app.application.exceptions import CollaboratorError, CollaboratorTimeoutError

T = TypeVar("T")


def call_with_timeout(
    executor: Executor,
    timeout_seconds: float,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Run a collaborator call with a bounded wait.

    Raises CollaboratorTimeoutError when the call does not finish in time and
    CollaboratorError (chained) when it raises.
    """
    future = executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError as e:
        future.cancel()
        raise CollaboratorTimeoutError(f"{getattr(func, '__name__', 'call')} timed out after {timeout_seconds}s") from e
    except CollaboratorError:
        raise
    except Exception as e:
        raise CollaboratorError(f"{getattr(func, '__name__', 'call')} failed: {e}") from e
