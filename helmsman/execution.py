"""
Execution providers: how a fully resolved invocation reaches its handler.

- SyncExecutionProvider: calls the handler on the calling thread and returns
  its result. A failure is raised as CommandExecutionError.
- AsyncExecutionProvider: submits the call to a thread pool and returns the
  concurrent.futures.Future. A failure is stored on the future as
  CommandExecutionError and logged at ERROR level.

Handlers are never retried; there is no cancellation or timeout.
"""
import functools
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

from .faults import CommandExecutionError
from .utils import Unset

logger = logging.getLogger(__name__)


def _invoke(parent, name, handler, arguments, /):
    try:
        return handler(*arguments)
    except Exception as error:
        raise CommandExecutionError(parent, name) from error


def _report(qualname, future, /):
    if future.cancelled():
        return
    if (error := future.exception()) is not None:
        logger.error("Asynchronous command '%s' failed", qualname, exc_info=error)


class ExecutionProvider(ABC):
    @abstractmethod
    def execute(self, parent, name, handler, arguments, /):
        """
        Invoke handler(*arguments) for the command "parent name".
        """


class SyncExecutionProvider(ExecutionProvider):
    def execute(self, parent, name, handler, arguments, /):
        return _invoke(parent, name, handler, arguments)


class AsyncExecutionProvider(ExecutionProvider):
    """
    Hands invocations off to a worker pool.

    Either pass an executor (owned by the caller) or let the provider create a
    ThreadPoolExecutor bounded by max_workers (owned by the provider and closed
    by shutdown()).
    """

    def __init__(self, *, max_workers=None, executor=Unset):
        if executor is Unset:
            self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="helmsman_")
            self._owned = True
        else:
            self._executor = executor
            self._owned = False

    def execute(self, parent, name, handler, arguments, /):
        future = self._executor.submit(_invoke, parent, name, handler, arguments)
        future.add_done_callback(functools.partial(_report, f"{parent} {name}"))
        return future

    def shutdown(self, wait=True):
        if self._owned:
            self._executor.shutdown(wait=wait)


__all__ = (
    "ExecutionProvider",
    "SyncExecutionProvider",
    "AsyncExecutionProvider",
)
