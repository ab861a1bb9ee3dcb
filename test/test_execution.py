"""
Execution provider tests.

Scope
- Synchronous execution returns the handler result and wraps failures.
- Asynchronous execution returns a future, stores wrapped failures on it and
  logs them at ERROR level.
"""
import threading
import unittest
from concurrent.futures import Future, ThreadPoolExecutor
from unittest import TestCase

from helmsman import (
    AsyncExecutionProvider,
    CommandExecutionError,
    CommandManager,
    Param,
    SyncExecutionProvider,
    descriptor,
)


def fail(*arguments):
    raise ValueError("boom")


class TestSyncExecution(TestCase):
    def testReturnsHandlerResult(self):
        provider = SyncExecutionProvider()
        self.assertEqual(provider.execute("bank", "pay", lambda caller, amount: amount * 2, ["steve", 4]), 8)

    def testWrapsHandlerFailure(self):
        with self.assertRaises(CommandExecutionError) as context:
            SyncExecutionProvider().execute("bank", "pay", fail, ["steve"])
        self.assertEqual(context.exception.qualname, "bank pay")
        self.assertIsInstance(context.exception.__cause__, ValueError)


class TestAsyncExecution(TestCase):
    def setUp(self):
        self.provider = AsyncExecutionProvider(max_workers=2)
        self.addCleanup(self.provider.shutdown)

    def testRunsOnWorkerThread(self):
        future = self.provider.execute("bank", "pay", lambda caller: threading.current_thread().name, ["steve"])
        self.assertIsInstance(future, Future)
        self.assertTrue(future.result(timeout=5).startswith("helmsman_"))

    def testStoresAndLogsFailure(self):
        with self.assertLogs("helmsman.execution", level="ERROR") as logs:
            future = self.provider.execute("bank", "pay", fail, ["steve"])
            self.provider.shutdown(wait=True)

        error = future.exception(timeout=5)
        self.assertIsInstance(error, CommandExecutionError)
        self.assertIsInstance(error.__cause__, ValueError)
        self.assertIn("bank pay", logs.output[0])

    def testBorrowedExecutorIsNotShutDown(self):
        executor = ThreadPoolExecutor(max_workers=1)
        self.addCleanup(executor.shutdown)
        provider = AsyncExecutionProvider(executor=executor)
        provider.shutdown()
        self.assertEqual(executor.submit(int, "3").result(timeout=5), 3)


class TestAsynchronousCommands(TestCase):
    def testManagerDispatchesToWorkerPool(self):
        manager = CommandManager()
        self.addCleanup(manager.shutdown)
        command = manager.register(
            descriptor("bank", "pay", params=[Param("amount", int)], asynchronous=True)(lambda caller, amount: amount + 1)
        )
        future = manager.execute("steve", "bank", ["pay", "41"])
        self.assertTrue(command.asynchronous)
        self.assertEqual(future.result(timeout=5), 42)

    def testSynchronousCommandRaises(self):
        manager = CommandManager()
        manager.register(descriptor("bank", "pay")(fail))
        with self.assertRaises(CommandExecutionError):
            manager.execute("steve", "bank", ["pay"])


if __name__ == "__main__":
    unittest.main()
