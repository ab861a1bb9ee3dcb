"""
Command manager tests: routing, default commands, duplicates and named dispatch.
"""
import unittest
from unittest import TestCase, mock

from helmsman import CommandManager, DuplicateCommandError, Param, UnknownRequirementError, descriptor
from helmsman import messages


class TestRouting(TestCase):
    def setUp(self):
        self.manager = CommandManager()
        self.sent = []
        for key in messages.DEFAULT_KEYS:
            self.manager.register_message(key, lambda caller, context, key=key: self.sent.append((key, context)))

        self.pay = mock.Mock(return_value="paid")
        self.balance = mock.Mock(return_value=100)
        self.manager.register(descriptor("bank", "pay", params=[Param("name", str)], aliases=["give"])(self.pay))
        self.manager.register(descriptor("bank", "balance", default=True)(self.balance))

    def testRoutesByName(self):
        self.assertEqual(self.manager.execute("steve", "bank", ["pay", "alice"]), "paid")
        self.pay.assert_called_once_with("steve", "alice")

    def testRoutesByAliasIgnoringCase(self):
        self.manager.execute("steve", "BANK", ["Give", "alice"])
        self.pay.assert_called_once_with("steve", "alice")

    def testFallsBackToDefault(self):
        self.assertEqual(self.manager.execute("steve", "bank", []), 100)
        self.balance.assert_called_once_with("steve")

    def testDefaultReceivesUnmatchedTokens(self):
        self.manager.execute("steve", "bank", ["steal"])
        self.balance.assert_not_called()
        self.assertEqual(self.sent, [(messages.TOO_MANY_ARGUMENTS, messages.MessageContext("bank", "balance"))])

    def testUnknownCommand(self):
        self.assertIsNone(self.manager.execute("steve", "shop", ["buy", "apple"]))
        self.assertEqual(self.sent, [(messages.UNKNOWN_COMMAND, messages.MessageContext("shop", "buy"))])

    def testUnknownCommandWithoutTokens(self):
        self.manager.execute("steve", "shop", [])
        self.assertEqual(self.sent, [(messages.UNKNOWN_COMMAND, messages.MessageContext("shop", ""))])

    def testGetCommand(self):
        self.assertEqual(self.manager.get_command("bank", "give").name, "pay")
        self.assertEqual(self.manager.get_command("bank").name, "balance")
        self.assertIsNone(self.manager.get_command("bank", "steal"))
        self.assertIsNone(self.manager.get_command("shop"))

    def testExecuteNamed(self):
        self.manager.execute_named("steve", "bank", "pay", {"na": "alice"})
        self.pay.assert_called_once_with("steve", "alice")

    def testExecuteNamedUnknownCommand(self):
        self.manager.execute_named("steve", "bank", "steal", {})
        self.assertEqual(self.sent, [(messages.UNKNOWN_COMMAND, messages.MessageContext("bank", "steal"))])


class TestRegistration(TestCase):
    def setUp(self):
        self.manager = CommandManager()
        self.manager.register(descriptor("bank", "pay", aliases=["give"], default=True)(mock.Mock()))

    def testDuplicateName(self):
        with self.assertRaises(DuplicateCommandError):
            self.manager.register(descriptor("bank", "pay")(mock.Mock()))

    def testNameCollidesWithAlias(self):
        with self.assertRaises(DuplicateCommandError):
            self.manager.register(descriptor("bank", "give")(mock.Mock()))

    def testDuplicateDefault(self):
        with self.assertRaises(DuplicateCommandError) as context:
            self.manager.register(descriptor("bank", "balance", default=True)(mock.Mock()))
        self.assertIn("'bank pay'", context.exception.options["hint"])
        self.assertIsNone(self.manager.get_command("bank", "balance"))

    def testSameNameUnderAnotherParent(self):
        command = self.manager.register(descriptor("shop", "pay")(mock.Mock()))
        self.assertEqual(command.qualname, "shop pay")

    def testFailedBuildRegistersNothing(self):
        with self.assertRaises(UnknownRequirementError):
            self.manager.register(descriptor("bank", "audit", requirements=["admin"])(mock.Mock()))
        self.assertIsNone(self.manager.get_command("bank", "audit"))

    def testNameDefaultsToHyphenatedHandlerName(self):
        def show_balance(sender):
            pass

        command = self.manager.register(descriptor("bank")(show_balance))
        self.assertEqual(command.name, "show-balance")
        self.assertIs(self.manager.get_command("bank", "show-balance"), command)


if __name__ == "__main__":
    unittest.main()
