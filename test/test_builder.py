"""
Argument definition builder tests.

Scope
- Validate parameter classification into argument variants.
- Validate naming and description fallbacks.
- Validate the ordering rules and every registration error.

Conventions
- Test method names follow CamelCase per project convention.
- Descriptors are built directly against fresh registries.
"""
import enum
import io
import unittest
from unittest import TestCase

from rich.console import Console

from helmsman import (
    CollectionArgument,
    Descriptor,
    EmptyFlagGroupError,
    EnumArgument,
    FlagArgument,
    Flags,
    FlagSpec,
    InvalidSenderTypeError,
    JoinedStringArgument,
    MalformedFlagError,
    MisplacedArgumentError,
    Param,
    RequirementRegistry,
    ResolvedArgument,
    ResolverRegistry,
    SenderValidator,
    SplitStringArgument,
    UnknownRequirementError,
    UnregisteredArgumentTypeError,
    UnsupportedCollectionTypeError,
    build,
)


class Player:
    pass


class Shape(enum.Enum):
    CIRCLE = 1
    SQUARE = 2


def handler(*arguments):
    pass


def describe(*params, **options):
    return Descriptor(handler, "shop", "buy", params=params, **options)


class BuilderTestCase(TestCase):
    def setUp(self):
        self.resolvers = ResolverRegistry()
        self.requirements = RequirementRegistry()
        self.senders = SenderValidator()

    def build(self, descriptor):
        return build(descriptor, self.resolvers, self.requirements, self.senders)


class TestClassification(BuilderTestCase):
    """Parameters are classified by declared type and modifiers."""

    def testSimpleTypes(self):
        definition = self.build(describe(Param("name", str), Param("amount", int), Param("shape", Shape)))
        kinds = [type(argument) for argument in definition.arguments]
        self.assertEqual(kinds, [ResolvedArgument, ResolvedArgument, EnumArgument])
        self.assertFalse(definition.limitless)

    def testCollections(self):
        for type in (list[int], tuple[int, ...], set[str], frozenset[float]):
            with self.subTest(type=type):
                definition = self.build(describe(Param("values", type)))
                argument, = definition.arguments
                self.assertIsInstance(argument, CollectionArgument)
                self.assertTrue(argument.limitless)
                self.assertTrue(definition.limitless)

    def testSplitCollection(self):
        argument, = self.build(describe(Param("values", list[int], split=","))).arguments
        self.assertIsInstance(argument, SplitStringArgument)
        self.assertFalse(argument.limitless)

    def testJoinedString(self):
        argument, = self.build(describe(Param("message", str, join=" "))).arguments
        self.assertIsInstance(argument, JoinedStringArgument)
        self.assertTrue(argument.limitless)

    def testFlags(self):
        definition = self.build(describe(Param("flags", Flags), flags=[FlagSpec("s", "silent")]))
        argument, = definition.arguments
        self.assertIsInstance(argument, FlagArgument)
        self.assertEqual(len(definition.flags), 1)

    def testRegisteredResolverWinsOverEnum(self):
        self.resolvers.register(Shape, lambda caller, token: Shape.CIRCLE)
        argument, = self.build(describe(Param("shape", Shape))).arguments
        self.assertIsInstance(argument, ResolvedArgument)

    def testUnregisteredType(self):
        with self.assertRaises(UnregisteredArgumentTypeError) as context:
            self.build(describe(Param("player", Player)))
        self.assertEqual(context.exception.options["argument"], "player")
        self.assertEqual(context.exception.options["command"], "shop buy")

    def testUnsupportedCollections(self):
        for type in (dict[str, int], tuple[int, int], tuple[int]):
            with self.subTest(type=type):
                with self.assertRaises(UnsupportedCollectionTypeError):
                    self.build(describe(Param("values", type)))

    def testUnregisteredCollectionElement(self):
        with self.assertRaises(UnregisteredArgumentTypeError):
            self.build(describe(Param("players", list[Player])))


class TestNaming(BuilderTestCase):
    def testDefaultNameIsHyphenated(self):
        argument, = self.build(describe(Param("targetPlayer", str))).arguments
        self.assertEqual(argument.name, "target-player")

    def testExplicitName(self):
        argument, = self.build(describe(Param("target", str, name="who"))).arguments
        self.assertEqual(argument.name, "who")

    def testDescriptionFallbacks(self):
        definition = self.build(describe(
            Param("first", str, description="explicit"),
            Param("second", str),
            Param("third", str),
            arg_descriptions=["ignored", "positional"],
        ))
        self.assertEqual(
            [argument.description for argument in definition.arguments],
            ["explicit", "positional", "No description provided."],
        )

    def testPositions(self):
        definition = self.build(describe(Param("a", str), Param("b", int), Param("c", float)))
        self.assertEqual([argument.position for argument in definition.arguments], [0, 1, 2])


class TestOrdering(BuilderTestCase):
    """Optional and limitless arguments must come last."""

    def testOptionalBeforeRequired(self):
        with self.assertRaises(MisplacedArgumentError) as context:
            self.build(describe(Param("amount", int, optional=True), Param("name", str)))
        self.assertEqual(context.exception.options["argument"], "amount")

    def testOptionalBeforeOptional(self):
        definition = self.build(describe(Param("a", int, optional=True), Param("b", int, optional=True)))
        self.assertTrue(all(argument.optional for argument in definition.arguments))

    def testOptionalBeforeRequiredLimitless(self):
        for rest in (Param("body", str, join=" "), Param("values", list[int]), Param("flags", Flags)):
            with self.subTest(rest=rest):
                with self.assertRaises(MisplacedArgumentError) as context:
                    self.build(describe(Param("count", int, optional=True), rest, flags=[FlagSpec("s", "silent")]))
                self.assertEqual(context.exception.options["argument"], "count")

    def testOptionalBeforeOptionalLimitless(self):
        definition = self.build(describe(Param("count", int, optional=True), Param("body", str, join=" ", optional=True)))
        self.assertTrue(definition.limitless)

    def testNamedModeRelaxesOptionalOrdering(self):
        definition = self.build(describe(Param("amount", int, optional=True), Param("name", str), named=True))
        self.assertTrue(all(argument.optional for argument in definition.arguments))

    def testLimitlessNotLast(self):
        with self.assertRaises(MisplacedArgumentError):
            self.build(describe(Param("values", list[int]), Param("name", str)))

    def testLimitlessNotLastInNamedMode(self):
        with self.assertRaises(MisplacedArgumentError):
            self.build(describe(Param("message", str, join=" "), Param("name", str), named=True))


class TestFlagsAndRequirements(BuilderTestCase):
    def testFlagParameterWithoutFlags(self):
        with self.assertRaises(EmptyFlagGroupError):
            self.build(describe(Param("flags", Flags)))

    def testMalformedFlags(self):
        specs = (
            FlagSpec(),
            FlagSpec("", None),
            FlagSpec("a b"),
            FlagSpec(None, "-x"),
            FlagSpec("x=1"),
            FlagSpec("1", "one"),
            FlagSpec(None, "2fa"),
        )
        for spec in specs:
            with self.subTest(spec=spec):
                with self.assertRaises(MalformedFlagError):
                    self.build(describe(flags=[spec]))

    def testDuplicateFlagIdentifier(self):
        with self.assertRaises(MalformedFlagError) as context:
            self.build(describe(flags=[FlagSpec("s", "silent"), FlagSpec("v", "silent")]))
        self.assertEqual(context.exception.options["flag"], "silent")

    def testFlagTypeMustBeRegistered(self):
        with self.assertRaises(UnregisteredArgumentTypeError) as context:
            self.build(describe(flags=[FlagSpec("p", "player", type=Player)]))
        self.assertEqual(context.exception.options["flag"], "p")

    def testFlagsAreBuiltWithoutFlagParameter(self):
        definition = self.build(describe(flags=[FlagSpec("s", "silent"), FlagSpec(None, "count", type=int)]))
        silent, count = definition.flags
        self.assertIsNone(silent.argument)
        self.assertEqual(count.key, "count")
        self.assertIsInstance(count.argument, ResolvedArgument)

    def testUnknownRequirement(self):
        with self.assertRaises(UnknownRequirementError) as context:
            self.build(describe(requirements=["admin"]))
        self.assertEqual(context.exception.options["requirement"], "admin")

    def testRequirementsKeepDeclarationOrder(self):
        self.requirements.register("a", bool)
        self.requirements.register("b", bool)
        definition = self.build(describe(requirements=["b", "a"]))
        self.assertEqual([requirement.key for requirement in definition.requirements], ["b", "a"])


class TestSenders(BuilderTestCase):
    def testDefaultAllowListAcceptsAnyType(self):
        self.assertIs(self.build(describe(sender=Player)).sender, Player)

    def testSenderOutsideAllowList(self):
        self.senders = SenderValidator(Player)
        with self.assertRaises(InvalidSenderTypeError) as context:
            self.build(describe(sender=str))
        self.assertIn("'Player'", context.exception.message)

    def testSenderSubclass(self):
        class Admin(Player):
            pass

        self.senders = SenderValidator(Player)
        self.assertIs(self.build(describe(sender=Admin)).sender, Admin)


class TestRegistrationErrorRendering(BuilderTestCase):
    def testStrAndRich(self):
        with self.assertRaises(MisplacedArgumentError) as context:
            self.build(describe(Param("amount", int, optional=True), Param("name", str)))
        error = context.exception

        self.assertTrue(str(error).startswith("shop buy: optional argument"))

        console = Console(file=io.StringIO(), width=200, color_system=None)
        console.print(error)
        output = console.file.getvalue()
        self.assertIn("13131", output)
        self.assertIn("Misplaced Argument", output)
        self.assertIn("make 'amount' required", output)


if __name__ == "__main__":
    unittest.main()
