import sys

from rich.console import Console
from rich.pretty import pprint

from helmsman import *

__prog__ = "bank"

manager = CommandManager()


@manager.register
@descriptor(
    "bank",
    "pay",
    params=[Param("target", str), Param("amount", int, optional=True), Param("flags", Flags, optional=True)],
    flags=[FlagSpec("s", "silent"), FlagSpec(None, "reason", type=str, optional_arg=True)],
    aliases=["give"],
    description="Pay another account.",
)
def pay(sender, target, amount, flags):
    if not flags.has_flag("silent"):
        pprint({"from": sender, "to": target, "amount": amount or 1, "reason": flags.get_flag_or_none("reason")})


if __name__ == '__main__':
    if len(sys.argv) < 2:
        Console().print(pay)
    else:
        manager.execute("console", "bank", sys.argv[1:])
