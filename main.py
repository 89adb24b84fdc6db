import enum
import logging
import sys

from rich.console import Console
from rich.pretty import pprint

from pennant import *

__prog__ = "pennant-demo"


class Fruit(enum.Enum):
    APPLE = "apple"
    ORANGE = "orange"


@custom(zero=Fruit.APPLE)
def fruit(text):
    try:
        return Fruit(text)
    except ValueError:
        raise CoercionError("must be an apple or orange") from None


@flags
class Options:
    enable_floopy: bool = flag(descr="The floopy floops the whoop")
    slomp_count: int = flag(34, placeholder="INTEGER", descr="How many slomps to include")
    gmup: str | None = flag(placeholder="PATH", descr="An optional path to a Gmup")
    address: str = flag("1.2.3.4", short="a", descr="IP address of the whoop")
    size: float = flag(2.5, short="s")
    snack: fruit = flag(descr="Fruit to bring along")
    debug: bool = flag(descr="Log at DEBUG level")
    help: bool = flag(short="h", descr="Prints this help message")


if __name__ == '__main__':
    console = Console()
    try:
        options, positionals = Options.from_args(sys.argv)
    except FlagError as error:
        console.print(f"Error parsing flags: {error}", markup=False, highlight=False)
        console.print(Options.__schema__)
        sys.exit(2)

    logging.basicConfig(level=logging.DEBUG if options.debug else logging.WARNING)
    logging.getLogger(__name__).debug("parsed %r", options)

    if options.help:
        console.print(Options.__schema__)
    else:
        pprint(options)
        pprint(positionals)
