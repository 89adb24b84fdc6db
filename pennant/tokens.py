"""
Pennant tokenizer: classify raw arguments into positionals and flag tokens.

Grammar
- a token is a flag if and only if it starts with '-'.
  • '--name=value' / '-x=value' → FlagToken(key='--name', value='value')
    (split at the first '='; 'value' may be an empty string)
  • '--name' / '-x'             → FlagToken(key='--name', value=None)
- any other token is a Positional, passed through verbatim.

The Tokenizer is a single-pass iterator over its source. next_positional()
pulls the next raw token from the same stream without classifying it; the
parser uses it to fetch the value of a flag written in the spaced form
('--name value'). A token taken that way is never seen again by iteration.
"""
from typing import NamedTuple

from .utils import Unset


class Positional(NamedTuple):
    value: str


class FlagToken(NamedTuple):
    key: str
    value: str | None = None


def classify(token, /):
    """
    Turn a single raw token into a Positional or a FlagToken.

    Examples
    - classify("file.txt")     -> Positional('file.txt')
    - classify("--count=3")    -> FlagToken('--count', '3')
    - classify("-a=")          -> FlagToken('-a', '')
    - classify("--verbose")    -> FlagToken('--verbose', None)
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string, not %r" % type(token).__name__)
    if not token.startswith("-"):
        return Positional(token)
    key, separator, value = token.partition("=")
    return FlagToken(key, value if separator else None)


class Tokenizer:
    """
    Lazy, single-pass stream of Positional | FlagToken items.

    Parameters
    - args: Iterable[str]
      raw arguments (without special handling for the program name; the
      parser takes care of it before handing the rest over).
    """
    __slots__ = ("_source",)

    def __init__(self, args, /):
        self._source = iter(args)

    def __iter__(self):
        return self

    def __next__(self):
        return classify(next(self._source))

    def next_positional(self):
        """
        Consume the next raw token verbatim, whatever its shape.

        returns
        - str: the raw token (even one that starts with '-').
        - Unset: the stream is exhausted.
        """
        token = next(self._source, Unset)
        if token is not Unset and not isinstance(token, str):
            raise TypeError("next_positional() token must be a string, not %r" % type(token).__name__)
        return token


__all__ = (
    "Positional",
    "FlagToken",
    "Tokenizer",
    "classify",
)
