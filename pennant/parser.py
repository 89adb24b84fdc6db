"""
Pennant parser: raw process arguments + Schema -> ParsedArguments.

Algorithm
1. Every field starts at its initial value (declared default or zero).
2. The first raw argument (the program name) is passed through to the
   positionals untouched, even when it starts with '-'.
3. The remaining arguments are tokenized:
   - Positional -> appended to positionals, order preserved.
   - FlagToken  -> looked up in the schema's switch table.
     • unknown key                      -> UnrecognizedArgError(key)
     • bool field                       -> bare flag is True, '=true'/'=false' otherwise
     • any other field, inline value    -> coerced
     • any other field, no inline value -> the next raw argument is the value,
                                           whatever it looks like; none left ->
                                           MissingValueError(name)
     • coercion failure                 -> ParseError(typename, input, source)
   A repeated flag overwrites the previous value.
4. The first failure ends the call; nothing is accumulated.
"""
import logging
from collections.abc import Mapping
from types import MappingProxyType

from .coercion import Kind
from .faults import CoercionError, FlagError, MissingValueError, ParseError, UnrecognizedArgError
from .tokens import FlagToken, Positional, Tokenizer
from .utils import *

logger = logging.getLogger(__name__)


class ParsedArguments(Mapping):
    """
    Read-only result of a successful parse.

    - Mapping access by field name: parsed["count"] (every field is present).
    - Attribute access for convenience: parsed.count.
    - positionals: tuple of the leftover arguments, program name first.
    """
    __slots__ = ("_values", "_positionals")

    def __init__(self, values, positionals=(), /):
        object.__setattr__(self, "_values", MappingProxyType(dict(values)))
        object.__setattr__(self, "_positionals", tuple(positionals))

    @property
    def positionals(self):
        return self._positionals

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __getattr__(self, name):
        # private and dunder lookups (copy, pickle, pretty printers) never hit flags
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no flag {name!r}") from None

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__!r} object is read-only")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__!r} object is read-only")

    def __eq__(self, other):
        if isinstance(other, ParsedArguments):
            return dict(self._values) == dict(other._values) and self._positionals == other._positionals
        return super().__eq__(other)

    __hash__ = None

    def __reduce__(self):
        return type(self), (dict(self._values), self._positionals)

    def __rich_repr__(self):
        yield from self._values.items()
        yield "positionals", self._positionals

    def __repr__(self):
        return f"{type(self).__name__}({dict(self._values)!r}, positionals={self._positionals!r})"


def _coerce(field, raw=Unset, /):
    try:
        return field.coercer(raw)
    except CoercionError as exception:
        raise ParseError(field.coercer.typename, coalesce(raw, ""), exception) from exception


def parse(schema, args, /):
    """
    Parse raw process arguments against a schema.

    Parameters
    - schema: Schema
    - args: Iterable[str], the program name first (as in sys.argv).

    Returns
    - ParsedArguments

    Raises
    - UnrecognizedArgError, MissingValueError, ParseError (all FlagError).
    """
    values = {field.name: field.initial for field in schema}
    positionals = []

    source = iter(args)
    if (program := next(source, Unset)) is not Unset:
        if not isinstance(program, str):
            raise TypeError("parse() arguments must be strings, not %r" % type(program).__name__)
        positionals.append(program)
    logger.debug("parsing arguments for %r", coalesce(program, None))

    tokens = Tokenizer(source)
    try:
        for token in tokens:
            match token:
                case Positional(value):
                    positionals.append(value)
                case FlagToken(key, value):
                    if (field := schema.resolve(key)) is None:
                        raise UnrecognizedArgError(key)

                    if field.kind is Kind.BOOL:
                        values[field.name] = _coerce(field, Unset if value is None else value)
                        continue

                    if value is None and (value := tokens.next_positional()) is Unset:
                        raise MissingValueError(field.name)
                    values[field.name] = _coerce(field, value)
    except FlagError as exception:
        logger.debug("parse failed: %s", exception)
        raise

    logger.debug("parsed %d flag(s) and %d positional(s)", len(values), len(positionals))
    return ParsedArguments(values, positionals)


__all__ = (
    "ParsedArguments",
    "parse",
)
