"""
Pennant value coercers.

Overview
- Kind: the six value kinds a field can carry (BOOL, INT, FLOAT, TEXT,
  OPTIONAL, CUSTOM).
- Coercer(type): resolve a Python type expression into a coercer. A coercer
  knows its kind, its human-readable typename, its zero value and how to turn
  one raw string into a typed value.
- custom(parse, ...): register a user-defined type, directly or as a decorator.

Resolution table
- bool               -> BOOL      zero False   typename 'bool'
- int                -> INT       zero 0       typename 'int'
- float              -> FLOAT     zero 0.0     typename 'float'
- str                -> TEXT      zero ''      typename 'str'
- T | None           -> OPTIONAL  zero None    typename 'Optional[<T>]'
- any other callable -> CUSTOM    zero custom  typename custom name / __name__

Coercion failures raise CoercionError; the parser turns them into ParseError.

Quick example:
    >>> Coercer(int)("42")
    42
    >>> Coercer(int | None).typename
    'Optional[int]'
    >>> Coercer(bool)()
    True
"""
import enum
import re
import types
import typing

from .faults import CoercionError, FaultCode, SchemaError
from .utils import *

_INTEGER = re.compile(r"[+-]?[0-9]+")


class Kind(enum.Enum):
    """
    value kind of a field (drives parsing and help rendering).
    """
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    OPTIONAL = "optional"
    CUSTOM = "custom"


def _parse_bool(raw=Unset, /):
    if raw is Unset:
        return True
    match raw:
        case "true":
            return True
        case "false":
            return False
    raise CoercionError()


def _parse_int(raw, /):
    if not _INTEGER.fullmatch(raw):
        raise CoercionError()
    return int(raw)


def _parse_float(raw, /):
    # float() tolerates surrounding whitespace and digit separators; command lines do not.
    if not raw or raw != raw.strip() or "_" in raw:
        raise CoercionError()
    try:
        return float(raw)
    except ValueError:
        raise CoercionError() from None


def _parse_text(raw, /):
    return raw


def _delegate(parse, /):
    """
    Wrap a user parse function so that its failures speak CoercionError.

    - CoercionError propagates untouched (its message is kept).
    - ValueError / TypeError / ArithmeticError (decimal.InvalidOperation, ...)
      become CoercionError(str(exception) or None).
    """
    @rename(getattr(parse, "__name__", "parse"))
    def coerce(raw, /):
        try:
            return parse(raw)
        except CoercionError:
            raise
        except (ValueError, TypeError, ArithmeticError) as exception:
            raise CoercionError(str(exception) or None) from exception
    return coerce


def _optional_inner(type, /):
    """
    Return T for 'T | None' / 'Optional[T]', Unset for anything that is not a union.
    """
    if typing.get_origin(type) not in (typing.Union, types.UnionType):
        return Unset
    members = [member for member in typing.get_args(type) if member is not types.NoneType]
    if len(members) != 1 or len(members) == len(typing.get_args(type)):
        raise SchemaError(f"union {type!r} is not a usable flag type (only 'T | None' is)", code=FaultCode.INVALID_TYPE)
    member, = members
    return member


class Coercer(metaclass=IntrospectableType):
    """
    A resolved value coercer.

    Instances are immutable and shared freely between fields and schemas.
    Call one with a raw string to get a typed value; only BOOL coercers may be
    called without a raw string (bare flag -> True).

    Properties
    - kind: Kind
    - typename: str, the type description used in parse errors.
    - zero: the kind's zero value (Unset for a custom type with none).
    - inner: the wrapped Coercer of an OPTIONAL kind, Unset otherwise.
    """
    __introspectable__ = (
        "kind",
        "typename",
        "zero",
        "inner",
    )
    __displayable__ = (
        "kind",
        "typename",
    )

    def __new__(cls, type=str, /):
        if isinstance(type, Coercer):
            return type
        if type is bool:
            return cls._build(Kind.BOOL, "bool", _parse_bool, False)
        if type is int:
            return cls._build(Kind.INT, "int", _parse_int, 0)
        if type is float:
            return cls._build(Kind.FLOAT, "float", _parse_float, 0.0)
        if type is str:
            return cls._build(Kind.TEXT, "str", _parse_text, "")

        if (inner := _optional_inner(type)) is not Unset:
            if (inner := cls(inner)).kind is Kind.OPTIONAL:
                raise SchemaError(f"nested optional {inner.typename!r} is not a usable flag type", code=FaultCode.INVALID_TYPE)
            return cls._build(Kind.OPTIONAL, f"Optional[{inner.typename}]", inner, None, inner)

        if type is None or not callable(type):
            raise SchemaError(f"{type!r} is not a usable flag type (expected a callable)", code=FaultCode.INVALID_TYPE)
        return custom(type)

    @property
    def zero(self):
        return self._zero

    @classmethod
    def _build(cls, kind, typename, parse, zero=Unset, inner=Unset, /):
        self = super().__new__(cls)
        self._kind = kind
        self._typename = typename
        self._parse = parse
        self._zero = zero
        self._inner = inner
        return self

    def __call__(self, raw=Unset, /):
        """
        Coerce one raw string (or, for BOOL, its absence) into a value.

        Raises
        - CoercionError: the text is not a valid value of this kind.
        - TypeError: raw is missing for a non-BOOL kind, or is not a string.
        """
        if raw is Unset:
            if self._kind is not Kind.BOOL:
                raise TypeError(f"{self._typename} coercer requires a raw value")
            return self._parse()
        if not isinstance(raw, str):
            raise TypeError(f"{self._typename} coercer expects a string, not {type(raw).__name__!r}")
        return self._parse(raw)

    def __or__(self, other, /):
        """
        Support 'coercer | None' for optional custom types.
        """
        if other is None or other is types.NoneType:
            return typing.Optional[self]
        return NotImplemented

    __ror__ = __or__

    def __eq__(self, other):
        if not isinstance(other, Coercer):
            return NotImplemented
        return (self._kind, self._typename, self._parse, self._inner) == (other._kind, other._typename, other._parse, other._inner)

    def __hash__(self):
        return hash((self._kind, self._typename))


def custom(parse=Unset, /, *, zero=Unset, name=Unset):
    """
    Register a user-defined value type.

    Forms
    - custom(parse, zero=..., name=...) -> Coercer
    - @custom(zero=..., name=...)       -> decorator returning a Coercer

    Parameters
    - parse: Callable[[str], T]
      Called with the raw text. Raise CoercionError (optionally with a message),
      ValueError, TypeError or ArithmeticError to reject it.
    - zero: T
      Value of the field when no default is declared and the flag is absent.
      When omitted and parse is a class, the zero is parse() if that succeeds
      (Decimal(), Path(), ...). Otherwise the field must declare a default.
    - name: str
      Type description for parse errors; defaults to parse.__name__.

    Example:
        >>> @custom(zero=Fruit.APPLE)
        ... def fruit(text):
        ...     return Fruit[text.upper()]
    """
    if not isinstance(name, str | UnsetType):
        raise TypeError("custom() 'name' must be a string")
    elif isinstance(name, str) and not (name := name.strip()):
        raise ValueError("custom() 'name' cannot be empty")

    def wrapper(parse, /):
        if not callable(parse):
            raise TypeError("@custom() must be applied to a callable")
        typename = coalesce(name, getattr(parse, "__name__", type(parse).__name__))

        resolved = zero
        if resolved is Unset and isinstance(parse, type):
            try:
                resolved = parse()
            except (TypeError, ValueError):
                resolved = Unset

        return Coercer._build(Kind.CUSTOM, typename, _delegate(parse), resolved)

    if parse is Unset:
        return rename(wrapper, "custom")
    return wrapper(parse)


__all__ = (
    "Kind",
    "Coercer",
    "custom",
)
