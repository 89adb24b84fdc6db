r"""
Pennant schema: field declarations, the immutable Schema and its front-ends.

Overview
- Field: one named, typed flag (default, short alias, placeholder, help text).
- Schema: ordered, immutable collection of fields plus the switch table used
  by the parser ({"--name": field, "-x": field}).
- SchemaBuilder: chainable registration front-end; finalize() builds a Schema.
- flags / flag: declarative front-end reading a class's annotations.

Every front-end ends up in Schema(*fields), so validation lives in one place
and a Schema that exists is always valid. Problems are reported as SchemaError
carrying a FaultCode, never at parse time.

Metadata (sanitized on construction)
- name: a Python identifier; the long flag is "--" + name, verbatim.
- type: any type expression Coercer() accepts (bool, int, float, str,
  T | None, custom types).
- default: literal matching the kind; forbidden for optional fields. Custom
  types take a string literal which is parsed once, here.
- short: one character (not whitespace, '=' or '-'); the short flag is "-" + short.
- placeholder / descr: non-empty strings, trimmed.

Quick example:
    >>> schema = (
    ...     SchemaBuilder()
    ...     .register("count", int, default=3, short="c", descr="How many")
    ...     .register("verbose", bool)
    ...     .finalize()
    ... )
    >>> schema.parse(["prog", "-c", "5"])["count"]
    5
"""
import builtins
import inspect
import logging
import typing
from typing import NamedTuple

from .coercion import Coercer, Kind
from .faults import CoercionError, FaultCode, SchemaError
from .parser import parse
from .rendering import describe, highlight
from .utils import *

logger = logging.getLogger(__name__)


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate 'name' and 'short'.

    - name: must be a string and a valid Python identifier (kept verbatim,
      underscores included, since it also names the parsed value).
    - short: Unset or exactly one character that can follow a single dash;
      whitespace, '=' and '-' are rejected. Unset becomes None.
    """
    if not isinstance(name := metadata["name"], str):
        raise SchemaError(f"{cls.__typename__} 'name' must be a string")
    elif not name.isidentifier():
        raise SchemaError(f"{cls.__typename__} 'name' must be an identifier, not {name!r}")

    if not isinstance(short := metadata["short"], str | UnsetType):
        raise SchemaError(f"{cls.__typename__} {name!r} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short.isspace() or short in "=-"):
        raise SchemaError(f"{cls.__typename__} {name!r} 'short' must be a single character other than '=' or '-', not {short!r}")
    metadata["short"] = coalesce(short)


def _sanitize_strings(cls, metadata, /):
    """
    Internal: validate and trim 'placeholder' and 'descr'. Unset becomes None.
    """
    for key in ("placeholder", "descr"):
        if not isinstance(object := metadata[key], str | UnsetType):
            raise SchemaError(f"{cls.__typename__} {metadata["name"]!r} {key!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise SchemaError(f"{cls.__typename__} {metadata["name"]!r} {key!r} cannot be empty")
        metadata[key] = coalesce(object)


def _sanitize_default(cls, metadata, /):
    """
    Internal: check the default against the kind and resolve the initial value.

    Results
    - metadata["default"]: the declared literal as written (help shows it),
      or None when nothing was declared.
    - metadata["initial"]: the value a parse starts from: the zero value, the
      default itself, the default as a float (FLOAT) or the parsed literal (CUSTOM).
    """
    coercer = metadata["coercer"]
    name = metadata["name"]

    if (default := metadata["default"]) is Unset:
        if coercer.zero is Unset:
            raise SchemaError(
                f"{cls.__typename__} {name!r} of custom type {coercer.typename!r} needs a default (the type has no zero value)",
                code=FaultCode.MISSING_ZERO,
            )
        metadata["default"] = None
        metadata["initial"] = coercer.zero
        return

    def incompatible(expected):
        return SchemaError(
            f"{cls.__typename__} {name!r} default {default!r} is not {expected}",
            code=FaultCode.INCOMPATIBLE_DEFAULT,
        )

    match coercer.kind:
        case Kind.OPTIONAL:
            raise SchemaError(
                f"{cls.__typename__} {name!r} of type {coercer.typename!r} cannot declare a default",
                code=FaultCode.OPTIONAL_DEFAULT,
            )
        case Kind.BOOL:
            if not isinstance(default, bool):
                raise incompatible("a bool")
        case Kind.INT:
            if not isinstance(default, int) or isinstance(default, bool):
                raise incompatible("an int")
        case Kind.FLOAT:
            if not isinstance(default, int | float) or isinstance(default, bool):
                raise incompatible("a float")
            metadata["initial"] = float(default)
        case Kind.TEXT:
            if not isinstance(default, str):
                raise incompatible("a str")
        case Kind.CUSTOM:
            if not isinstance(default, str):
                raise incompatible(f"a string literal for {coercer.typename!r}")
            try:
                metadata["initial"] = coercer(default)
            except CoercionError as exception:
                raise SchemaError(
                    f"{cls.__typename__} {name!r} default {default!r} is not a valid {coercer.typename}: {exception}",
                    code=FaultCode.INCOMPATIBLE_DEFAULT,
                ) from exception

    metadata["default"] = default
    metadata.setdefault("initial", default)


class Field(metaclass=IntrospectableType):
    """
    A single flag declaration.

    Properties
    - name, type, default, short, placeholder, descr: sanitized metadata
      (default/short/placeholder/descr are None when not declared).
    - coercer: the resolved Coercer; kind: its Kind.
    - initial: the value the field holds when its flag is absent.
    - long: "--name"; switches: the long flag plus "-x" when a short alias exists.
    """

    __introspectable__ = (
        "name",
        "type",
        "default",
        "short",
        "placeholder",
        "descr",
        "coercer",
        "initial",
    )
    __displayable__ = (
        "name",
        "type",
        "default",
        "short",
        "placeholder",
        "descr",
    )

    def __new__(cls, name, type=str, /, default=Unset, short=Unset, placeholder=Unset, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "default": default,
            "short": short,
            "placeholder": placeholder,
            "descr": descr,
        }
        _sanitize_identity(cls, metadata)
        _sanitize_strings(cls, metadata)
        metadata["coercer"] = Coercer(type)
        _sanitize_default(cls, metadata)

        self = super().__new__(cls)
        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        return self

    # user values are handed out as they are
    @property
    def default(self):
        return self._default

    @property
    def initial(self):
        return self._initial

    @property
    def kind(self):
        return self._coercer.kind

    @property
    def long(self):
        return "--" + self._name

    @property
    def switches(self):
        if self._short is None:
            return self.long,
        return self.long, "-" + self._short


class Schema(metaclass=IntrospectableType):
    """
    Immutable, validated collection of fields in declaration order.

    Construction checks
    - at least one field (EMPTY_SCHEMA);
    - unique names (NAME_COLLISION) and unique switches (ALIAS_COLLISION).

    A schema is shareable: parse() keeps no state on it.
    """

    __introspectable__ = (
        "fields",
    )

    def __new__(cls, *fields):
        if not fields:
            raise SchemaError(f"{cls.__typename__} must declare at least one field", code=FaultCode.EMPTY_SCHEMA)

        names = set()
        switches = {}
        for field in fields:
            if not isinstance(field, Field):
                raise SchemaError(f"{cls.__typename__} fields must be field instances, not {builtins.type(field).__name__!r}")
            if field.name in names:
                raise SchemaError(f"{cls.__typename__} field name {field.name!r} is already in use", code=FaultCode.NAME_COLLISION)
            names.add(field.name)
            for switch in field.switches:
                if switch in switches:
                    raise SchemaError(
                        f"{cls.__typename__} switch {switch!r} of field {field.name!r} is already used by {switches[switch].name!r}",
                        code=FaultCode.ALIAS_COLLISION,
                    )
                switches[switch] = field

        self = super().__new__(cls)
        self._fields = fields
        self._switches = switches
        logger.debug("schema ready with %d field(s): %s", len(fields), ", ".join(field.name for field in fields))
        return self

    def resolve(self, switch, /):
        """
        Return the field bound to a switch ("--name" or "-x"), or None.
        """
        return self._switches.get(switch)

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __getitem__(self, name):
        for field in self._fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def parse(self, args, /):
        """
        Parse raw process arguments (program name first); see pennant.parser.parse.
        """
        return parse(self, args)

    def describe(self):
        """
        Render the plain help listing; see pennant.rendering.describe.
        """
        return describe(self)

    def __rich__(self):
        return highlight(self)


class SchemaBuilder(metaclass=IntrospectableType):
    """
    Chainable registration front-end.

    register() only records declarations; finalize() validates all of them at
    once and returns the Schema (or raises SchemaError).
    """

    __introspectable__ = (
        "declarations",
    )

    def __init__(self):
        self._declarations = []

    def register(self, name, type=str, /, default=Unset, short=Unset, placeholder=Unset, descr=Unset):
        self._declarations.append(((name, type), {
            "default": default,
            "short": short,
            "placeholder": placeholder,
            "descr": descr,
        }))
        return self

    def finalize(self):
        return Schema(*(Field(*args, **kwargs) for args, kwargs in self._declarations))


class FlagSpec(NamedTuple):
    """
    Per-attribute options of a @flags class (built with flag()).
    """
    default: typing.Any = Unset
    short: str | UnsetType = Unset
    placeholder: str | UnsetType = Unset
    descr: str | UnsetType = Unset


def flag(default=Unset, /, *, short=Unset, placeholder=Unset, descr=Unset):
    """
    Declare the options of one attribute of a @flags class.

    Example:
        >>> @flags
        ... class Options:
        ...     address: str = flag("1.2.3.4", short="a", descr="IP address")
    """
    return FlagSpec(default, short, placeholder, descr)


def flags(cls, /):
    """
    Class decorator: derive a Schema from annotated class attributes.

    Each annotation (in declaration order) becomes a field; its class
    attribute, when present, is either a plain default or a flag(...) spec.
    ClassVar annotations are ignored.

    The class gains
    - __schema__: the Schema.
    - from_args(args) -> (instance, positionals): parse and build an instance.
    - description() -> str: the plain help listing.
    - __init__(**values) (unless defined), __repr__, __rich_repr__ and __eq__.
    """
    if not isinstance(cls, type):
        raise TypeError("@flags must be applied to a class")

    fields = []
    for name, annotation in inspect.get_annotations(cls, eval_str=True).items():
        if typing.get_origin(annotation) is typing.ClassVar or annotation is typing.ClassVar:
            continue
        match object := cls.__dict__.get(name, Unset):
            case FlagSpec():
                fields.append(Field(name, annotation, *object))
            case _:
                fields.append(Field(name, annotation, object))

    schema = Schema(*fields)
    for field in schema:
        setattr(cls, field.name, field.initial)
    cls.__schema__ = schema

    if "__init__" not in cls.__dict__:
        @rename("__init__")
        def __init__(self, **values):
            for field in type(self).__schema__:
                setattr(self, field.name, values.pop(field.name, field.initial))
            if values:
                raise TypeError(f"{type(self).__name__}() got unexpected flag(s): {", ".join(map(repr, values))}")
        cls.__init__ = __init__

    @rename("__rich_repr__")
    def __rich_repr__(self):
        for field in type(self).__schema__:
            yield field.name, getattr(self, field.name)
    cls.__rich_repr__ = __rich_repr__

    @rename("__repr__")
    def __repr__(self):
        return f"{type(self).__name__}({", ".join(f"{name}={value!r}" for name, value in self.__rich_repr__())})"
    cls.__repr__ = __repr__

    @rename("__eq__")
    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return dict(self.__rich_repr__()) == dict(other.__rich_repr__())
    cls.__eq__ = __eq__
    cls.__hash__ = None

    @rename("from_args")
    def from_args(cls, args, /):
        """
        Parse raw process arguments into (instance, positionals).
        """
        parsed = cls.__schema__.parse(args)
        return cls(**parsed), parsed.positionals
    cls.from_args = classmethod(from_args)

    @rename("description")
    def description(cls):
        """
        Render the plain help listing of the flags.
        """
        return cls.__schema__.describe()
    cls.description = classmethod(description)

    return cls


__all__ = (
    "Field",
    "Schema",
    "SchemaBuilder",
    "FlagSpec",
    "flag",
    "flags",
)
