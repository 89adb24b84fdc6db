"""
Pennant faults (parse and schema errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- FlagError family: the three terminal outcomes of a failed parse call
  (UnrecognizedArgError, MissingValueError, ParseError).
- CoercionError: raised by value coercers (built-in or custom) for bad text.
- SchemaError: raised while building a schema, never while parsing.
- getdoc(): optional description lookup for a code from the host application.

Errors are data
- Every fault keeps its structured payload as attributes (key, name, typename,
  input, source, code) and renders a one-line message through str().
- Faults also know how to render themselves with rich (__rich__), so a host
  can simply console.print(error). Presentation options (colorful, fancy, prog)
  are attached with copy.replace(fault, **options); the fault itself is never
  mutated.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - parsing (111xx)
      • UNRECOGNIZED_ARG, MISSING_VALUE, PARSE_ERROR
    - coercion (111xx)
      • INVALID_VALUE
    - schema construction (131xx)
      • EMPTY_SCHEMA, INVALID_FIELD, INVALID_TYPE, INCOMPATIBLE_DEFAULT,
        OPTIONAL_DEFAULT, MISSING_ZERO, NAME_COLLISION, ALIAS_COLLISION

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- parse errors (111xx) ---
    UNRECOGNIZED_ARG      = 11112
    MISSING_VALUE         = 11117
    PARSE_ERROR           = 11131

    # --- coercion errors (111xx) ---
    INVALID_VALUE         = 11132

    # --- schema errors (131xx) ---
    EMPTY_SCHEMA          = 13101
    INVALID_FIELD         = 13102
    INVALID_TYPE          = 13103
    INCOMPATIBLE_DEFAULT  = 13104
    OPTIONAL_DEFAULT      = 13105
    MISSING_ZERO          = 13106
    NAME_COLLISION        = 13107
    ALIAS_COLLISION       = 13108

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class Fault(Exception):
    """
    base type for every pennant error.

    constructor positional arguments are the structured payload and end up in
    self.args (so copies and pickles rebuild the same fault); keyword options
    are presentation-only and live in self.options.
    """
    code = Unset
    title = "fault"

    def __init__(self, *args, **options):
        super().__init__(*args)
        self.options = MappingProxyType(options)

    @property
    def message(self):
        return str(self)

    @property
    def hint(self):
        return ""

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "#737373",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        if (prog := getattr(main, "__prog__", Unset)) is Unset:
            # sys.argv is empty in embedded interpreters
            prog = self.options.get("prog") or (os.path.basename(sys.argv[0]) if sys.argv else "")

        header = Text.assemble(
            "[ ",
            text(prog, styler("prog-name")),
            " — ",
            text(self.code.normalize() if self.code else "", styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        renders = [text(self.message, styler("error-message"))]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))
        if self.code and (docs := getdoc(self.code)):
            renders.append(text(docs, styler("docs")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __reduce__(self):
        return type(self), self.args, self.__dict__ | {"options": dict(self.options)}

    def __setstate__(self, state):
        state = dict(state)
        options = state.pop("options", {})
        self.__dict__.update(state)
        self.options = MappingProxyType(dict(options))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = copy.copy(self)
        fault.options = MappingProxyType({**self.options, **overrides})
        return fault


class FlagError(Fault):
    """
    base type of the faults a parse call can end with.

    the parser stops at the first one it meets; nothing is accumulated.
    """
    title = "flag error"


class UnrecognizedArgError(FlagError):
    code = FaultCode.UNRECOGNIZED_ARG
    title = "unrecognized argument"

    def __init__(self, key, /, **options):
        super().__init__(key, **options)

    @property
    def key(self):
        return self.args[0]

    @property
    def hint(self):
        return "check the spelling of %r against the options listed in the help" % self.key

    def __str__(self):
        return 'unrecognized argument "%s"' % self.key


class MissingValueError(FlagError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"

    def __init__(self, name, /, **options):
        super().__init__(name, **options)

    @property
    def name(self):
        return self.args[0]

    @property
    def hint(self):
        return "provide a value (for example: --%s=<value> or --%s <value>)" % (self.name, self.name)

    def __str__(self):
        return 'missing value for argument "%s"' % self.name


class ParseError(FlagError):
    """
    a value was given but its text does not coerce to the field type.

    payload
    - typename: description of the expected type (e.g. 'int', 'Optional[bool]').
    - input: the offending raw text.
    - source: the CoercionError raised by the coercer (may carry a message).
    """
    code = FaultCode.PARSE_ERROR
    title = "parse error"

    def __init__(self, typename, input, source, /, **options):
        super().__init__(typename, input, source, **options)

    @property
    def typename(self):
        return self.args[0]

    @property
    def input(self):
        return self.args[1]

    @property
    def source(self):
        return self.args[2]

    @property
    def hint(self):
        return "use a valid %s value" % self.typename

    def __str__(self):
        message = 'failed to parse "%s" as %s type' % (self.input, self.typename)
        if getattr(self.source, "message", None):
            message += ": %s" % self.source.message
        return message


class CoercionError(ValueError):
    """
    raised by a coercer when a raw string cannot become a value.

    custom parse functions raise it (optionally with a human-readable message)
    to reject input; the parser wraps it into a ParseError together with the
    type description and the offending text.
    """
    code = FaultCode.INVALID_VALUE

    def __init__(self, message=None, /):
        if not isinstance(message, str | None):
            raise TypeError("CoercionError() argument must be a string")
        super().__init__(message)

    @property
    def message(self):
        return self.args[0]

    def __str__(self):
        return self.message or "invalid value"


class SchemaError(Fault):
    """
    a schema (or one of its fields) was declared inconsistently.

    raised only while building a schema; a schema that exists is valid.
    """
    title = "schema error"

    def __init__(self, message, /, code=FaultCode.INVALID_FIELD, **options):
        if not isinstance(code, FaultCode):
            raise TypeError("SchemaError() 'code' must be a fault-code")
        super().__init__(message, **options)
        self.code = code

    @property
    def hint(self):
        return "fix the field declarations; schemas are validated before any parse"

    def __str__(self):
        return self.args[0]


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "Fault",
    "FlagError",
    "UnrecognizedArgError",
    "MissingValueError",
    "ParseError",
    "CoercionError",
    "SchemaError",
    "getdoc",
)
