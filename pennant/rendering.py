"""
Pennant help rendering.

Layout (one line per field, declaration order)

    OPTIONS:
      -a, --address VALUE    IP address (defaults to "1.2.3.4")
          --is_active
          --opt_address [VALUE]

- label: "-x, " (or four spaces without a short alias), "--name", then nothing
  for bool fields, " [PLACEHOLDER]" for optional fields and " PLACEHOLDER"
  otherwise (PLACEHOLDER defaults to VALUE).
- labels are padded to the widest one, counted in grapheme clusters, so that
  descriptions line up in a terminal; fields with neither a description nor a
  default stop right after their label.
- defaults are shown as source literals: true/false, 34, 2.5, "text". Floats
  print as their shortest repr without a "+" exponent sign (1e20, 2.5e-07),
  so a default is shown by value, not by how it was spelled.

describe() returns the plain string; highlight() returns the same characters
as a rich Text with styles applied (override the palette with a __styles__
mapping in __main__).
"""
from collections import defaultdict

import regex
from rich.text import Text

from .coercion import Kind

_GRAPHEME = regex.compile(r"\X")


def _literal(value, /):
    """
    Render a default value the way it would be written in source.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"%s"' % value.replace("\\", "\\\\").replace('"', '\\"')
    if isinstance(value, float):
        return repr(value).replace("e+", "e")
    return repr(value)


def _label(field, /):
    """
    Yield the (fragment, style) pairs of a field's label.
    """
    if field.short is not None:
        yield "-" + field.short, "switch"
        yield ", ", ""
    else:
        yield "    ", ""
    yield field.long, "switch"
    match field.kind:
        case Kind.BOOL:
            pass
        case Kind.OPTIONAL:
            yield " [", ""
            yield field.placeholder or "VALUE", "placeholder"
            yield "]", ""
        case _:
            yield " ", ""
            yield field.placeholder or "VALUE", "placeholder"


def _width(text, /):
    """
    Display width of a label, in grapheme clusters.
    """
    return len(_GRAPHEME.findall(text))


def _fragments(schema, /):
    labels = [list(_label(field)) for field in schema]
    column = max(_width("".join(fragment for fragment, _ in label)) for label in labels)

    yield "OPTIONS:", "section"
    yield "\n", ""
    for field, label in zip(schema, labels):
        yield "  ", ""
        yield from label
        if field.descr is not None or field.default is not None:
            yield "    " + " " * (column - _width("".join(fragment for fragment, _ in label))), ""
            if field.descr is not None:
                yield field.descr, "description"
            if field.default is not None:
                yield " (defaults to ", "default"
                yield _literal(field.default), "default-value"
                yield ")", "default"
        yield "\n", ""


def describe(schema, /):
    """
    Render the help listing of a schema as a plain string.
    """
    return "".join(fragment for fragment, _ in _fragments(schema))


def highlight(schema, /, *, colorful=True):
    """
    Render the help listing as a rich Text; highlight(schema).plain == describe(schema).

    Palette keys
    - section, switch, placeholder, description, default, default-value

    When colorful is False the Text carries no styles.
    """
    styles = defaultdict(str, {
        "section": "bold #FFFFFF",  # white header
        "switch": "bold #00E6FF",  # cyan switches
        "placeholder": "bold #FFD600",  # amber placeholders
        "description": "#9CA3AF",  # muted gray
        "default": "italic #737373",  # dim footer gray
        "default-value": "italic #FF4D94",  # magenta literal
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful and style else ""

    return Text.assemble(*((fragment, styler(style)) for fragment, style in _fragments(schema)))


__all__ = (
    "describe",
    "highlight",
)
