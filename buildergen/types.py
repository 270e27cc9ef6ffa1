"""
Type Annotation Shapes

Turns the source text of a type annotation into a TypeDescriptor. The
recognition is purely syntactic: ``list[str]`` becomes
WrappedType("list", (PlainType("str"),)). Anything that is not a single
``Head[args]`` subscript, such as ``int | None``, ``"Forward"`` or a bare name,
stays an opaque PlainType.
"""

import re

from .models import PlainType, TypeDescriptor, WrappedType

_HEAD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

_OPENERS = {"[": "]", "(": ")", "{": "}"}
_CLOSERS = {"]", ")", "}"}


def normalize(text: str) -> str:
    """Collapse whitespace so multi-line annotations compare equal."""
    return " ".join(text.split())


def _matching_bracket(text: str, start: int) -> int:
    """Return the index of the bracket closing the one at ``start``, or -1."""
    depth = 0
    quote = None
    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index
    return -1


def split_arguments(text: str) -> list[str]:
    """Split a subscript body on top-level commas.

    >>> split_arguments("str, Annotated[int, x(1, 2)]")
    ['str', 'Annotated[int, x(1, 2)]']
    """
    parts: list[str] = []
    depth = 0
    quote = None
    current: list[str] = []
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def parse_type(text: str) -> TypeDescriptor:
    """Parse annotation text into a PlainType or WrappedType."""
    text = normalize(text)
    open_index = text.find("[")
    if open_index <= 0 or not text.endswith("]"):
        return PlainType(text)

    head = text[:open_index].strip()
    if not _HEAD_RE.match(head):
        return PlainType(text)

    # Reject "list[int] | list[str]": the first subscript must span to the end
    if _matching_bracket(text, open_index) != len(text) - 1:
        return PlainType(text)

    arguments = split_arguments(text[open_index + 1 : -1])
    if not arguments:
        return PlainType(text)

    return WrappedType(
        wrapper=head,
        arguments=tuple(parse_type(argument) for argument in arguments),
        text=text,
    )


def wrapped_argument(descriptor: TypeDescriptor, wrapper_names) -> TypeDescriptor | None:
    """Return the first type argument if ``descriptor`` is one of the named wrappers.

    Matching is string equality on the head as written, so ``typing.Optional``
    is not ``Optional``, and a user class called ``Optional`` is.
    """
    if isinstance(descriptor, WrappedType) and descriptor.wrapper in wrapper_names:
        return descriptor.inner
    return None
