import string
from typing import Dict, List, Optional, Tuple

from ._exceptions import ParseError, ValidationError

## Grammar (RFC 9110, Section 5.6.2 and 5.6.4)

HTAB = "\t"
SP = " "
obs_text = "".join(chr(i) for i in range(0x80, 0xFF + 1))

tchar = "!#$%&'*+-.^_`|~0123456789" + string.ascii_letters
qdtext = "".join(
    [
        HTAB,
        SP,
        "\x21",
        "".join(chr(i) for i in range(0x23, 0x5B + 1)),
        "".join(chr(i) for i in range(0x5D, 0x7E + 1)),
        obs_text,
    ]
)

# Directives whose argument is a delta-seconds value.
TIME_FIELDS = ("max_age",)

__all__ = ("CacheControl", "parse_cache_control")


def strip_ows_around(text: str) -> str:
    return text.strip(" \t")


def normalize_directive(text: str) -> str:
    return text.lower().replace("-", "_")


def _validate_token(text: str, message: str) -> None:
    for char in text:
        if char not in tchar:
            raise ParseError(message.format(char=char))


def _parse_directive(directive: str) -> Tuple[str, Optional[str]]:
    name, sep, value = directive.partition("=")
    _validate_token(name, "The character '{char!r}' is not permitted in the directive name.")

    if not sep:
        return name, None

    if not value:
        raise ParseError("The directive value cannot be left blank.")

    if value[0] == '"':
        if len(value) < 2 or value[-1] != '"':
            raise ParseError("Invalid quotes around the value.")
        for char in value[1:-1]:
            if char not in qdtext:
                raise ParseError(f"The character '{char!r}' is not permitted for the quoted values.")
    else:
        _validate_token(value, "The character '{char!r}' is not permitted for the unquoted values.")

    return name, value


def split_directives(text: str) -> List[str]:
    """Splits a header value on the commas that are not inside a quoted string."""

    parts = []
    current = ""
    quoted = False

    for char in text:
        if char == '"':
            quoted = not quoted
        if char == "," and not quoted:
            parts.append(current)
            current = ""
        else:
            current += char

    parts.append(current)
    return parts


def parse_cache_control(cache_control_values: List[str]) -> "CacheControl":
    """
    Parses every ``Cache-Control`` header value into a single `CacheControl`.

    Raises `ParseError` for syntactically broken values and `ValidationError`
    when ``max-age`` carries something other than an integer.
    """

    directives: Dict[str, Optional[str]] = {}

    for cache_control_value in cache_control_values:
        for directive in split_directives(cache_control_value):
            if not directive:
                raise ParseError("The directive should not be left blank.")

            directive = strip_ows_around(directive)

            if not directive:
                raise ParseError("The directive should not contain only whitespaces.")

            name, value = _parse_directive(directive)
            directives[normalize_directive(name)] = value

    return CacheControl.from_directives(directives)


class CacheControl:
    def __init__(
        self,
        max_age: Optional[int] = None,  # [RFC9111, Section 5.2.2.1]
        directives: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        self.max_age = max_age
        self.directives = directives if directives is not None else {}

    @classmethod
    def from_directives(cls, directives: Dict[str, Optional[str]]) -> "CacheControl":
        times: Dict[str, int] = {}

        for key in TIME_FIELDS:
            if key not in directives:
                continue

            value = directives[key]

            if value is None:
                raise ValidationError(f"The directive '{key}' necessitates a value.")

            if value[0] == '"' or value[-1] == '"':
                raise ValidationError(f"The argument '{key}' should be an integer, but a quote was found.")

            try:
                times[key] = int(value)
            except ValueError:
                raise ValidationError(f"The argument '{key}' should be an integer, but got '{value!r}'.")

        return cls(directives=directives, **times)

    def __contains__(self, directive: str) -> bool:
        return normalize_directive(directive) in self.directives

    def __repr__(self) -> str:
        fields = ", ".join(key if value is None else f"{key}={value}" for key, value in self.directives.items())
        return f"<{type(self).__name__} {fields}>"
