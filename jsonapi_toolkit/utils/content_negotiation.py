"""Helpers for JSON:API content negotiation.

The parser follows the ``Accept`` grammar of RFC 9110: a comma separated list of
media ranges, each optionally followed by parameters, where the ``q`` parameter
carries the weight and every parameter after it is an accept extension.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from operator import attrgetter

from jsonapi_toolkit.core.document import JSONAPI_MEDIA_TYPE, format_media_type
from jsonapi_toolkit.core.exceptions import ParserError

_DIGIT = "".join(chr(code) for code in range(0x30, 0x3A))
_ALPHA = "".join(chr(code) for code in range(0x41, 0x5B)) + "".join(
    chr(code) for code in range(0x61, 0x7B)
)
_VCHAR = "".join(chr(code) for code in range(0x21, 0x7F))
_OBS_TEXT = "".join(chr(code) for code in range(0x80, 0x100))

TCHAR = frozenset("!#$%&'*+-.^_`|~" + _DIGIT + _ALPHA)
QD_TEXT = frozenset(
    "\t !"
    + "".join(chr(code) for code in range(0x23, 0x5C))
    + "".join(chr(code) for code in range(0x5D, 0x7F))
    + _OBS_TEXT
)
QUOTED_PAIR = frozenset("\t " + _VCHAR + _OBS_TEXT)

_WEIGHT_RE = re.compile(r"0(?:\.[0-9]{0,3})?|1(?:\.0{0,3})?")


@dataclass
class MediaTypeRange:
    """A single media range of an ``Accept`` header."""

    type: str
    sub_type: str
    parameters: dict[str, str] = field(default_factory=dict)
    weight: float = 1.0
    accept_ext: dict[str, str] = field(default_factory=dict)


@dataclass
class AcceptableMediaType:
    """JSON:API extensions and profiles a client accepts."""

    ext: list[str] = field(default_factory=list)
    profile: list[str] = field(default_factory=list)


class AcceptParser:
    """Single pass parser for ``Accept`` style header values."""

    def __init__(self, header: str) -> None:
        self.header = header
        self.length = len(header)
        self.index = 0

    @classmethod
    def parse(cls, header: str) -> list[MediaTypeRange]:
        """Return the media ranges of ``header`` sorted by descending weight."""
        return cls(header)._process()

    def _process(self) -> list[MediaTypeRange]:
        self._skip_whitespace()

        if self.index == self.length:
            return [MediaTypeRange(type="*", sub_type="*")]

        accept: list[MediaTypeRange] = []
        has_more = True

        while has_more:
            media_type, has_more = self._read_media_type()
            accept.append(media_type)

        # list.sort is stable, also with reverse=True
        accept.sort(key=attrgetter("weight"), reverse=True)
        return accept

    def _read_media_type(self) -> tuple[MediaTypeRange, bool]:
        type_, sub_type = self._read_type_and_sub_type()
        self._skip_whitespace()

        if self.index == self.length:
            return MediaTypeRange(type=type_, sub_type=sub_type), False

        if self._read_separator() == ",":
            self._skip_whitespace()
            return MediaTypeRange(type=type_, sub_type=sub_type), True

        parameters: dict[str, str] = {}
        accept_ext: dict[str, str] = {}
        target = parameters
        weight = 1.0

        for name, value in self._read_parameters():
            if name == "q":
                target = accept_ext

                if not _WEIGHT_RE.fullmatch(value):
                    raise ParserError(f"Invalid weight: {value}", self.index)

                weight = float(value)
                continue

            target[name] = value

        self._skip_whitespace()
        has_more = self.index < self.length

        if has_more:
            self._consume_char(",")
            self._skip_whitespace()

        media_type = MediaTypeRange(
            type=type_,
            sub_type=sub_type,
            parameters=parameters,
            weight=weight,
            accept_ext=accept_ext,
        )
        return media_type, has_more

    def _read_type_and_sub_type(self) -> tuple[str, str]:
        type_ = self._read_token().lower()
        self._consume_char("/")
        sub_type = self._read_token().lower()
        return type_, sub_type

    def _read_parameters(self) -> list[tuple[str, str]]:
        parameters: list[tuple[str, str]] = []

        while self.index < self.length:
            self._skip_whitespace()
            parameters.append(self._read_parameter())
            self._skip_whitespace()

            if self.index == self.length or self.header[self.index] == ",":
                break

            self._consume_char(";")

        return parameters

    def _read_parameter(self) -> tuple[str, str]:
        self._skip_whitespace()
        name = self._read_token()
        self._consume_char("=")
        return name, self._read_parameter_value()

    def _read_parameter_value(self) -> str:
        if self.index < self.length and self.header[self.index] == '"':
            return self._read_quoted_string()
        return self._read_token()

    def _read_quoted_string(self) -> str:
        self._consume_char('"')
        chars: list[str] = []

        while self.index < self.length:
            char = self.header[self.index]
            self.index += 1

            if char == '"':
                return "".join(chars)

            if char != "\\":
                if char not in QD_TEXT:
                    raise ParserError(
                        f"Unexpected character at pos {self.index - 1}", self.index - 1
                    )
                chars.append(char)
                continue

            if self.index == self.length:
                raise ParserError("Unexpected end of header", self.index)

            quoted_char = self.header[self.index]
            self.index += 1

            if quoted_char not in QUOTED_PAIR:
                raise ParserError(
                    f"Unexpected character at pos {self.index - 1}", self.index - 1
                )
            chars.append(quoted_char)

        raise ParserError("Unclosed quoted string", self.index)

    def _skip_whitespace(self) -> None:
        while self.index < self.length and self.header[self.index] in " \t":
            self.index += 1

    def _consume_char(self, char: str) -> None:
        if self.index == self.length:
            raise ParserError("Unexpected end of header", self.index)

        found = self.header[self.index]
        if found != char:
            raise ParserError(
                f'Unexpected character "{found}" at pos {self.index}, expected "{char}"',
                self.index,
            )
        self.index += 1

    def _read_separator(self) -> str:
        # Callers check for the end of input first.
        char = self.header[self.index]
        self.index += 1

        if char not in ",;":
            raise ParserError(
                f"Unexpected character at pos {self.index - 1}, expected separator",
                self.index - 1,
            )
        return char

    def _read_token(self) -> str:
        start = self.index

        while self.index < self.length and self.header[self.index] in TCHAR:
            self.index += 1

        if self.index == start:
            raise ParserError(f"Could not find a token at pos {self.index}", self.index)
        return self.header[start : self.index]

    def _read_content_type(self) -> tuple[str, dict[str, str]]:
        self._skip_whitespace()
        type_, sub_type = self._read_type_and_sub_type()
        self._skip_whitespace()
        parameters: dict[str, str] = {}

        if self.index < self.length:
            self._consume_char(";")
            for name, value in self._read_parameters():
                parameters[name.lower()] = value

            if self.index < self.length:
                raise ParserError(
                    f"Unexpected character at pos {self.index}", self.index
                )

        return f"{type_}/{sub_type}", parameters


def parse_accept(header: str) -> list[MediaTypeRange]:
    """Parse an ``Accept`` header value into weighted media ranges."""
    return AcceptParser.parse(header)


def parse_content_type(header: str) -> tuple[str, dict[str, str]]:
    """Parse a ``Content-Type`` header into its media type and parameters."""
    return AcceptParser(header)._read_content_type()


def get_acceptable_media_types(header: str) -> list[AcceptableMediaType]:
    """Return the JSON:API media types acceptable according to ``header``.

    Only ranges matching ``application/vnd.api+json`` (wildcards included) are
    kept, and ranges carrying parameters other than ``ext`` and ``profile`` are
    dropped as JSON:API requires.
    """
    main_type, sub_type = JSONAPI_MEDIA_TYPE.split("/")
    acceptable: list[AcceptableMediaType] = []

    for media_type in parse_accept(header):
        if media_type.type not in {"*", main_type}:
            continue
        if media_type.sub_type not in {"*", sub_type}:
            continue

        rest = set(media_type.parameters) - {"ext", "profile"}
        if rest:
            continue

        ext = media_type.parameters.get("ext")
        profile = media_type.parameters.get("profile")
        acceptable.append(
            AcceptableMediaType(
                ext=ext.split(" ") if ext else [],
                profile=profile.split(" ") if profile else [],
            )
        )

    return acceptable


__all__ = [
    "JSONAPI_MEDIA_TYPE",
    "AcceptParser",
    "AcceptableMediaType",
    "MediaTypeRange",
    "format_media_type",
    "get_acceptable_media_types",
    "parse_accept",
    "parse_content_type",
]
