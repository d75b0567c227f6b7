"""
Syntax tree models for annotated declarations.

The host language parser is an external collaborator; its output arrives as
this tree of immutable pydantic models. Every node can be rendered back to
source text, which is how generated code refers to user types.

Nodes that come in several shapes (types, patterns, parameters, attribute
metadata, impl members, items) are discriminated unions keyed on ``kind``,
so a tree can be validated straight from JSON:

Example:
    >>> item = parse_item({
    ...     "kind": "impl",
    ...     "self_ty": {"kind": "path", "path": "Server"},
    ...     "items": [],
    ... })
    >>> item.self_ty.render()
    'Server'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_ident(text: str) -> bool:
    """Return True if text is a plain identifier (``_`` alone is a pattern, not a name)."""
    return bool(IDENT_RE.match(text)) and text != "_"


def _coerce_type(value: Any) -> Any:
    """Accept type source text wherever a type node is expected."""
    if isinstance(value, str):
        return parse_type(value)
    return value


class SyntaxNode(BaseModel):
    """Base class for all tree nodes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


# =============================================================================
# Paths and types
# =============================================================================


class PathSegment(SyntaxNode):
    """One ``::`` separated segment, optionally with generic arguments."""

    ident: str
    args: tuple[Type, ...] = ()

    @field_validator("ident")
    @classmethod
    def check_ident(cls, value: str) -> str:
        if not is_ident(value):
            raise ValueError(f"'{value}' is not an identifier")
        return value

    def render(self) -> str:
        if not self.args:
            return self.ident
        return f"{self.ident}<{', '.join(arg.render() for arg in self.args)}>"


class Path(SyntaxNode):
    """
    A type path such as ``Ping`` or ``std::io::Error``.

    Paths compare structurally: ``Path.parse("a::Ping")`` is not equal to
    ``Path.parse("Ping")`` even though both end in ``Ping``.
    """

    segments: tuple[PathSegment, ...]
    leading_colon: bool = False

    @model_validator(mode="before")
    @classmethod
    def from_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            path = _TypeParser(data).parse_path_only()
            return {"segments": path.segments, "leading_colon": path.leading_colon}
        if isinstance(data, Mapping) and "segments" in data:
            segments = [
                {"ident": segment} if isinstance(segment, str) else segment
                for segment in data["segments"]
            ]
            return {**data, "segments": segments}
        return data

    @field_validator("segments")
    @classmethod
    def check_segments(cls, value: tuple[PathSegment, ...]) -> tuple[PathSegment, ...]:
        if not value:
            raise ValueError("a path needs at least one segment")
        return value

    @classmethod
    def parse(cls, text: str) -> Path:
        """
        Build a path from its source text, e.g. ``io::Error`` or ``Context<Self>``.

        Raises:
            ValueError: If the text is not a type path
        """
        return _TypeParser(text).parse_path_only()

    @property
    def last(self) -> PathSegment:
        return self.segments[-1]

    def render(self) -> str:
        prefix = "::" if self.leading_colon else ""
        return prefix + "::".join(segment.render() for segment in self.segments)


class PathType(SyntaxNode):
    kind: Literal["path"] = "path"
    path: Path

    def render(self) -> str:
        return self.path.render()


class ReferenceType(SyntaxNode):
    kind: Literal["reference"] = "reference"
    elem: Type
    mutable: bool = False
    lifetime: str | None = None

    @field_validator("elem", mode="before")
    @classmethod
    def coerce_elem(cls, value: Any) -> Any:
        return _coerce_type(value)

    def render(self) -> str:
        parts = ["&"]
        if self.lifetime:
            parts.append(f"'{self.lifetime} ")
        if self.mutable:
            parts.append("mut ")
        parts.append(self.elem.render())
        return "".join(parts)


class TupleType(SyntaxNode):
    kind: Literal["tuple"] = "tuple"
    elems: tuple[Type, ...] = ()

    def render(self) -> str:
        if len(self.elems) == 1:
            return f"({self.elems[0].render()},)"
        return f"({', '.join(elem.render() for elem in self.elems)})"


Type = Annotated[PathType | ReferenceType | TupleType, Field(discriminator="kind")]

_TOKEN_RE = re.compile(r"\s*(::|'[A-Za-z_][A-Za-z0-9_]*|[A-Za-z_][A-Za-z0-9_]*|\S)")


class _TypeParser:
    """Recursive descent parser for type text: paths, references and tuples."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens: list[str] = _TOKEN_RE.findall(text)
        self._pos = 0

    def parse_path_only(self) -> Path:
        path = self._path()
        self._finish()
        return path

    def parse_type(self) -> PathType | ReferenceType | TupleType:
        ty = self._type()
        self._finish()
        return ty

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of input")
        self._pos += 1
        return token

    def _error(self, reason: str) -> ValueError:
        return ValueError(f"'{self._text}' is not a type: {reason}")

    def _finish(self) -> None:
        token = self._peek()
        if token is not None:
            raise self._error(f"unexpected '{token}'")

    def _type(self) -> PathType | ReferenceType | TupleType:
        token = self._peek()
        if token == "&":
            self._next()
            lifetime = None
            if (self._peek() or "").startswith("'"):
                lifetime = self._next()[1:]
            mutable = self._peek() == "mut"
            if mutable:
                self._next()
            return ReferenceType(elem=self._type(), mutable=mutable, lifetime=lifetime)
        if token == "(":
            self._next()
            elems = []
            while self._peek() != ")":
                elems.append(self._type())
                if self._peek() == ",":
                    self._next()
                elif self._peek() != ")":
                    raise self._error("expected ',' or ')'")
            self._next()
            return TupleType(elems=tuple(elems))
        return PathType(path=self._path())

    def _path(self) -> Path:
        leading_colon = self._peek() == "::"
        if leading_colon:
            self._next()

        segments = []
        while True:
            ident = self._next()
            if not is_ident(ident):
                raise self._error(f"'{ident}' is not an identifier")
            args = []
            if self._peek() == "<":
                self._next()
                while True:
                    args.append(self._type())
                    token = self._next()
                    if token == ">":
                        break
                    if token != ",":
                        raise self._error("expected ',' or '>'")
            segments.append(PathSegment(ident=ident, args=tuple(args)))
            if self._peek() != "::":
                break
            self._next()

        return Path(segments=tuple(segments), leading_colon=leading_colon)


def parse_type(text: str) -> PathType | ReferenceType | TupleType:
    """
    Build a type from its source text, e.g. ``&mut Vec<u8>`` or ``(i32, String)``.

    Raises:
        ValueError: If the text is not a path, reference or tuple type
    """
    return _TypeParser(text).parse_type()


# =============================================================================
# Patterns and parameters
# =============================================================================


class IdentPat(SyntaxNode):
    kind: Literal["ident"] = "ident"
    name: str
    by_ref: bool = False
    mutable: bool = False

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if not is_ident(value):
            raise ValueError(f"'{value}' is not an identifier")
        return value

    def render(self) -> str:
        prefix = ("ref " if self.by_ref else "") + ("mut " if self.mutable else "")
        return prefix + self.name


class WildPat(SyntaxNode):
    kind: Literal["wild"] = "wild"

    def render(self) -> str:
        return "_"


class TuplePat(SyntaxNode):
    kind: Literal["tuple"] = "tuple"
    elems: tuple[Pat, ...] = ()

    def render(self) -> str:
        return f"({', '.join(elem.render() for elem in self.elems)})"


class StructPat(SyntaxNode):
    kind: Literal["struct"] = "struct"
    path: Path
    field_names: tuple[str, ...] = ()

    def render(self) -> str:
        return f"{self.path.render()} {{ {', '.join(self.field_names)} }}"


Pat = Annotated[IdentPat | WildPat | TuplePat | StructPat, Field(discriminator="kind")]


class SelfArg(SyntaxNode):
    """The method receiver: ``self``, ``&self`` or ``&mut self``."""

    kind: Literal["self"] = "self"
    reference: bool = True
    mutable: bool = True

    def render(self) -> str:
        if not self.reference:
            return "mut self" if self.mutable else "self"
        return "&mut self" if self.mutable else "&self"


class CapturedArg(SyntaxNode):
    """A parameter with a binding pattern and a declared type."""

    kind: Literal["captured"] = "captured"
    pat: Pat
    ty: Type

    @field_validator("ty", mode="before")
    @classmethod
    def coerce_ty(cls, value: Any) -> Any:
        return _coerce_type(value)

    def render(self) -> str:
        return f"{self.pat.render()}: {self.ty.render()}"


class IgnoredArg(SyntaxNode):
    """A parameter whose binding was elided, leaving only its type."""

    kind: Literal["ignored"] = "ignored"
    ty: Type

    @field_validator("ty", mode="before")
    @classmethod
    def coerce_ty(cls, value: Any) -> Any:
        return _coerce_type(value)

    def render(self) -> str:
        return self.ty.render()


FnArg = Annotated[SelfArg | CapturedArg | IgnoredArg, Field(discriminator="kind")]


# =============================================================================
# Attributes
# =============================================================================


_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


def _escape(text: str, quote: str, *, byte: bool = False) -> str:
    """Escape text the way it is written between the quotes of a literal."""
    out = []
    for char in text:
        code = ord(char)
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif char == quote:
            out.append("\\" + char)
        elif code < 0x20 or code == 0x7F or (byte and 0x7F < code <= 0xFF):
            out.append(f"\\x{code:02x}" if byte else f"\\u{{{code:x}}}")
        else:
            out.append(char)
    return "".join(out)


class Lit(SyntaxNode):
    """A literal token. ``value`` holds the text without quoting."""

    kind: Literal["str", "byte_str", "char", "int", "float", "bool"] = "str"
    value: str

    def render(self) -> str:
        if self.kind == "str":
            return '"' + _escape(self.value, '"') + '"'
        if self.kind == "byte_str":
            return 'b"' + _escape(self.value, '"', byte=True) + '"'
        if self.kind == "char":
            return "'" + _escape(self.value, "'") + "'"
        return self.value


class WordMeta(SyntaxNode):
    """A bare word: ``#[inline]`` or the ``Ping`` in ``#[simple(Ping)]``."""

    kind: Literal["word"] = "word"
    name: str

    def render(self) -> str:
        return self.name


class ListMeta(SyntaxNode):
    """A name followed by a parenthesized list: ``#[simple(Ping)]``."""

    kind: Literal["list"] = "list"
    name: str
    nested: tuple[NestedMeta, ...] = ()

    def render(self) -> str:
        return f"{self.name}({', '.join(item.render() for item in self.nested)})"


class NameValueMeta(SyntaxNode):
    """A name bound to a literal: ``#[doc = "..."]``."""

    kind: Literal["name_value"] = "name_value"
    name: str
    lit: Lit

    def render(self) -> str:
        return f"{self.name} = {self.lit.render()}"


class LiteralMeta(SyntaxNode):
    """A literal inside an attribute list: the ``"Ping"`` in ``#[simple("Ping")]``."""

    kind: Literal["literal"] = "literal"
    lit: Lit

    def render(self) -> str:
        return self.lit.render()


MetaItem = Annotated[WordMeta | ListMeta | NameValueMeta, Field(discriminator="kind")]
NestedMeta = Annotated[
    WordMeta | ListMeta | NameValueMeta | LiteralMeta, Field(discriminator="kind")
]


class Attribute(SyntaxNode):
    meta: MetaItem

    @property
    def name(self) -> str:
        return self.meta.name

    def render(self) -> str:
        return f"#[{self.meta.render()}]"


# =============================================================================
# Impl members and items
# =============================================================================


class AnnotatedMethod(SyntaxNode):
    """A method signature together with the attributes attached to it."""

    kind: Literal["method"] = "method"
    name: str
    inputs: tuple[FnArg, ...] = ()
    output: Type | None = None
    attrs: tuple[Attribute, ...] = ()

    @field_validator("output", mode="before")
    @classmethod
    def coerce_output(cls, value: Any) -> Any:
        return _coerce_type(value)

    @property
    def has_receiver(self) -> bool:
        return any(isinstance(arg, SelfArg) for arg in self.inputs)

    def render(self) -> str:
        signature = f"fn {self.name}({', '.join(arg.render() for arg in self.inputs)})"
        if self.output is not None:
            signature += f" -> {self.output.render()}"
        return signature


class AssociatedConst(SyntaxNode):
    kind: Literal["const"] = "const"
    name: str
    ty: Type
    attrs: tuple[Attribute, ...] = ()

    @field_validator("ty", mode="before")
    @classmethod
    def coerce_ty(cls, value: Any) -> Any:
        return _coerce_type(value)

    def render(self) -> str:
        return f"const {self.name}: {self.ty.render()}"


class AssociatedType(SyntaxNode):
    kind: Literal["type"] = "type"
    name: str
    ty: Type
    attrs: tuple[Attribute, ...] = ()

    @field_validator("ty", mode="before")
    @classmethod
    def coerce_ty(cls, value: Any) -> Any:
        return _coerce_type(value)

    def render(self) -> str:
        return f"type {self.name} = {self.ty.render()}"


ImplMember = Annotated[
    AnnotatedMethod | AssociatedConst | AssociatedType, Field(discriminator="kind")
]


class ImplBlock(SyntaxNode):
    """
    An ``impl`` block.

    ``trait_path`` is set for trait implementations (``impl Trait for Type``),
    which the handler processor rejects.
    """

    kind: Literal["impl"] = "impl"
    self_ty: Type
    trait_path: Path | None = None
    items: tuple[ImplMember, ...] = ()

    @field_validator("self_ty", mode="before")
    @classmethod
    def coerce_self_ty(cls, value: Any) -> Any:
        return _coerce_type(value)

    @property
    def methods(self) -> list[AnnotatedMethod]:
        return [item for item in self.items if isinstance(item, AnnotatedMethod)]

    @property
    def is_trait_impl(self) -> bool:
        return self.trait_path is not None

    def render(self) -> str:
        if self.trait_path is not None:
            return f"impl {self.trait_path.render()} for {self.self_ty.render()}"
        return f"impl {self.self_ty.render()}"


class NamedItem(SyntaxNode):
    """Any other item: only its kind and name matter to the processor."""

    kind: Literal["struct", "enum", "fn", "trait", "mod", "const", "static", "type", "use"]
    name: str

    def render(self) -> str:
        return f"{self.kind} {self.name}"


Item = Annotated[ImplBlock | NamedItem, Field(discriminator="kind")]

for _model in (
    PathSegment,
    Path,
    PathType,
    ReferenceType,
    TupleType,
    TuplePat,
    StructPat,
    CapturedArg,
    IgnoredArg,
    ListMeta,
    Attribute,
    AnnotatedMethod,
    AssociatedConst,
    AssociatedType,
    ImplBlock,
):
    _model.model_rebuild()


_item_adapter: TypeAdapter[ImplBlock | NamedItem] = TypeAdapter(Item)


def parse_item(data: Mapping[str, Any] | str | bytes) -> ImplBlock | NamedItem:
    """
    Validate a parsed declaration into its model.

    Args:
        data: A mapping, or a JSON document as str or bytes

    Returns:
        The validated item

    Raises:
        pydantic.ValidationError: If the data does not describe a known item
    """
    if isinstance(data, str | bytes):
        return _item_adapter.validate_json(data)
    return _item_adapter.validate_python(data)


def parse_path(text: str) -> Path:
    """Shortcut for ``Path.parse``."""
    return Path.parse(text)


__all__ = [
    "AnnotatedMethod",
    "AssociatedConst",
    "AssociatedType",
    "Attribute",
    "CapturedArg",
    "FnArg",
    "IdentPat",
    "IgnoredArg",
    "ImplBlock",
    "ImplMember",
    "Item",
    "ListMeta",
    "Lit",
    "LiteralMeta",
    "MetaItem",
    "NameValueMeta",
    "NamedItem",
    "NestedMeta",
    "Pat",
    "Path",
    "PathSegment",
    "PathType",
    "ReferenceType",
    "SelfArg",
    "StructPat",
    "SyntaxNode",
    "TuplePat",
    "TupleType",
    "Type",
    "WildPat",
    "WordMeta",
    "is_ident",
    "parse_item",
    "parse_type",
    "parse_path",
]
