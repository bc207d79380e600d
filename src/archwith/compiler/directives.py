# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for type-level and field-level directives.

Converts directive text into the typed Directive Model. Only syntax is
checked here; semantic rules belong to the validator.
"""

from __future__ import annotations

import keyword

from archwith.compiler.codegen import RESERVED_NAMES
from archwith.compiler.lexer import LexerError, Token, TokenType, tokenize
from archwith.model.directives import DirectiveModel, FieldDecl, FieldDirectives, MirrorDecl, Shape, TypeDirectives
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


class DirectiveSyntaxError(Exception):
    """Raised when directive text is malformed or uses an unknown key.

    Attributes:
        message: The error message without location.
        line: 1-based line number of the error inside the directive text.
        column: 1-based column number of the error inside the directive text.
        field_name: The field whose directives failed, or None for type-level directives.
    """

    def __init__(self, message: str, line: int, column: int, field_name: str | None = None) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column
        self.field_name = field_name


def parse_type_path(source: str) -> TypePath:
    """Parse a single type or function reference such as ``pkg.mod:Outer.Inner[int]``.

    Raises:
        DirectiveSyntaxError: If the text is not exactly one type path.
    """
    parser = _Parser(_tokenize(source))
    path = parser.parse_type_path()
    parser.expect_end()
    return path


def parse_type_directives(sources: list[str]) -> TypeDirectives:
    """Parse the type-level directives of a mirror type.

    Each source is one directive occurrence; ``from(...)`` lists from all
    occurrences are concatenated in order.

    Raises:
        DirectiveSyntaxError: On malformed text or a key other than ``from``.
    """
    remote_types: list[TypePath] = []
    for source in sources:
        remote_types.extend(_Parser(_tokenize(source)).parse_type_level())
    return TypeDirectives(remote_types=tuple(remote_types))


def parse_field_directives(sources: list[str]) -> FieldDirectives:
    """Parse the field-level directives of one field.

    Raises:
        DirectiveSyntaxError: On malformed text, unknown keys, or a key given twice.
    """
    collected = _FieldCollector()
    for source in sources:
        _Parser(_tokenize(source)).parse_field_level(collected)
    return collected.finish()


def parse_directives(decl: MirrorDecl) -> DirectiveModel:
    """Parse every directive attached to a mirror declaration.

    Also checks the declaration's shape and names: the type, its variants and
    its named fields must be usable as Python names in the generated module,
    field and variant names must be unique, a unit type or variant has no
    fields, and only a variants type declares variants.

    Raises:
        DirectiveSyntaxError: On the first syntax problem found; ``field_name``
            identifies the field when the problem is field-scoped, as
            ``Variant.field`` inside a variant.
    """
    _check_name(decl.name, "type name")
    if decl.name in RESERVED_NAMES:
        raise DirectiveSyntaxError(f"type name '{decl.name}' is reserved in generated modules", 1, 1)

    if decl.shape is Shape.VARIANTS:
        if decl.fields:
            raise DirectiveSyntaxError("a variants type declares its fields inside variants", 1, 1)
        if not decl.variants:
            raise DirectiveSyntaxError("a variants type must declare at least one variant", 1, 1)
    elif decl.variants:
        raise DirectiveSyntaxError(f"a {decl.shape.value} type cannot declare variants", 1, 1)

    type_directives = parse_type_directives(decl.directives)
    fields = _parse_fields(decl.fields, decl.shape)

    variants: dict[str, dict[str, FieldDirectives]] = {}
    for variant in decl.variants:
        _check_name(variant.name, "variant name")
        if variant.name in variants:
            raise DirectiveSyntaxError(f"duplicate variant '{variant.name}'", 1, 1)
        if variant.shape is Shape.VARIANTS:
            raise DirectiveSyntaxError(f"variant '{variant.name}' cannot itself have variants", 1, 1)
        variants[variant.name] = _parse_fields(variant.fields, variant.shape, prefix=f"{variant.name}.")

    return DirectiveModel(type=type_directives, fields=fields, variants=variants)


# ################
# Implementation
# ################


def _check_name(name: str, what: str, field_name: str | None = None) -> None:
    if not name.isidentifier():
        raise DirectiveSyntaxError(f"{what} '{name}' is not a Python identifier", 1, 1, field_name)
    if keyword.iskeyword(name):
        raise DirectiveSyntaxError(f"{what} '{name}' is a Python keyword", 1, 1, field_name)


def _parse_fields(decls: list[FieldDecl], shape: Shape, prefix: str = "") -> dict[str, FieldDirectives]:
    """Parse the directives of one field group; *prefix* qualifies field names in errors."""
    if shape is Shape.UNIT and decls:
        raise DirectiveSyntaxError("a unit type cannot declare fields", 1, 1, prefix + decls[0].name)

    fields: dict[str, FieldDirectives] = {}
    for field_decl in decls:
        label = prefix + field_decl.name
        if shape is not Shape.POSITIONAL:
            _check_name(field_decl.name, "field name", label)
        if field_decl.name in fields:
            raise DirectiveSyntaxError(f"duplicate field '{field_decl.name}'", 1, 1, label)
        try:
            fields[field_decl.name] = parse_field_directives(field_decl.directives)
        except DirectiveSyntaxError as exc:
            raise DirectiveSyntaxError(exc.message, exc.line, exc.column, label) from exc
    return fields


def _tokenize(source: str) -> list[Token]:
    try:
        return tokenize(source)
    except LexerError as exc:
        raise DirectiveSyntaxError(exc.message, exc.line, exc.column) from exc


class _FieldCollector:
    """Accumulates field directive items across several directive occurrences."""

    def __init__(self) -> None:
        self.from_type: TypePath | None = None
        self.via: tuple[TypePath, ...] | None = None
        self.getter: TypePath | None = None
        self.getter_owned = False
        self.wrappers: list[TypePath] = []
        self.seen: set[str] = set()

    def claim(self, key: Token) -> None:
        """Record that *key* was given, rejecting a second occurrence."""
        if key.value in self.seen:
            raise DirectiveSyntaxError(f"duplicate directive `{key.value}`", key.line, key.column)
        self.seen.add(key.value)

    def finish(self) -> FieldDirectives:
        return FieldDirectives(
            from_type=self.from_type,
            via=self.via,
            getter=self.getter,
            getter_owned=self.getter_owned,
            wrappers=tuple(self.wrappers),
        )


class _Parser:
    """Recursive-descent parser over one directive occurrence."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types."""
        return self._current().type in types

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types."""
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            got = "end of input" if tok.type == TokenType.EOF else repr(tok.value)
            raise DirectiveSyntaxError(f"Expected {expected}, got {got}", tok.line, tok.column)
        return self._advance()

    def expect_end(self) -> None:
        self._expect(TokenType.EOF)

    # ------------------------------------------------------------------
    # Directive lists
    # ------------------------------------------------------------------

    def parse_type_level(self) -> list[TypePath]:
        """Parse ``from(T, ...)`` items separated by commas."""
        remote_types: list[TypePath] = []
        while not self._check(TokenType.EOF):
            key = self._expect(TokenType.IDENTIFIER)
            if key.value != "from":
                raise DirectiveSyntaxError(f"expected `from`, got `{key.value}`", key.line, key.column)
            remote_types.extend(self._parse_parenthesized_paths(allow_empty=True))
            if not self._check(TokenType.EOF):
                self._expect(TokenType.COMMA)
        return remote_types

    def parse_field_level(self, collected: _FieldCollector) -> None:
        """Parse field directive items into *collected*."""
        while not self._check(TokenType.EOF):
            key = self._expect(TokenType.IDENTIFIER)
            if key.value == "from":
                collected.claim(key)
                paths = self._parse_parenthesized_paths(allow_empty=False)
                if len(paths) != 1:
                    raise DirectiveSyntaxError("`from` takes exactly one type", key.line, key.column)
                collected.from_type = paths[0]
            elif key.value == "via":
                collected.claim(key)
                collected.via = tuple(self._parse_parenthesized_paths(allow_empty=False))
            elif key.value == "with":
                collected.wrappers.extend(self._parse_parenthesized_paths(allow_empty=False))
            elif key.value == "getter":
                collected.claim(key)
                self._expect(TokenType.EQUALS)
                collected.getter = self._parse_path_string()
            elif key.value == "getter_owned":
                collected.claim(key)
                collected.getter_owned = True
            else:
                raise DirectiveSyntaxError(
                    f"unknown directive `{key.value}`; expected `from`, `via`, `with`, `getter`, or `getter_owned`",
                    key.line,
                    key.column,
                )
            if not self._check(TokenType.EOF):
                self._expect(TokenType.COMMA)

    def _parse_parenthesized_paths(self, *, allow_empty: bool) -> list[TypePath]:
        """Parse ``( T, T, ... )`` with an optional trailing comma."""
        open_tok = self._expect(TokenType.LPAREN)
        paths: list[TypePath] = []
        while not self._check(TokenType.RPAREN):
            paths.append(self.parse_type_path())
            if not self._check(TokenType.RPAREN):
                self._expect(TokenType.COMMA)
        self._expect(TokenType.RPAREN)
        if not paths and not allow_empty:
            raise DirectiveSyntaxError("expected at least one type", open_tok.line, open_tok.column)
        return paths

    def _parse_path_string(self) -> TypePath:
        """Parse a string literal whose content is a type path."""
        tok = self._expect(TokenType.STRING)
        try:
            return parse_type_path(tok.value)
        except DirectiveSyntaxError as exc:
            raise DirectiveSyntaxError(f"invalid path {tok.value!r}: {exc}", tok.line, tok.column) from exc

    # ------------------------------------------------------------------
    # Type paths
    # ------------------------------------------------------------------

    def parse_type_path(self) -> TypePath:
        """Parse ``dotted[:dotted][ [T, ...] ]``."""
        segments = self._parse_dotted()
        module: str | None = None
        explicit = False
        if self._check(TokenType.COLON):
            self._advance()
            module = ".".join(segments)
            segments = self._parse_dotted()
            explicit = True
        elif len(segments) > 1:
            module = ".".join(segments[:-1])
            segments = segments[-1:]

        args: list[TypePath] = []
        if self._check(TokenType.LBRACKET):
            self._advance()
            args.append(self.parse_type_path())
            while self._check(TokenType.COMMA):
                self._advance()
                if self._check(TokenType.RBRACKET):
                    break
                args.append(self.parse_type_path())
            self._expect(TokenType.RBRACKET)

        return TypePath(module=module, qualname=".".join(segments), args=tuple(args), explicit_module=explicit)

    def _parse_dotted(self) -> list[str]:
        segments = [self._expect(TokenType.IDENTIFIER).value]
        while self._check(TokenType.DOT):
            self._advance()
            segments.append(self._expect(TokenType.IDENTIFIER).value)
        return segments
