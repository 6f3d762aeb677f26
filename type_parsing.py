"""
C type declarations for standin
Parses declarations like "const unsigned long *" into type tags
"""

from typing import Any, Union
from functools import lru_cache

from pyparsing import (
    Keyword, Literal, Optional as PyParsingOptional, ParseException,
    StringEnd, replace_with
)

from error_handling import TypeDeclarationError
from values import (
    StdType, PtrKind, Value, make_tag, std_type, ptr_kind, wrap_scalar,
    is_numeric_type
)


TypeSpec = Union[int, str]


class TypeGrammar:
    """Grammar of the declarations accepted wherever a type tag is expected"""

    def __init__(self):
        self._setup_grammar()

    def _setup_grammar(self):
        const_kw = Keyword("const")
        signed_kw = Keyword("signed")
        unsigned_kw = Keyword("unsigned")
        int_kw = Keyword("int")
        opt_int = PyParsingOptional(int_kw)

        def base(expr, std):
            return expr.copy().set_parse_action(replace_with(StdType(std)))

        # Longer spellings first, MatchFirst stops at the first success
        base_type = (
            base(signed_kw + Keyword("char"), StdType.SCHAR) |
            base(unsigned_kw + Keyword("char"), StdType.UCHAR) |
            base(unsigned_kw + Keyword("short") + opt_int, StdType.USHORT) |
            base(unsigned_kw + Keyword("long") + opt_int, StdType.ULONG) |
            base(unsigned_kw + opt_int, StdType.UINT) |
            base(signed_kw + Keyword("short") + opt_int, StdType.SHORT) |
            base(signed_kw + Keyword("long") + opt_int, StdType.LONG) |
            base(signed_kw + opt_int, StdType.INT) |
            base(Keyword("short") + opt_int, StdType.SHORT) |
            base(Keyword("long") + opt_int, StdType.LONG) |
            base(int_kw, StdType.INT) |
            base(Keyword("char"), StdType.CHAR) |
            base(Keyword("float"), StdType.FLOAT) |
            base(Keyword("double"), StdType.DOUBLE) |
            base(Keyword("void"), StdType.VOID) |
            base(Keyword("function") | Keyword("fn"), StdType.FUNCTION)
        )

        self.declaration = (
            PyParsingOptional(const_kw)("leading_const") +
            base_type("base") +
            PyParsingOptional(const_kw)("trailing_const") +
            PyParsingOptional(Literal("*"))("pointer") +
            StringEnd()
        )

    def parse(self, text: str) -> int:
        """Parse one declaration and return its type tag"""
        try:
            result = self.declaration.parse_string(text, parse_all=True)
        except ParseException as e:
            raise TypeDeclarationError(
                f"unknown type declaration {text!r} ({e.msg})", text, e.loc
            ) from e

        is_const = "leading_const" in result or "trailing_const" in result
        is_pointer = "pointer" in result
        if is_const and not is_pointer:
            raise TypeDeclarationError(
                "const qualifier is only supported on pointers", text, text.find("const")
            )
        if not is_pointer:
            ptr = PtrKind.NONE
        elif is_const:
            ptr = PtrKind.CONST_POINTER
        else:
            ptr = PtrKind.POINTER
        # the named alternative is an And, its only token is the StdType
        return make_tag(result["base"][0], ptr)


_grammar = TypeGrammar()


@lru_cache(maxsize=256)
def parse_type(text: str) -> int:
    """Type tag of a C declaration, e.g. parse_type("const char *")"""
    return _grammar.parse(text.strip())


def resolve_type(spec: TypeSpec) -> int:
    """Accept a tag byte as is, parse declaration strings"""
    if isinstance(spec, str):
        return parse_type(spec)
    if isinstance(spec, int) and not isinstance(spec, bool):
        return spec
    raise TypeError(f"expected a type tag or a type declaration, got {spec!r}")


def typed(spec: TypeSpec, payload: Any = None) -> Value:
    """Build a value from a declaration, e.g. typed("unsigned short", 7)"""
    tag = resolve_type(spec)
    std = std_type(tag)
    if ptr_kind(tag) == PtrKind.NONE and is_numeric_type(std):
        return Value(tag, wrap_scalar(std, 0 if payload is None else payload))
    return Value(tag, payload)
