"""
Tests for C type declarations
"""

import pytest
from type_parsing import TypeGrammar, parse_type, resolve_type, typed
from error_handling import TypeDeclarationError
from values import (
  INT_T, UINT_T, LONG_T, ULONG_T, SHORT_T, USHORT_T, SCHAR_T, UCHAR_T, CHAR_T,
  DOUBLE_T, VOID_T, FUNCTION_T, P_VOID_T, P_CHAR_T, CP_CHAR_T, CP_ULONG_T,
  P_FUNCTION_T, Ref
)


class TestTypeDeclarations:
  """Test parsing of declarations into tags"""

  @pytest.fixture
  def grammar(self):
    """Provide a fresh grammar instance for each test"""
    return TypeGrammar()

  def test_base_types(self, grammar):
    assert grammar.parse("int") == INT_T
    assert grammar.parse("char") == CHAR_T
    assert grammar.parse("double") == DOUBLE_T
    assert grammar.parse("void") == VOID_T
    assert grammar.parse("function") == FUNCTION_T
    assert grammar.parse("fn") == FUNCTION_T

  def test_multi_word_types(self, grammar):
    assert grammar.parse("signed char") == SCHAR_T
    assert grammar.parse("unsigned char") == UCHAR_T
    assert grammar.parse("unsigned short") == USHORT_T
    assert grammar.parse("unsigned long int") == ULONG_T
    assert grammar.parse("unsigned int") == UINT_T
    assert grammar.parse("short int") == SHORT_T
    assert grammar.parse("long int") == LONG_T

  def test_abbreviations(self, grammar):
    assert grammar.parse("unsigned") == UINT_T
    assert grammar.parse("signed") == INT_T

  def test_pointers(self, grammar):
    assert grammar.parse("void *") == P_VOID_T
    assert grammar.parse("char*") == P_CHAR_T
    assert grammar.parse("function *") == P_FUNCTION_T

  def test_const_pointers(self, grammar):
    """Both placements of const are accepted"""
    assert grammar.parse("const char *") == CP_CHAR_T
    assert grammar.parse("char const *") == CP_CHAR_T
    assert grammar.parse("const unsigned long *") == CP_ULONG_T

  def test_const_without_pointer(self, grammar):
    with pytest.raises(TypeDeclarationError):
      grammar.parse("const int")

  def test_unknown_declarations(self, grammar):
    with pytest.raises(TypeDeclarationError):
      grammar.parse("integer")
    with pytest.raises(TypeDeclarationError):
      grammar.parse("int **")
    with pytest.raises(TypeDeclarationError):
      grammar.parse("")

  def test_error_location(self, grammar):
    with pytest.raises(TypeDeclarationError) as info:
      grammar.parse("int &")
    assert info.value.text == "int &"
    assert "^" in str(info.value)


class TestTypeResolution:
  """Test the helpers accepting tags or declarations"""

  def test_parse_type_strips_spaces(self):
    assert parse_type("  int  ") == INT_T

  def test_tags_are_plain_integers(self):
    """Tags from declarations work wherever numeric tags do"""
    for text in ("int", "unsigned long", "const char *", "void *"):
      assert type(parse_type(text)) is int
    assert parse_type("const unsigned long *") == CP_ULONG_T

  def test_resolve_type(self):
    assert resolve_type(INT_T) == INT_T
    assert resolve_type("const char *") == CP_CHAR_T

  def test_resolve_type_rejects_other_objects(self):
    with pytest.raises(TypeError):
      resolve_type(1.0)
    with pytest.raises(TypeError):
      resolve_type(True)

  def test_typed_numbers(self):
    value = typed("unsigned char", -1)
    assert value.tag == UCHAR_T
    assert value.payload == 255
    assert typed("int").payload == 0

  def test_typed_pointers(self):
    target = Ref()
    assert typed("const char *", "x").payload == "x"
    assert typed("void *", target).payload is target
    assert typed("void *").payload is None
