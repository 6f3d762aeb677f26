"""
Standin standard library
Predefined matchers and responders built on the public constructors
"""

from typing import Any, Callable
from functools import partial
import operator

from values import (
  Value, Ref, StdType, PtrKind, std_type, ptr_kind, is_numeric_type,
  wrap_scalar, void, p_c, cp_c,
  CHAR_T, SHORT_T, INT_T, LONG_T, FLOAT_T, DOUBLE_T, SCHAR_T, UCHAR_T,
  USHORT_T, UINT_T, ULONG_T, FUNCTION_T,
  P_VOID_T, P_CHAR_T, P_SHORT_T, P_INT_T, P_LONG_T, P_FLOAT_T, P_DOUBLE_T,
  P_SCHAR_T, P_UCHAR_T, P_USHORT_T, P_UINT_T, P_ULONG_T, P_FUNCTION_T,
  CP_VOID_T, CP_CHAR_T, CP_SHORT_T, CP_INT_T, CP_LONG_T, CP_FLOAT_T,
  CP_DOUBLE_T, CP_SCHAR_T, CP_UCHAR_T, CP_USHORT_T, CP_UINT_T, CP_ULONG_T,
  CP_FUNCTION_T
)
from type_parsing import TypeSpec, typed
from matchers import Matcher, mparam, mparam_nochk
from responders import Responder, rcall


# ============================================================================
# VALUE COMPARISONS
# ============================================================================

_ORDERING_OPS = (operator.lt, operator.le, operator.gt, operator.ge)


def compare_values(param: Value, data: Value, op: Callable[[Any, Any], bool]) -> bool:
  """Compare an argument with matcher data

  Values of different types never match. Pointers and functions only
  support eq and ne, which compare identity.
  """
  if param.tag != data.tag:
    return False
  tag = param.tag
  if ptr_kind(tag) != PtrKind.NONE or std_type(tag) == StdType.FUNCTION:
    if op is operator.eq:
      return param.payload is data.payload
    if op is operator.ne:
      return param.payload is not data.payload
    return False
  if not is_numeric_type(std_type(tag)):
    return False
  return op(param.payload, data.payload)


def compare_eq(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.eq)


def compare_ne(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.ne)


def compare_lt(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.lt)


def compare_le(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.le)


def compare_gt(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.gt)


def compare_ge(param: Value, data: Value) -> bool:
  return compare_values(param, data, operator.ge)


# Comparisons that make no sense on function values
ORDERING_COMPARISONS = frozenset((compare_lt, compare_le, compare_gt, compare_ge))


def eq(value: Value) -> Matcher:
  """Match arguments equal to value"""
  return mparam(compare_eq, value)


def ne(value: Value) -> Matcher:
  return mparam(compare_ne, value)


def lt(value: Value) -> Matcher:
  """Match arguments lower than value"""
  return mparam(compare_lt, value)


def le(value: Value) -> Matcher:
  return mparam(compare_le, value)


def gt(value: Value) -> Matcher:
  return mparam(compare_gt, value)


def ge(value: Value) -> Matcher:
  return mparam(compare_ge, value)


# ============================================================================
# STRING COMPARISONS
# ============================================================================

def _text(payload: Any) -> Any:
  if isinstance(payload, (bytes, bytearray)):
    return bytes(payload).decode("latin-1")
  return payload


def compare_strings(param: Value, data: Value, op: Callable[[Any, Any], bool]) -> bool:
  """Compare the characters pointed to by two char pointers"""
  text1, text2 = _text(param.payload), _text(data.payload)
  if not isinstance(text1, str) or not isinstance(text2, str):
    return False
  return op(text1, text2)


def has_substring(param: Value, data: Value) -> bool:
  """True when data's text occurs in the argument; the empty text occurs in any non-null text"""
  text, sub = _text(param.payload), _text(data.payload)
  if not isinstance(text, str) or not isinstance(sub, str):
    return False
  return sub in text


def compare_eq_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.eq)


def compare_ne_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.ne)


def compare_lt_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.lt)


def compare_le_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.le)


def compare_gt_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.gt)


def compare_ge_str(param: Value, data: Value) -> bool:
  return compare_strings(param, data, operator.ge)


def eq_str(text) -> Matcher:
  """Match a char * argument holding the same characters as text"""
  return mparam(compare_eq_str, p_c(text))


def ne_str(text) -> Matcher:
  return mparam(compare_ne_str, p_c(text))


def lt_str(text) -> Matcher:
  return mparam(compare_lt_str, p_c(text))


def le_str(text) -> Matcher:
  return mparam(compare_le_str, p_c(text))


def gt_str(text) -> Matcher:
  return mparam(compare_gt_str, p_c(text))


def ge_str(text) -> Matcher:
  return mparam(compare_ge_str, p_c(text))


def eq_cstr(text) -> Matcher:
  """Match a const char * argument holding the same characters as text"""
  return mparam(compare_eq_str, cp_c(text))


def ne_cstr(text) -> Matcher:
  return mparam(compare_ne_str, cp_c(text))


def lt_cstr(text) -> Matcher:
  return mparam(compare_lt_str, cp_c(text))


def le_cstr(text) -> Matcher:
  return mparam(compare_le_str, cp_c(text))


def gt_cstr(text) -> Matcher:
  return mparam(compare_gt_str, cp_c(text))


def ge_cstr(text) -> Matcher:
  return mparam(compare_ge_str, cp_c(text))


def substr(text) -> Matcher:
  """Match a char * argument containing text"""
  return mparam(has_substring, p_c(text))


def csubstr(text) -> Matcher:
  return mparam(has_substring, cp_c(text))


# ============================================================================
# ANY MATCHERS
# ============================================================================

def match_any(param: Any, data: Value) -> bool:
  return True


def any_() -> Matcher:
  """Match one argument of any type"""
  return mparam_nochk(match_any, void())


def any_of(type_spec: TypeSpec) -> Matcher:
  """Match any argument of the given type, e.g. any_of("const char *")"""
  return mparam(match_any, typed(type_spec))


any_c = partial(any_of, CHAR_T)
any_s = partial(any_of, SHORT_T)
any_i = partial(any_of, INT_T)
any_l = partial(any_of, LONG_T)
any_f = partial(any_of, FLOAT_T)
any_d = partial(any_of, DOUBLE_T)
any_sc = partial(any_of, SCHAR_T)
any_uc = partial(any_of, UCHAR_T)
any_us = partial(any_of, USHORT_T)
any_ui = partial(any_of, UINT_T)
any_ul = partial(any_of, ULONG_T)
any_fn = partial(any_of, FUNCTION_T)

any_p = partial(any_of, P_VOID_T)
any_p_c = partial(any_of, P_CHAR_T)
any_p_s = partial(any_of, P_SHORT_T)
any_p_i = partial(any_of, P_INT_T)
any_p_l = partial(any_of, P_LONG_T)
any_p_f = partial(any_of, P_FLOAT_T)
any_p_d = partial(any_of, P_DOUBLE_T)
any_p_sc = partial(any_of, P_SCHAR_T)
any_p_uc = partial(any_of, P_UCHAR_T)
any_p_us = partial(any_of, P_USHORT_T)
any_p_ui = partial(any_of, P_UINT_T)
any_p_ul = partial(any_of, P_ULONG_T)
any_p_fn = partial(any_of, P_FUNCTION_T)

any_cp = partial(any_of, CP_VOID_T)
any_cp_c = partial(any_of, CP_CHAR_T)
any_cp_s = partial(any_of, CP_SHORT_T)
any_cp_i = partial(any_of, CP_INT_T)
any_cp_l = partial(any_of, CP_LONG_T)
any_cp_f = partial(any_of, CP_FLOAT_T)
any_cp_d = partial(any_of, CP_DOUBLE_T)
any_cp_sc = partial(any_of, CP_SCHAR_T)
any_cp_uc = partial(any_of, CP_UCHAR_T)
any_cp_us = partial(any_of, CP_USHORT_T)
any_cp_ui = partial(any_of, CP_UINT_T)
any_cp_ul = partial(any_of, CP_ULONG_T)
any_cp_fn = partial(any_of, CP_FUNCTION_T)


# ============================================================================
# RESPONDERS
# ============================================================================

def respond_value(call: Any, data: Value) -> Value:
  return data


def return_(value: Value) -> Responder:
  """Make the call return value"""
  return rcall(respond_value, value)


def increment_target(call: Any, data: Value) -> Value:
  """Add one to the Ref behind a mutable numeric pointer"""
  std = std_type(data.tag)
  target = data.payload
  if ptr_kind(data.tag) == PtrKind.POINTER and is_numeric_type(std) and isinstance(target, Ref):
    target.value = wrap_scalar(std, target.value + 1)
  return void()


def count(ptr: Value) -> Responder:
  """Count calls in the Ref ptr points to, e.g. count(p_i(calls))"""
  return rcall(increment_target, ptr)
