"""
Standin tagged values
One container for every primitive of the C type table plus its type tag
"""

from typing import Any, Callable, Optional
from dataclasses import dataclass
from enum import IntEnum
from functools import partial
import ctypes


# ============================================================================
# TYPE TAGS
# ============================================================================

class StdType(IntEnum):
  """Standard part of a type tag"""
  VOID = 0
  CHAR = 1
  SHORT = 2
  INT = 3
  LONG = 4
  FLOAT = 5
  DOUBLE = 6
  SCHAR = 7
  UCHAR = 8
  USHORT = 9
  UINT = 10
  ULONG = 11
  FUNCTION = 12


class PtrKind(IntEnum):
  """Pointer qualifier part of a type tag"""
  NONE = 0
  POINTER = 1
  CONST_POINTER = 2


TYPE_NAMES = (
  "void",
  "char",
  "short",
  "int",
  "long",
  "float",
  "double",
  "signed char",
  "unsigned char",
  "unsigned short",
  "unsigned int",
  "unsigned long",
  "function",
)


def make_tag(std: int, ptr: int = PtrKind.NONE) -> int:
  """Encode a (standard type, pointer qualifier) pair in one byte"""
  return (int(std) * 4) | int(ptr)


def std_type(tag: int) -> int:
  return tag // 4


def ptr_kind(tag: int) -> int:
  return tag & 3


def is_valid_type(tag: Any) -> bool:
  """True only for bytes inside the closed StdType x PtrKind cross-product"""
  if not isinstance(tag, int) or isinstance(tag, bool):
    return False
  if tag < 0 or tag > 255:
    return False
  return std_type(tag) <= StdType.FUNCTION and ptr_kind(tag) <= PtrKind.CONST_POINTER


def type_name(tag: int) -> str:
  """Readable type used in error messages, e.g. '(const unsigned long *)'"""
  std = std_type(tag)
  if std < 0 or std > StdType.FUNCTION:
    return str(std)
  ptr = ptr_kind(tag)
  text = "("
  if ptr == PtrKind.CONST_POINTER:
    text += "const "
  text += TYPE_NAMES[std]
  if ptr in (PtrKind.POINTER, PtrKind.CONST_POINTER):
    text += " *"
  return text + ")"


VOID_T = make_tag(StdType.VOID)
CHAR_T = make_tag(StdType.CHAR)
SHORT_T = make_tag(StdType.SHORT)
INT_T = make_tag(StdType.INT)
LONG_T = make_tag(StdType.LONG)
FLOAT_T = make_tag(StdType.FLOAT)
DOUBLE_T = make_tag(StdType.DOUBLE)
SCHAR_T = make_tag(StdType.SCHAR)
UCHAR_T = make_tag(StdType.UCHAR)
USHORT_T = make_tag(StdType.USHORT)
UINT_T = make_tag(StdType.UINT)
ULONG_T = make_tag(StdType.ULONG)
FUNCTION_T = make_tag(StdType.FUNCTION)

P_VOID_T = make_tag(StdType.VOID, PtrKind.POINTER)
P_CHAR_T = make_tag(StdType.CHAR, PtrKind.POINTER)
P_SHORT_T = make_tag(StdType.SHORT, PtrKind.POINTER)
P_INT_T = make_tag(StdType.INT, PtrKind.POINTER)
P_LONG_T = make_tag(StdType.LONG, PtrKind.POINTER)
P_FLOAT_T = make_tag(StdType.FLOAT, PtrKind.POINTER)
P_DOUBLE_T = make_tag(StdType.DOUBLE, PtrKind.POINTER)
P_SCHAR_T = make_tag(StdType.SCHAR, PtrKind.POINTER)
P_UCHAR_T = make_tag(StdType.UCHAR, PtrKind.POINTER)
P_USHORT_T = make_tag(StdType.USHORT, PtrKind.POINTER)
P_UINT_T = make_tag(StdType.UINT, PtrKind.POINTER)
P_ULONG_T = make_tag(StdType.ULONG, PtrKind.POINTER)
P_FUNCTION_T = make_tag(StdType.FUNCTION, PtrKind.POINTER)

CP_VOID_T = make_tag(StdType.VOID, PtrKind.CONST_POINTER)
CP_CHAR_T = make_tag(StdType.CHAR, PtrKind.CONST_POINTER)
CP_SHORT_T = make_tag(StdType.SHORT, PtrKind.CONST_POINTER)
CP_INT_T = make_tag(StdType.INT, PtrKind.CONST_POINTER)
CP_LONG_T = make_tag(StdType.LONG, PtrKind.CONST_POINTER)
CP_FLOAT_T = make_tag(StdType.FLOAT, PtrKind.CONST_POINTER)
CP_DOUBLE_T = make_tag(StdType.DOUBLE, PtrKind.CONST_POINTER)
CP_SCHAR_T = make_tag(StdType.SCHAR, PtrKind.CONST_POINTER)
CP_UCHAR_T = make_tag(StdType.UCHAR, PtrKind.CONST_POINTER)
CP_USHORT_T = make_tag(StdType.USHORT, PtrKind.CONST_POINTER)
CP_UINT_T = make_tag(StdType.UINT, PtrKind.CONST_POINTER)
CP_ULONG_T = make_tag(StdType.ULONG, PtrKind.CONST_POINTER)
CP_FUNCTION_T = make_tag(StdType.FUNCTION, PtrKind.CONST_POINTER)


# ============================================================================
# VALUES
# ============================================================================

# C storage of each numeric standard type
_CTYPES = {
  StdType.CHAR: ctypes.c_byte,
  StdType.SHORT: ctypes.c_short,
  StdType.INT: ctypes.c_int,
  StdType.LONG: ctypes.c_long,
  StdType.FLOAT: ctypes.c_float,
  StdType.DOUBLE: ctypes.c_double,
  StdType.SCHAR: ctypes.c_byte,
  StdType.UCHAR: ctypes.c_ubyte,
  StdType.USHORT: ctypes.c_ushort,
  StdType.UINT: ctypes.c_uint,
  StdType.ULONG: ctypes.c_ulong,
}

_FLOATING = (StdType.FLOAT, StdType.DOUBLE)
_CHARACTERS = (StdType.CHAR, StdType.SCHAR, StdType.UCHAR)


def is_numeric_type(std: int) -> bool:
  return std in _CTYPES


def wrap_scalar(std: int, val: Any) -> Any:
  """Normalise a Python number to the width and signedness of a C type"""
  if std in _CHARACTERS and isinstance(val, (str, bytes)):
    if len(val) != 1:
      raise ValueError(f"expected a single character, got {val!r}")
    val = ord(val)
  ctype = _CTYPES[StdType(std)]
  if std in _FLOATING:
    return ctype(float(val)).value
  return ctype(int(val)).value


@dataclass(frozen=True, eq=False)
class Value:
  """A primitive datum paired with the type tag giving its meaning"""
  tag: int = VOID_T
  payload: Any = None

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Value):
      return NotImplemented
    return values_equal(self, other)

  def __hash__(self) -> int:
    if _compares_by_identity(self.tag):
      return hash((self.tag, id(self.payload)))
    return hash((self.tag, self.payload))

  def __repr__(self) -> str:
    if is_valid_type(self.tag):
      return f"Value{type_name(self.tag)}({self.payload!r})"
    return f"Value(<invalid tag {self.tag}>, {self.payload!r})"


@dataclass(eq=False)
class Ref:
  """Mutable cell standing in for an object reached through a pointer"""
  value: Any = 0


def _compares_by_identity(tag: int) -> bool:
  return ptr_kind(tag) != PtrKind.NONE or std_type(tag) == StdType.FUNCTION


def values_equal(val1: Value, val2: Value) -> bool:
  """Equal tags and equal payloads: identity for pointers and functions,
  exact equality for numbers"""
  if val1.tag != val2.tag:
    return False
  if _compares_by_identity(val1.tag):
    return val1.payload is val2.payload
  return val1.payload == val2.payload


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def void() -> Value:
  """The empty value, also returned by failed calls"""
  return Value(VOID_T, None)


def scalar(std: int, val: Any = 0) -> Value:
  """Build a numeric value of the given standard type"""
  return Value(make_tag(std), wrap_scalar(std, val))


def fn(func: Optional[Callable]) -> Value:
  return Value(FUNCTION_T, func)


def pointer(std: int, obj: Any = None) -> Value:
  """Build a mutable pointer to obj; None is the null pointer"""
  return Value(make_tag(std, PtrKind.POINTER), obj)


def const_pointer(std: int, obj: Any = None) -> Value:
  return Value(make_tag(std, PtrKind.CONST_POINTER), obj)


c = partial(scalar, StdType.CHAR)
s = partial(scalar, StdType.SHORT)
i = partial(scalar, StdType.INT)
l = partial(scalar, StdType.LONG)
f = partial(scalar, StdType.FLOAT)
d = partial(scalar, StdType.DOUBLE)
sc = partial(scalar, StdType.SCHAR)
uc = partial(scalar, StdType.UCHAR)
us = partial(scalar, StdType.USHORT)
ui = partial(scalar, StdType.UINT)
ul = partial(scalar, StdType.ULONG)

p = partial(pointer, StdType.VOID)
p_c = partial(pointer, StdType.CHAR)
p_s = partial(pointer, StdType.SHORT)
p_i = partial(pointer, StdType.INT)
p_l = partial(pointer, StdType.LONG)
p_f = partial(pointer, StdType.FLOAT)
p_d = partial(pointer, StdType.DOUBLE)
p_sc = partial(pointer, StdType.SCHAR)
p_uc = partial(pointer, StdType.UCHAR)
p_us = partial(pointer, StdType.USHORT)
p_ui = partial(pointer, StdType.UINT)
p_ul = partial(pointer, StdType.ULONG)
p_fn = partial(pointer, StdType.FUNCTION)

cp = partial(const_pointer, StdType.VOID)
cp_c = partial(const_pointer, StdType.CHAR)
cp_s = partial(const_pointer, StdType.SHORT)
cp_i = partial(const_pointer, StdType.INT)
cp_l = partial(const_pointer, StdType.LONG)
cp_f = partial(const_pointer, StdType.FLOAT)
cp_d = partial(const_pointer, StdType.DOUBLE)
cp_sc = partial(const_pointer, StdType.SCHAR)
cp_uc = partial(const_pointer, StdType.UCHAR)
cp_us = partial(const_pointer, StdType.USHORT)
cp_ui = partial(const_pointer, StdType.UINT)
cp_ul = partial(const_pointer, StdType.ULONG)
cp_fn = partial(const_pointer, StdType.FUNCTION)


# ============================================================================
# ACCESSORS (no tag check, the caller picks the matching accessor)
# ============================================================================

def get_as(value: Value, std: int) -> Any:
  """Read the payload reinterpreted as the given standard type"""
  payload = value.payload
  if std not in _CTYPES or not isinstance(payload, (int, float)):
    return payload
  if std in _FLOATING:
    return _CTYPES[StdType(std)](float(payload)).value
  return _CTYPES[StdType(std)](int(payload)).value


def get_c(value: Value) -> str:
  return chr(get_as(value, StdType.UCHAR))


def get_p(value: Value) -> Any:
  return value.payload


get_s = partial(get_as, std=StdType.SHORT)
get_i = partial(get_as, std=StdType.INT)
get_l = partial(get_as, std=StdType.LONG)
get_f = partial(get_as, std=StdType.FLOAT)
get_d = partial(get_as, std=StdType.DOUBLE)
get_sc = partial(get_as, std=StdType.SCHAR)
get_uc = partial(get_as, std=StdType.UCHAR)
get_us = partial(get_as, std=StdType.USHORT)
get_ui = partial(get_as, std=StdType.UINT)
get_ul = partial(get_as, std=StdType.ULONG)
get_fn = get_p
get_cp = get_p
