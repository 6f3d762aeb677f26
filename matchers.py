"""
Standin matchers
A matcher pairs a comparison callable with the value it compares against.
The options byte says which argument the callable receives:

  0        ordinary matcher, type-checked
  128      ordinary matcher, unchecked
  1..126   extra matcher bound to parameter N, type-checked
  129..254 extra matcher bound to parameter N - 128, unchecked
  127      parameter number out of range
  255      extra matcher receiving the whole call
"""

from typing import Any, Callable, Optional
from dataclasses import dataclass

from values import Value, values_equal


MAX_PARAMS = 127
UNCHECKED = 128
CALL_OPTS = UNCHECKED + MAX_PARAMS

# fn(argument, data) for parameter forms, fn(call, data) for the call form
MatchFn = Callable[[Any, Value], bool]


@dataclass(frozen=True)
class Matcher:
  value: Value
  fn: MatchFn
  opts: int = 0


def param_opts(nparam: int, checked: bool = True) -> int:
  """Options byte of a form bound to parameter nparam (1-based)"""
  if nparam <= 0 or nparam >= MAX_PARAMS:
    return MAX_PARAMS
  return nparam if checked else UNCHECKED + nparam


def is_ordinary_opts(opts: int) -> bool:
  return opts in (0, UNCHECKED)


def is_checked(opts: int) -> bool:
  return opts < MAX_PARAMS


def bound_index(opts: int) -> Optional[int]:
  """1-based parameter number of an extra form, None for other forms"""
  if 0 < opts < MAX_PARAMS:
    return opts
  if UNCHECKED < opts < CALL_OPTS:
    return opts - UNCHECKED
  return None


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def mparam(fn: MatchFn, value: Value) -> Matcher:
  """Ordinary matcher for the parameter at its own position"""
  return Matcher(value, fn, 0)


def mparam_nochk(fn: MatchFn, value: Value) -> Matcher:
  """Ordinary matcher that accepts arguments of any type"""
  return Matcher(value, fn, UNCHECKED)


def xparam(nparam: int, fn: MatchFn, value: Value) -> Matcher:
  """Extra matcher bound to parameter nparam"""
  return Matcher(value, fn, param_opts(nparam))


def xparam_nochk(nparam: int, fn: MatchFn, value: Value) -> Matcher:
  return Matcher(value, fn, param_opts(nparam, checked=False))


def xcall(fn: MatchFn, value: Value) -> Matcher:
  """Extra matcher called with the whole call record"""
  return Matcher(value, fn, CALL_OPTS)


def matchers_equal(m1: Matcher, m2: Matcher) -> bool:
  """Same options byte, same callable object and equal values"""
  return (m1.opts == m2.opts and
          m1.fn is m2.fn and
          values_equal(m1.value, m2.value))
