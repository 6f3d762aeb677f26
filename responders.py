"""
Standin responders
Same options byte as matchers, but a responder is always bound to a
parameter or to the whole call, never to its own position.
"""

from typing import Any, Callable
from dataclasses import dataclass

from values import Value
from matchers import CALL_OPTS, param_opts


# fn(argument, data) for parameter forms, fn(call, data) for the call form
RespondFn = Callable[[Any, Value], Value]


@dataclass(frozen=True)
class Responder:
  value: Value
  fn: RespondFn
  opts: int = CALL_OPTS


def rparam(nparam: int, fn: RespondFn, value: Value) -> Responder:
  """Responder receiving parameter nparam, whose type must match value's"""
  return Responder(value, fn, param_opts(nparam))


def rparam_nochk(nparam: int, fn: RespondFn, value: Value) -> Responder:
  return Responder(value, fn, param_opts(nparam, checked=False))


def rcall(fn: RespondFn, value: Value) -> Responder:
  """Responder receiving the whole call record"""
  return Responder(value, fn, CALL_OPTS)
