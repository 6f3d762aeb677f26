"""
Standin dispatch
Matches a call against the registered mappings and runs the responders of
the first mapping that accepts it
"""

from typing import Any, Optional, Sequence, Tuple
from dataclasses import dataclass
import logging

from values import Value, FUNCTION_T, is_valid_type, void
from matchers import (
  Matcher, MAX_PARAMS, CALL_OPTS, is_ordinary_opts, is_checked, bound_index
)
from responders import Responder
from registry import Registry, MappingEntry, ErrorSink
from error_handling import ErrorKind
from type_parsing import TypeSpec, resolve_type
from stdlib import ORDERING_COMPARISONS


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Call:
  """What whole-call matchers and responders receive"""
  funcname: str
  params: Tuple[Value, ...]

  @property
  def nparams(self) -> int:
    return len(self.params)


# ============================================================================
# CHECKS
# ============================================================================

class DispatchCheckError(Exception):
  """A matcher or responder that cannot be applied to the current call"""
  def __init__(self, kind: ErrorKind, pos: int, actual_type: int = 0, expected_type: int = 0):
    self.kind = kind
    self.pos = pos
    self.actual_type = actual_type
    self.expected_type = expected_type
    super().__init__(f"{kind.name} at position {pos}")


def _check_value(item: Any, pos: int, index: Optional[int], params: Sequence[Value]) -> None:
  """Validate the tag and, for checked forms, compare it with the argument's"""
  tag = item.value.tag
  if not is_valid_type(tag):
    raise DispatchCheckError(ErrorKind.INVALID_TYPE, pos, tag, tag)
  if isinstance(item, Matcher) and tag == FUNCTION_T and item.fn in ORDERING_COMPARISONS:
    raise DispatchCheckError(ErrorKind.INVALID_OPERATOR, pos)
  if index is not None and is_checked(item.opts):
    actual = params[index - 1].tag
    if actual != tag:
      raise DispatchCheckError(ErrorKind.UNEXPECTED_PARAMETER_TYPE, pos, actual, tag)


def check_matcher(matcher: Matcher, pos: int, params: Sequence[Value]) -> None:
  """Raise DispatchCheckError if the matcher at 1-based pos cannot run"""
  nparams = len(params)
  opts = matcher.opts
  ordinary = is_ordinary_opts(opts)
  if (pos <= nparams) != ordinary:
    raise DispatchCheckError(ErrorKind.INVALID_MATCHER_PLACEMENT, pos)
  index = bound_index(opts)
  if pos > nparams and (opts == MAX_PARAMS or (index is not None and index > nparams)):
    raise DispatchCheckError(ErrorKind.INVALID_PARAMETER_INDEX, pos)
  _check_value(matcher, pos, pos if ordinary else index, params)


def check_responder(responder: Responder, pos: int, params: Sequence[Value]) -> None:
  """Raise DispatchCheckError if the responder cannot run for these arguments"""
  opts = responder.opts
  index = bound_index(opts)
  if opts != CALL_OPTS and (index is None or index > len(params)):
    raise DispatchCheckError(ErrorKind.INVALID_PARAMETER_INDEX, pos)
  _check_value(responder, pos, index, params)


def _argument(item: Any, pos: int, call: Call) -> Any:
  """What the callable of the item at 1-based pos receives"""
  if item.opts == CALL_OPTS:
    return call
  if pos <= call.nparams and is_ordinary_opts(item.opts):
    return call.params[pos - 1]
  return call.params[bound_index(item.opts) - 1]


# ============================================================================
# DISPATCHER
# ============================================================================

class Dispatcher:
  """Call side of a session: the `act` operation"""

  def __init__(self, registry: Registry, send_error: ErrorSink, debug: bool = False):
    self.registry = registry
    self.send_error = send_error
    self.debug = debug

  def act(self, name: str, return_type: TypeSpec, params: Sequence[Value] = ()) -> Value:
    """Run the mock for one call and return the produced value

    Args:
      name: function name the mock was registered under
      return_type: tag, or C declaration, the caller expects back
      params: actual arguments, their count selects the overload

    Returns:
      The last responder's value, or void() after a reported failure
    """
    return_type = resolve_type(return_type)
    call = Call(name, tuple(params))
    nodes = self.registry.regions.nodes

    function = self.registry.find_function(name, call.nparams)
    if function is None:
      self.send_error(ErrorKind.FUNCTION_NOT_FOUND, name, call.nparams)
      return void()

    try:
      mapping = self._find_matching(function, call)
      if mapping is None:
        self.send_error(ErrorKind.NO_MAPPING_MATCHED, name, call.nparams)
        return void()
      head = mapping.groups.first
      responders = [] if head is None else self.registry.responders_of(nodes[head])
      for offset, responder in enumerate(responders):
        check_responder(responder, mapping.nmatchers + offset + 1, call.params)
    except DispatchCheckError as e:
      self.send_error(e.kind, name, e.pos, e.actual_type, e.expected_type)
      return void()

    result = void()
    for offset, responder in enumerate(responders):
      result = responder.fn(_argument(responder, mapping.nmatchers + offset + 1, call),
                            responder.value)

    if result.tag != return_type:
      self.send_error(ErrorKind.UNEXPECTED_RETURN_TYPE, name, 0, result.tag, return_type)

    # A responder that re-entered this mapping may already have rotated it
    if head is not None and mapping.groups.first == head and nodes[head].next is not None:
      mapping.groups.append(nodes, mapping.groups.pop_first(nodes))
      if self.debug:
        logger.debug("%s/%d: responder group rotated", name, call.nparams)
    return result

  def _find_matching(self, function, call: Call) -> Optional[MappingEntry]:
    """First mapping whose matchers all accept the call"""
    for number, mapping in enumerate(self.registry.mappings_of(function), start=1):
      if self._matches(mapping, call):
        if self.debug:
          logger.debug("%s/%d: mapping %d matched", call.funcname, call.nparams, number)
        return mapping
      if self.debug:
        logger.debug("%s/%d: mapping %d rejected", call.funcname, call.nparams, number)
    return None

  def _matches(self, mapping: MappingEntry, call: Call) -> bool:
    for pos, matcher in enumerate(self.registry.matchers_of(mapping), start=1):
      check_matcher(matcher, pos, call.params)
      if not matcher.fn(_argument(matcher, pos, call), matcher.value):
        return False
    return True
