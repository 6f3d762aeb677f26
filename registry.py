"""
Standin function and mapping registry
Functions are identified by (name, parameter count) and own an ordered list
of mappings; each mapping owns a run of matchers and a FIFO list of
responder groups. Every structure lives in the session arenas.
"""

from typing import Callable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
import logging

from arena import Regions
from linked_list import ListNode, NodeList
from matchers import Matcher, matchers_equal
from responders import Responder
from values import is_valid_type
from error_handling import ErrorKind


logger = logging.getLogger(__name__)

# send_error(kind, funcname, pos, actual_type, expected_type)
ErrorSink = Callable[..., None]


@dataclass
class FunctionEntry:
  name: str
  nparams: int
  mappings: NodeList = field(default_factory=NodeList)


@dataclass
class MappingEntry:
  first_matcher: int
  nparams: int
  nxmatchers: int
  groups: NodeList = field(default_factory=NodeList)

  @property
  def nmatchers(self) -> int:
    return self.nparams + self.nxmatchers


class Registry:
  """Registration side of a session: the `given` operation and lookups"""

  def __init__(self, regions: Regions, send_error: ErrorSink, debug: bool = False,
               legacy_partial_registration: bool = True):
    self.regions = regions
    self.send_error = send_error
    self.debug = debug
    self.legacy_partial_registration = legacy_partial_registration

  # ==========================================================================
  # LOOKUPS
  # ==========================================================================

  def find_function(self, name: str, nparams: int) -> Optional[FunctionEntry]:
    functions = self.regions.functions
    for handle in range(len(functions)):
      entry = functions[handle]
      if entry.nparams == nparams and entry.name == name:
        return entry
    return None

  def mappings_of(self, function: FunctionEntry) -> List[MappingEntry]:
    nodes, mappings = self.regions.nodes, self.regions.mappings
    return [mappings[node.item] for node in function.mappings.items(nodes)]

  def matchers_of(self, mapping: MappingEntry) -> List[Matcher]:
    matchers = self.regions.matchers
    start = mapping.first_matcher
    return [matchers[h] for h in range(start, start + mapping.nmatchers)]

  def responders_of(self, group: ListNode) -> List[Responder]:
    responders = self.regions.responders
    return [responders[h] for h in range(group.item, group.item + group.nitems)]

  def groups_of(self, mapping: MappingEntry) -> List[List[Responder]]:
    return [self.responders_of(node) for node in mapping.groups.items(self.regions.nodes)]

  def _find_mapping(self, function: FunctionEntry,
                    matchers: Sequence[Matcher], nxmatchers: int) -> Optional[MappingEntry]:
    """Mapping whose whole matcher array equals the given one"""
    for mapping in self.mappings_of(function):
      if mapping.nxmatchers != nxmatchers:
        continue
      existing = self.matchers_of(mapping)
      if all(matchers_equal(m1, m2) for m1, m2 in zip(existing, matchers)):
        return mapping
    return None

  # ==========================================================================
  # REGISTRATION
  # ==========================================================================

  def given(self, name: str, matchers: Sequence[Matcher],
            extra_matchers: Sequence[Matcher] = (),
            responders: Sequence[Responder] = ()) -> None:
    """Add one responder group for calls accepted by the matchers

    Reuses the mapping registered with an equal matcher array, otherwise
    appends a new mapping. Failures go through send_error and leave the
    registry as described by legacy_partial_registration.
    """
    matchers = list(matchers)
    extra_matchers = list(extra_matchers)
    responders = list(responders)
    if self.debug:
      logger.debug("given %s/%d: %d extra matchers, %d responders",
                   name, len(matchers), len(extra_matchers), len(responders))
    if self.legacy_partial_registration:
      self._given_partial(name, matchers, extra_matchers, responders)
    else:
      self._given_atomic(name, matchers, extra_matchers, responders)
    if self.debug:
      self._log_usage()

  def _given_partial(self, name, matchers, extra_matchers, responders):
    regions = self.regions
    all_matchers = matchers + extra_matchers

    function = self.find_function(name, len(matchers))
    if function is None:
      handle = regions.functions.allocate()
      if handle is None:
        self.send_error(ErrorKind.FUNCTION_TABLE_FULL, name)
        return
      function = FunctionEntry(name, len(matchers))
      regions.functions[handle] = function

    mapping = self._find_mapping(function, all_matchers, len(extra_matchers))
    if mapping is None:
      kind = self._check_new_mapping(len(all_matchers), nodes_needed=1)
      if kind is not None:
        self.send_error(kind, name)
        return
      mapping = self._add_mapping(function, matchers, extra_matchers)

    invalid = self._first_invalid_type(all_matchers, responders)
    if invalid is not None:
      pos, tag = invalid
      self.send_error(ErrorKind.INVALID_TYPE, name, pos, tag, tag)
      return

    if regions.responders.available() < len(responders):
      self.send_error(ErrorKind.RESPONDER_TABLE_FULL, name)
      return
    if regions.nodes.available() < 1:
      self.send_error(ErrorKind.NODE_TABLE_FULL, name)
      return
    self._add_group(mapping, responders)

  def _given_atomic(self, name, matchers, extra_matchers, responders):
    regions = self.regions
    all_matchers = matchers + extra_matchers

    function = self.find_function(name, len(matchers))
    mapping = None
    if function is None:
      if regions.functions.available() < 1:
        self.send_error(ErrorKind.FUNCTION_TABLE_FULL, name)
        return
    else:
      mapping = self._find_mapping(function, all_matchers, len(extra_matchers))

    if mapping is None:
      kind = self._check_new_mapping(len(all_matchers), nodes_needed=2)
    elif regions.nodes.available() < 1:
      kind = ErrorKind.NODE_TABLE_FULL
    else:
      kind = None
    if kind is None and regions.responders.available() < len(responders):
      kind = ErrorKind.RESPONDER_TABLE_FULL
    if kind is not None:
      self.send_error(kind, name)
      return

    invalid = self._first_invalid_type(all_matchers, responders)
    if invalid is not None:
      pos, tag = invalid
      self.send_error(ErrorKind.INVALID_TYPE, name, pos, tag, tag)
      return

    if function is None:
      handle = regions.functions.allocate()
      function = FunctionEntry(name, len(matchers))
      regions.functions[handle] = function
    if mapping is None:
      mapping = self._add_mapping(function, matchers, extra_matchers)
    self._add_group(mapping, responders)

  def _check_new_mapping(self, nmatchers: int, nodes_needed: int) -> Optional[ErrorKind]:
    regions = self.regions
    if regions.mappings.available() < 1:
      return ErrorKind.MAPPING_TABLE_FULL
    if regions.matchers.available() < nmatchers:
      return ErrorKind.MATCHER_TABLE_FULL
    if regions.nodes.available() < nodes_needed:
      return ErrorKind.NODE_TABLE_FULL
    return None

  @staticmethod
  def _first_invalid_type(matchers: Sequence[Matcher],
                          responders: Sequence[Responder]) -> Optional[Tuple[int, int]]:
    """1-based position and tag of the first invalid type, ordinary then extra then responders"""
    for pos, item in enumerate(list(matchers) + list(responders), start=1):
      if not is_valid_type(item.value.tag):
        return pos, item.value.tag
    return None

  def _add_mapping(self, function: FunctionEntry, matchers: List[Matcher],
                   extra_matchers: List[Matcher]) -> MappingEntry:
    regions = self.regions
    all_matchers = matchers + extra_matchers
    first = regions.matchers.allocate(len(all_matchers))
    for offset, matcher in enumerate(all_matchers):
      regions.matchers[first + offset] = matcher
    mapping = MappingEntry(first, len(matchers), len(extra_matchers))
    mapping_handle = regions.mappings.allocate()
    regions.mappings[mapping_handle] = mapping
    node_handle = regions.nodes.allocate()
    regions.nodes[node_handle] = ListNode(mapping_handle)
    function.mappings.append(regions.nodes, node_handle)
    if self.debug:
      logger.debug("new mapping #%d for %s/%d", mapping_handle, function.name, function.nparams)
    return mapping

  def _add_group(self, mapping: MappingEntry, responders: List[Responder]) -> None:
    regions = self.regions
    first = regions.responders.allocate(len(responders))
    for offset, responder in enumerate(responders):
      regions.responders[first + offset] = responder
    node_handle = regions.nodes.allocate()
    regions.nodes[node_handle] = ListNode(first, nitems=len(responders))
    mapping.groups.append(regions.nodes, node_handle)

  def _log_usage(self) -> None:
    logger.debug("arena usage: %s", ", ".join(
      f"{arena.name} {len(arena)}/{arena.capacity}" for arena in self.regions))
