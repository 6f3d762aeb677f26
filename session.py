"""
Standin sessions
A session owns the memory block, the registry carved from it, the last
error and the error hook. Module-level functions drive a process-wide
default session for stand-ins that cannot be handed a session object.
"""

from typing import Any, Optional, Sequence
import logging

from arena import carve_regions
from registry import Registry
from dispatch import Dispatcher
from matchers import Matcher
from responders import Responder
from values import Value
from type_parsing import TypeSpec
from error_handling import (
  ErrorKind, ErrorHook, LastError, format_error_message, raise_on_error
)


logger = logging.getLogger(__name__)

DEFAULT_MEMORY_SIZE = 64 * 1024


class Session:
  """One isolated mocking state

  Args:
    memory: bytes-like block the arenas are carved from, allocated when omitted
    size: number of bytes of memory to use, all of it by default
    debug: trace registrations and dispatch through the logger
    legacy_partial_registration: keep what earlier registration steps
      allocated when a later step fails
  """

  def __init__(self, memory: Any = None, size: Optional[int] = None, debug: bool = False,
               legacy_partial_registration: bool = True):
    self.debug = debug
    self.legacy_partial_registration = legacy_partial_registration
    self.init(memory, size)

  def init(self, memory: Any = None, size: Optional[int] = None) -> None:
    """Carve fresh regions, forgetting every registration, and reset error state"""
    if memory is None:
      memory = bytearray(DEFAULT_MEMORY_SIZE if size is None else size)
    self.memory = memory
    self.regions = carve_regions(memory, size)
    self.registry = Registry(self.regions, self._send_error, self.debug,
                             self.legacy_partial_registration)
    self.dispatcher = Dispatcher(self.registry, self._send_error, self.debug)
    self.last_error: Optional[LastError] = None
    self.error_hook: ErrorHook = raise_on_error
    if self.debug:
      logger.debug("session initialised: %s", ", ".join(
        f"{arena.name}={arena.capacity}" for arena in self.regions))

  def set_error_hook(self, hook: Optional[ErrorHook]) -> None:
    """Replace the function called on failures; None restores the default"""
    self.error_hook = raise_on_error if hook is None else hook

  def errmsg(self) -> str:
    return format_error_message(self.last_error)

  def _send_error(self, kind: ErrorKind, funcname: str, pos: int = 0,
                  actual_type: int = 0, expected_type: int = 0) -> None:
    self.last_error = LastError(ErrorKind(kind), funcname, pos, actual_type, expected_type)
    logger.info("%s", self.errmsg())
    self.error_hook(self.last_error)

  def given(self, name: str, matchers: Sequence[Matcher],
            responders: Sequence[Responder]) -> None:
    self.registry.given(name, matchers, (), responders)

  def given_extra(self, name: str, matchers: Sequence[Matcher],
                  extra_matchers: Sequence[Matcher],
                  responders: Sequence[Responder]) -> None:
    self.registry.given(name, matchers, extra_matchers, responders)

  def act(self, name: str, return_type: TypeSpec, params: Sequence[Value] = ()) -> Value:
    return self.dispatcher.act(name, return_type, params)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_session(size: int = DEFAULT_MEMORY_SIZE, debug: bool = False, **flags) -> Session:
  """Create a session over a fresh block of size bytes"""
  return Session(bytearray(size), debug=debug, **flags)


def create_debug_session(size: int = DEFAULT_MEMORY_SIZE, **flags) -> Session:
  """Create a session that logs its work at DEBUG level"""
  return create_session(size, debug=True, **flags)


# ============================================================================
# DEFAULT SESSION
# ============================================================================

_default_session = Session()


def default_session() -> Session:
  return _default_session


def init(memory: Any = None, size: Optional[int] = None) -> None:
  _default_session.init(memory, size)


def given(name: str, matchers: Sequence[Matcher], responders: Sequence[Responder]) -> None:
  _default_session.given(name, matchers, responders)


def given_extra(name: str, matchers: Sequence[Matcher], extra_matchers: Sequence[Matcher],
                responders: Sequence[Responder]) -> None:
  _default_session.given_extra(name, matchers, extra_matchers, responders)


def act(name: str, return_type: TypeSpec, params: Sequence[Value] = ()) -> Value:
  return _default_session.act(name, return_type, params)


def set_error_hook(hook: Optional[ErrorHook]) -> None:
  _default_session.set_error_hook(hook)


def errmsg() -> str:
  return _default_session.errmsg()


def last_error() -> Optional[LastError]:
  return _default_session.last_error
