"""
Tests for registration
Function lookup, mapping reuse, type validation and arena exhaustion
"""

import pytest
from session import Session
from error_handling import ErrorKind, StandinError
from matchers import Matcher, xparam
from responders import Responder, rcall
from stdlib import eq, ne, any_i, return_, compare_eq, respond_value
from values import Value, i, l, INT_T, void


def errors_of(session):
  """Record failures instead of raising them"""
  errors = []
  session.set_error_hook(errors.append)
  return errors


class TestRegistration:
  """Test how given builds functions, mappings and groups"""

  @pytest.fixture
  def session(self):
    """Provide a fresh session for each test"""
    return Session(bytearray(5000))

  def test_first_registration(self, session):
    session.given("f", [eq(i(1))], [return_(i(10))])
    regions = session.regions
    assert len(regions.functions) == 1
    assert len(regions.mappings) == 1
    assert len(regions.matchers) == 1
    assert len(regions.responders) == 1
    assert len(regions.nodes) == 2

    function = session.registry.find_function("f", 1)
    assert function.name == "f"
    assert function.nparams == 1
    mapping, = session.registry.mappings_of(function)
    assert session.registry.matchers_of(mapping) == [eq(i(1))]
    assert session.registry.groups_of(mapping) == [[return_(i(10))]]

  def test_equal_matchers_reuse_mapping(self, session):
    session.given("f", [eq(i(1))], [return_(i(10))])
    session.given("f", [eq(i(1))], [return_(i(20))])
    function = session.registry.find_function("f", 1)
    mapping, = session.registry.mappings_of(function)
    assert session.registry.groups_of(mapping) == [[return_(i(10))], [return_(i(20))]]
    assert len(session.regions.matchers) == 1

  def test_different_matchers_add_mapping(self, session):
    session.given("f", [eq(i(1))], [return_(i(10))])
    session.given("f", [eq(i(2))], [return_(i(20))])
    session.given("f", [ne(i(1))], [return_(i(30))])
    session.given("f", [eq(l(1))], [return_(i(40))])
    function = session.registry.find_function("f", 1)
    assert len(session.registry.mappings_of(function)) == 4

  def test_every_matcher_must_be_equal(self, session):
    """Sharing the first matcher is not enough to reuse a mapping"""
    session.given("f", [eq(i(1)), eq(i(2))], [return_(i(10))])
    session.given("f", [eq(i(1)), eq(i(3))], [return_(i(20))])
    function = session.registry.find_function("f", 2)
    assert len(session.registry.mappings_of(function)) == 2

  def test_extra_matchers_take_part_in_reuse(self, session):
    session.given_extra("f", [any_i()], [xparam(1, compare_eq, i(1))], [return_(i(1))])
    session.given("f", [any_i()], [return_(i(2))])
    session.given_extra("f", [any_i()], [xparam(1, compare_eq, i(1))], [return_(i(3))])
    function = session.registry.find_function("f", 1)
    first, second = session.registry.mappings_of(function)
    assert first.nxmatchers == 1
    assert second.nxmatchers == 0
    assert len(session.registry.groups_of(first)) == 2

  def test_arity_is_part_of_identity(self, session):
    session.given("f", [], [return_(i(0))])
    session.given("f", [any_i()], [return_(i(1))])
    assert len(session.regions.functions) == 2
    assert session.registry.find_function("f", 0).nparams == 0
    assert session.registry.find_function("f", 1).nparams == 1
    assert session.registry.find_function("f", 2) is None
    assert session.registry.find_function("g", 0) is None

  def test_empty_responder_group(self, session):
    session.given("f", [], [])
    function = session.registry.find_function("f", 0)
    mapping, = session.registry.mappings_of(function)
    assert session.registry.groups_of(mapping) == [[]]


class TestTypeValidation:
  """Test rejection of invalid type tags at registration"""

  @pytest.fixture
  def session(self):
    return Session(bytearray(5000))

  def test_invalid_matcher_type(self, session):
    errors = errors_of(session)
    bad = Matcher(Value(3, 0), compare_eq)
    session.given("f", [eq(i(1)), bad], [return_(i(0))])
    error, = errors
    assert error.kind == ErrorKind.INVALID_TYPE
    assert error.pos == 2
    assert error.actual_type == error.expected_type == 3

  def test_invalid_extra_matcher_type(self, session):
    errors = errors_of(session)
    bad = Matcher(Value(255, 0), compare_eq, 1)
    session.given_extra("f", [any_i()], [bad], [return_(i(0))])
    assert errors[0].pos == 2
    assert session.errmsg() == "invalid parameter type: f (2): 63"

  def test_invalid_responder_type(self, session):
    """Positions continue after ordinary and extra matchers"""
    errors = errors_of(session)
    bad = rcall(respond_value, Value(13 * 4, 0))
    session.given_extra("f", [any_i()], [xparam(1, compare_eq, i(1))],
                        [return_(i(0)), bad])
    assert errors[0].kind == ErrorKind.INVALID_TYPE
    assert errors[0].pos == 4

  def test_default_hook_raises(self, session):
    with pytest.raises(StandinError):
      session.given("f", [Matcher(Value(3, 0), compare_eq)], [return_(i(0))])

  def test_partial_registration_keeps_mapping(self, session):
    """The mapping is created before the types are validated"""
    errors_of(session)
    session.given("f", [eq(i(1))], [Responder(Value(3, 0), respond_value)])
    function = session.registry.find_function("f", 1)
    mapping, = session.registry.mappings_of(function)
    assert session.registry.groups_of(mapping) == []

  def test_atomic_registration_keeps_nothing(self):
    session = Session(bytearray(5000), legacy_partial_registration=False)
    errors = errors_of(session)
    session.given("f", [eq(i(1))], [Responder(Value(3, 0), respond_value)])
    assert errors[0].kind == ErrorKind.INVALID_TYPE
    assert session.registry.find_function("f", 1) is None
    assert all(len(arena) == 0 for arena in session.regions)


class TestExhaustion:
  """Test failures when a region is full"""

  def test_no_room_for_a_function(self):
    """A block too small for one function leaves the registry empty"""
    session = Session(bytearray(100))
    errors = errors_of(session)
    session.given("f", [eq(i(5))], [return_(i(10))])
    error, = errors
    assert error.kind == ErrorKind.FUNCTION_TABLE_FULL
    assert session.errmsg() == "insufficient memory for functions: f"
    assert len(session.regions.functions) == 0

  def test_function_table_full(self):
    session = Session(bytearray(480))
    errors = errors_of(session)
    for name in ("a", "b", "c", "d"):
      session.given(name, [], [return_(i(0))])
    assert [e.kind for e in errors] == [ErrorKind.NODE_TABLE_FULL, ErrorKind.FUNCTION_TABLE_FULL]

  def test_matcher_table_full_partial(self):
    """Legacy registration keeps the function it created"""
    session = Session(bytearray(160))
    errors = errors_of(session)
    session.given("f", [eq(i(1)), eq(i(2))], [return_(i(0))])
    assert errors[0].kind == ErrorKind.MATCHER_TABLE_FULL
    assert len(session.regions.functions) == 1
    assert session.registry.find_function("f", 2) is not None
    assert len(session.regions.mappings) == 0

  def test_matcher_table_full_atomic(self):
    session = Session(bytearray(160), legacy_partial_registration=False)
    errors = errors_of(session)
    session.given("f", [eq(i(1)), eq(i(2))], [return_(i(0))])
    assert errors[0].kind == ErrorKind.MATCHER_TABLE_FULL
    assert len(session.regions.functions) == 0

  def test_node_table_full_partial(self):
    """The mapping survives without groups and then yields void"""
    session = Session(bytearray(160))
    errors = errors_of(session)
    session.given("f", [], [return_(i(1))])
    assert errors[0].kind == ErrorKind.NODE_TABLE_FULL
    assert len(session.regions.mappings) == 1

    result = session.act("f", INT_T, [])
    assert result == void()
    assert errors[1].kind == ErrorKind.UNEXPECTED_RETURN_TYPE

  def test_node_table_full_atomic(self):
    session = Session(bytearray(160), legacy_partial_registration=False)
    errors = errors_of(session)
    session.given("f", [], [return_(i(1))])
    assert errors[0].kind == ErrorKind.NODE_TABLE_FULL
    assert all(len(arena) == 0 for arena in session.regions)

  def test_responder_table_full(self):
    session = Session(bytearray(480))
    errors = errors_of(session)
    session.given("f", [], [return_(i(1)), return_(i(2)), return_(i(3)), return_(i(4))])
    assert errors[0].kind == ErrorKind.RESPONDER_TABLE_FULL
    assert len(session.regions.responders) == 0

  def test_mapping_table_full(self):
    """Mappings left without groups use one node each"""
    session = Session(bytearray(800))
    errors = errors_of(session)
    bad = Responder(Value(3, 0), respond_value)
    for value in range(6):
      session.given("f", [eq(i(value))], [bad])
    kinds = [e.kind for e in errors]
    assert kinds == [ErrorKind.INVALID_TYPE] * 5 + [ErrorKind.MAPPING_TABLE_FULL]
    function = session.registry.find_function("f", 1)
    assert len(session.registry.mappings_of(function)) == 5
