"""
Fixed-capacity regions backing every structure of a standin session
Bump allocation only: slots are never freed individually
"""

from typing import Any, List, NamedTuple, Optional, Union

# Bytes reserved per entry in each region
FUNCTION_STRIDE = 32
MAPPING_STRIDE = 32
MATCHER_STRIDE = 32
RESPONDER_STRIDE = 32
NODE_STRIDE = 24

REGION_COUNT = 5


class Arena:
  """One region of the session block holding `capacity` slots"""

  def __init__(self, name: str, stride: int, capacity: int, offset: int):
    self.name = name
    self.stride = stride
    self.capacity = capacity
    self.offset = offset
    self.slots: List[Any] = [None] * capacity
    self.count = 0

  def available(self) -> int:
    return self.capacity - self.count

  def allocate(self, n: int = 1) -> Optional[int]:
    """Reserve n consecutive slots, returning the first handle or None when full"""
    if n < 0:
      raise ValueError(f"cannot allocate {n} slots")
    if self.available() < n:
      return None
    handle = self.count
    self.count += n
    return handle

  def reset(self) -> None:
    """Forget every allocation; slot contents stay until overwritten"""
    self.count = 0

  def _check(self, handle: int) -> None:
    if not 0 <= handle < self.count:
      raise IndexError(f"{self.name} handle {handle} is not allocated")

  def __getitem__(self, handle: int) -> Any:
    self._check(handle)
    return self.slots[handle]

  def __setitem__(self, handle: int, item: Any) -> None:
    self._check(handle)
    self.slots[handle] = item

  def __len__(self) -> int:
    return self.count

  def __repr__(self) -> str:
    return f"Arena({self.name}, {self.count}/{self.capacity} at +{self.offset})"


class Regions(NamedTuple):
  functions: Arena
  mappings: Arena
  matchers: Arena
  responders: Arena
  nodes: Arena


def carve_regions(block: Union[bytes, bytearray, memoryview], size: Optional[int] = None) -> Regions:
  """Partition the first `size` bytes of block into the five regions

  Every region gets size / (5 * stride) entries; regions follow each other in
  the order functions, mappings, matchers, responders, list nodes.
  """
  view = memoryview(block)
  if size is None:
    size = view.nbytes
  if size < 0 or size > view.nbytes:
    raise ValueError(f"size {size} does not fit a block of {view.nbytes} bytes")

  layout = (
    ("functions", FUNCTION_STRIDE),
    ("mappings", MAPPING_STRIDE),
    ("matchers", MATCHER_STRIDE),
    ("responders", RESPONDER_STRIDE),
    ("nodes", NODE_STRIDE),
  )
  arenas = []
  offset = 0
  for name, stride in layout:
    capacity = size // (REGION_COUNT * stride)
    nbytes = capacity * stride
    arenas.append(Arena(name, stride, capacity, offset))
    offset += nbytes
  return Regions(*arenas)
