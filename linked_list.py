"""
Singly-linked lists whose nodes live in the node arena
Append at the tail and pop at the head, both O(1); None marks the end
"""

from typing import Any, Iterator, Optional
from dataclasses import dataclass

from arena import Arena


@dataclass
class ListNode:
  """A node pointing at `nitems` consecutive items starting at `item`"""
  item: Any = None
  next: Optional[int] = None
  nitems: int = 1


class NodeList:
  """Head and tail handles into a node arena"""

  def __init__(self):
    self.first: Optional[int] = None
    self.last: Optional[int] = None

  def is_empty(self) -> bool:
    return self.first is None

  def append(self, nodes: Arena, handle: int) -> None:
    nodes[handle].next = None
    if self.first is None:
      self.first = self.last = handle
    else:
      nodes[self.last].next = handle
      self.last = handle

  def pop_first(self, nodes: Arena) -> int:
    """Unlink the head node and return its handle"""
    handle = self.first
    if handle is None:
      raise IndexError("pop from an empty list")
    node = nodes[handle]
    self.first = node.next
    if self.first is None:
      self.last = None
    else:
      node.next = None
    return handle

  def handles(self, nodes: Arena) -> Iterator[int]:
    handle = self.first
    while handle is not None:
      following = nodes[handle].next
      yield handle
      handle = following

  def items(self, nodes: Arena) -> Iterator[ListNode]:
    for handle in self.handles(nodes):
      yield nodes[handle]

  def __repr__(self) -> str:
    return f"NodeList(first={self.first}, last={self.last})"
