"""
Trie Dictionary - Pattern table with stable ids and a flat serialized form.

Patterns are stored verbatim and get ids in lexicographic order of their
UTF-16 code units, so the id assignment depends only on the pattern set
and never on input order. A compiler that needs a value per pattern builds
the trie first, then orders its value table with ``id_of`` so the runtime
can look a pattern up and index straight into the values.

Serialized layout (little-endian):
    u32 node_count
    u32 word_count
    node_count x node, breadth-first, root is node 0:
        u16 code_unit        (0 for the root)
        u16 child_count
        u32 first_child      (index of the first child, 0 if none)
        i32 word_id          (-1 when no pattern ends here)

Children of a node are contiguous and sorted by code unit.

Example:
    trie = Trie(["ab", "a", "b"])
    trie.id_of("ab")            # 1
    data = trie.to_bytes()
    lookup(data, "ab")          # 1
"""

from __future__ import annotations

import struct
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from langdata_compiler.binary.writer import BinaryWriter

HEADER_SIZE = 8
NODE_SIZE = 12
NO_WORD = -1

WILDCARDS = ("*", "?")


def code_units(text: str) -> list[int]:
    """UTF-16 code units of ``text``."""
    data = text.encode("utf-16-le", "surrogatepass")
    return list(struct.unpack(f"<{len(data) // 2}H", data))


def wildcard_to_placeholder(text: str) -> str:
    """Rewrite ``*``/``?`` to positional back-references ``/1``, ``/2``, ..."""
    parts: list[str] = []
    order = 0
    for char in text:
        if char in WILDCARDS:
            order += 1
            parts.append(f"/{order}")
        else:
            parts.append(char)
    return "".join(parts)


@dataclass
class _Node:
    code_unit: int
    children: dict[int, "_Node"] = field(default_factory=dict)
    word_id: int = NO_WORD
    first_child: int = 0


class Trie:
    """Immutable trie over a finite pattern set."""

    def __init__(self, patterns: Iterable[str]):
        distinct = set()
        for pattern in patterns:
            if not pattern:
                raise ValueError("Empty pattern cannot be stored in a trie")
            distinct.add(pattern)

        self._patterns: list[str] = sorted(distinct, key=code_units)
        self._ids = {p: i for i, p in enumerate(self._patterns)}

        self._root = _Node(0)
        for word_id, pattern in enumerate(self._patterns):
            node = self._root
            for unit in code_units(pattern):
                node = node.children.setdefault(unit, _Node(unit))
            node.word_id = word_id

        self._nodes = self._layout()

    def _layout(self) -> list[_Node]:
        order = [self._root]
        queue = deque([self._root])
        while queue:
            node = queue.popleft()
            if node.children:
                node.first_child = len(order)
                for unit in sorted(node.children):
                    child = node.children[unit]
                    order.append(child)
                    queue.append(child)
        return order

    def id_of(self, pattern: str) -> int:
        """Id of ``pattern``; raises KeyError if absent."""
        return self._ids[pattern]

    def pattern_of(self, word_id: int) -> str:
        return self._patterns[word_id]

    @property
    def patterns(self) -> list[str]:
        """Patterns in id order."""
        return list(self._patterns)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def order_values(self, values: dict[str, object]) -> list:
        """Values re-ordered by trie id of their pattern."""
        return [values[p] for p in self._patterns]

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_u32(len(self._nodes))
        writer.write_u32(len(self._patterns))
        for node in self._nodes:
            writer.write_u16(node.code_unit)
            writer.write_u16(len(node.children), "TrieNode.child_count")
            writer.write_u32(node.first_child)
            writer.write_i32(node.word_id)
        return writer.getvalue()

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._ids

    def __len__(self) -> int:
        return len(self._patterns)


def lookup(data: bytes, text: str, offset: int = 0) -> int:
    """Find ``text`` in serialized trie bytes the way the runtime walks them.

    Returns:
        The word id, or -1 if ``text`` is not a stored pattern.
    """
    node_count, _ = struct.unpack_from("<II", data, offset)
    base = offset + HEADER_SIZE

    def read(index: int) -> tuple[int, int, int, int]:
        return struct.unpack_from("<HHIi", data, base + index * NODE_SIZE)

    index = 0
    for unit in code_units(text):
        _, child_count, first_child, _ = read(index)
        lo, hi = first_child, first_child + child_count - 1
        found = -1
        while child_count and lo <= hi:
            mid = (lo + hi) // 2
            mid_unit = read(mid)[0]
            if mid_unit == unit:
                found = mid
                break
            if mid_unit < unit:
                lo = mid + 1
            else:
                hi = mid - 1
        if found < 0 or found >= node_count:
            return NO_WORD
        index = found
    return read(index)[3]
