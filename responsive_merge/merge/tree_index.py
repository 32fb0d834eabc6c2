"""
Arena view of an element tree.

Every element is stored once in pre-order with its parent index, depth and
positional path key, so passes can look up structure by index instead of
re-walking the tree.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from responsive_merge.models import Element

ROOT_ANCHOR = "^"


@dataclass
class IndexedNode:
    """One element of the arena."""
    position: int
    element: Element
    parent: Optional[int]
    depth: int
    path_key: str
    children: List[int] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Identity when present, else the positional path key."""
        return self.element.identity or self.path_key


class TreeIndex:
    """Flattened, indexed view of one element tree."""

    def __init__(self, root: Element):
        self.root = root
        self.nodes: List[IndexedNode] = []
        self.by_identity: Dict[str, int] = {}
        self.by_path: Dict[str, int] = {}
        self._by_object: Dict[int, int] = {}
        self._build()

    def _build(self) -> None:
        # (element, parent position, depth, path key)
        stack = [(self.root, None, 0, ROOT_ANCHOR)]
        while stack:
            element, parent, depth, path_key = stack.pop()
            position = len(self.nodes)
            node = IndexedNode(position, element, parent, depth, path_key)
            self.nodes.append(node)
            self._by_object[id(element)] = position
            if parent is not None:
                self.nodes[parent].children.append(position)

            if element.identity and element.identity not in self.by_identity:
                self.by_identity[element.identity] = position
            self.by_path.setdefault(path_key, position)

            anchor = element.identity or path_key
            for index in reversed(range(len(element.children))):
                child = element.children[index]
                stack.append((child, position, depth + 1, f"{anchor}>[{index}]"))

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[IndexedNode]:
        return iter(self.nodes)

    def node(self, position: int) -> IndexedNode:
        return self.nodes[position]

    def element(self, position: int) -> Element:
        return self.nodes[position].element

    def position_of(self, element: Element) -> Optional[int]:
        return self._by_object.get(id(element))

    def parent_of(self, position: int) -> Optional[IndexedNode]:
        parent = self.nodes[position].parent
        return self.nodes[parent] if parent is not None else None

    def children_of(self, position: int) -> List[IndexedNode]:
        return [self.nodes[child] for child in self.nodes[position].children]

    def ancestors(self, position: int) -> Iterator[IndexedNode]:
        """Walk parent links up to the root (O(depth))."""
        parent = self.nodes[position].parent
        while parent is not None:
            yield self.nodes[parent]
            parent = self.nodes[parent].parent

    def find_identity(self, identity: str) -> Optional[IndexedNode]:
        """First element (pre-order) carrying the identity label."""
        position = self.by_identity.get(identity)
        return self.nodes[position] if position is not None else None

    def find_path(self, path_key: str) -> Optional[IndexedNode]:
        position = self.by_path.get(path_key)
        return self.nodes[position] if position is not None else None

    def identities(self) -> List[str]:
        """Identity labels in first-occurrence order."""
        return list(self.by_identity)
