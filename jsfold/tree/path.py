"""
Node Paths
==========

A NodePath records where a node sits: the owning parent, the field name of
the slot, and the list index when the slot is an ordered sequence. All
positional edits made by the rewrite passes go through a path so the tree
never ends up with a node attached to two parents.
"""

from typing import List, Optional

from jsfold.errors import StructuralError
from jsfold.tree.nodes import BlockStatement, EmptyStatement, Node


class NodePath:
    """Position of a node inside its parent."""

    __slots__ = ('node', 'parent', 'field', 'index', 'parent_path', 'removed')

    def __init__(
        self,
        node: Node,
        parent: Optional[Node] = None,
        field: Optional[str] = None,
        index: Optional[int] = None,
        parent_path: Optional['NodePath'] = None,
    ):
        self.node = node
        self.parent = parent
        self.field = field
        self.index = index
        self.parent_path = parent_path
        # Set once the node has left its list slot (removed, or spliced away
        # in favour of new nodes now starting at the same index).
        self.removed = False

    def __repr__(self):
        slot = f"{self.field}[{self.index}]" if self.index is not None else self.field
        return f"NodePath({self.node.type} at {getattr(self.parent, 'type', None)}.{slot})"

    @property
    def in_sequence(self) -> bool:
        """True when the node lives in an ordered list slot."""
        return self.index is not None

    @property
    def depth(self) -> int:
        depth = 0
        current = self.parent_path
        while current is not None:
            depth += 1
            current = current.parent_path
        return depth

    def ancestors(self):
        """Yield enclosing nodes, innermost first."""
        current = self.parent_path
        while current is not None:
            yield current.node
            current = current.parent_path

    def _container(self) -> List[Optional[Node]]:
        container = getattr(self.parent, self.field)
        if container[self.index] is not self.node:
            raise StructuralError(f"{self!r} is stale: slot no longer holds the node")
        return container

    def replace(self, new: Node) -> Node:
        """Substitute *new* for the node; *new* becomes the current node."""
        if self.parent is None:
            raise StructuralError("cannot replace the root node")
        if self.index is None:
            if getattr(self.parent, self.field) is not self.node:
                raise StructuralError(f"{self!r} is stale: slot no longer holds the node")
            setattr(self.parent, self.field, new)
        else:
            self._container()[self.index] = new
        self.node = new
        return new

    def replace_with_many(self, nodes: List[Node]) -> None:
        """Splice *nodes* in place of the node.

        In a list slot the nodes are inserted at the node's index. In a single
        field slot they are wrapped in a BlockStatement (a single node goes in
        directly, an empty list becomes an EmptyStatement).
        """
        if self.parent is None:
            raise StructuralError("cannot replace the root node")
        if self.index is None:
            if len(nodes) == 1:
                self.replace(nodes[0])
            elif not nodes:
                self.replace(EmptyStatement())
            else:
                self.replace(BlockStatement(list(nodes)))
            return
        container = self._container()
        container[self.index:self.index + 1] = nodes
        self.removed = True

    def remove(self) -> None:
        """Delete the node from its enclosing ordered sequence."""
        if self.index is None:
            raise StructuralError(
                f"cannot remove {self.node.type} from single-node slot "
                f"{getattr(self.parent, 'type', None)}.{self.field}"
            )
        del self._container()[self.index]
        self.removed = True
