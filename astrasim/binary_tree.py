"""Binary-tree logical topology."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from astrasim.logical_topology import BasicLogicalTopology, BasicTopology

_logger = logging.getLogger("astrasim.topology.binary_tree")


class TreeType(Enum):
    """Whether the root gets the largest or the smallest id."""

    ROOT_MAX = 0
    ROOT_MIN = 1


class TreeNodeType(Enum):
    """Position of a node in the tree."""

    LEAF = 0
    ROOT = 1
    INTERMEDIATE = 2


@dataclass(eq=False)
class TreeNode:
    """A node of a binary tree, linked to its parent and children."""

    id: int
    parent: TreeNode | None = field(default=None, repr=False)
    left_child: TreeNode | None = field(default=None, repr=False)
    right_child: TreeNode | None = field(default=None, repr=False)


class BinaryTree(BasicLogicalTopology):
    """A binary tree whose node ids are assigned in order, ``stride`` apart."""

    def __init__(
        self,
        id: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        super().__init__(BasicTopology.BINARY_TREE)
        self.total_tree_nodes = total_tree_nodes
        self.start = start
        self.tree_type = tree_type
        self.stride = stride
        self.node_list: dict[int, TreeNode] = {}

        depth = 1
        remaining = total_tree_nodes
        while remaining > 1:
            depth += 1
            remaining //= 2

        self.tree = TreeNode(-1)
        subtree = self._grow(depth - 1, self.tree)
        if tree_type is TreeType.ROOT_MIN:
            self.tree.right_child = subtree
        else:
            self.tree.left_child = subtree
        self._assign_ids(self.tree, start)

    @staticmethod
    def _grow(depth: int, parent: TreeNode) -> TreeNode:
        node = TreeNode(-1, parent)
        if depth > 1:
            node.left_child = BinaryTree._grow(depth - 1, node)
            node.right_child = BinaryTree._grow(depth - 1, node)
        return node

    def _assign_ids(self, node: TreeNode, next_id: int) -> int:
        """Number the subtree in order starting at ``next_id``; return the next free id."""
        if node.left_child is not None:
            next_id = self._assign_ids(node.left_child, next_id)
        node.id = next_id
        self.node_list[next_id] = node
        next_id += self.stride
        if node.right_child is not None:
            next_id = self._assign_ids(node.right_child, next_id)
        return next_id

    def _node(self, id: int) -> TreeNode:
        try:
            return self.node_list[id]
        except KeyError:
            raise KeyError(f"node {id} is not part of this tree") from None

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.total_tree_nodes

    def get_parent_id(self, id: int) -> int:
        """Id of the parent of ``id``, or -1 for the root."""
        parent = self._node(id).parent
        return parent.id if parent is not None else -1

    def get_left_child_id(self, id: int) -> int:
        """Id of the left child of ``id``, or -1 if there is none."""
        child = self._node(id).left_child
        return child.id if child is not None else -1

    def get_right_child_id(self, id: int) -> int:
        """Id of the right child of ``id``, or -1 if there is none."""
        child = self._node(id).right_child
        return child.id if child is not None else -1

    def get_node_type(self, id: int) -> TreeNodeType:
        """Whether ``id`` is the root, a leaf or an intermediate node."""
        node = self._node(id)
        if node.parent is None:
            return TreeNodeType.ROOT
        if node.left_child is None and node.right_child is None:
            return TreeNodeType.LEAF
        return TreeNodeType.INTERMEDIATE

    def describe(self, node: TreeNode) -> list[str]:
        """Describe ``node`` and its subtree, pre-order, logging each line at debug level."""
        lines = [f"I am node: {node.id}"]
        if node.left_child is not None:
            lines.append(f"and my left child is {node.left_child.id}")
        if node.right_child is not None:
            lines.append(f"and my right child is {node.right_child.id}")
        if node.parent is not None:
            lines.append(f"and my parent is {node.parent.id}")
        kind = self.get_node_type(node.id)
        lines.append(
            {
                TreeNodeType.ROOT: "and I am Root",
                TreeNodeType.INTERMEDIATE: "and I am Intermediate",
                TreeNodeType.LEAF: "and I am Leaf",
            }[kind]
        )
        for line in lines:
            _logger.debug(line)
        if node.left_child is not None:
            lines.extend(self.describe(node.left_child))
        if node.right_child is not None:
            lines.extend(self.describe(node.right_child))
        return lines