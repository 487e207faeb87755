"""
Discrimination Network Module

The network is an arena of Node records indexed by integer handles. Nodes
refer to each other (children, followed-by, named-by) by handle only, so
the associative references may cross branches or form cycles without any
ownership between records.

Growth:
- discriminate:    add a new branch (test link + child) below a node
- familiarise:     extend a node's image
- learn_primitive: add a one-item child below a modality root

Every growth routine consults the model for retrieval and charges the
model's clock for each structural change it makes.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional
import logging

import numpy as np

from .constants import DEFAULT_MAX_GROWTH_DEPTH
from .errors import GrowthDepthExceeded, PreconditionViolation
from .pattern import ListPattern, Modality

if TYPE_CHECKING:
    from .model import LearningModel


logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 1: Records
# =============================================================================

@dataclass
class Link:
    """Test pattern leading from a parent to the child handle."""
    test: ListPattern
    child: int

    def passes(self, pattern: ListPattern) -> bool:
        """True if the given pattern satisfies this link's test."""
        return self.test.matches(pattern)


@dataclass
class Node:
    """
    A vertex in the discrimination network.

    Attributes:
        reference: Handle of the node within its network
        contents: Test path leading to this node, never finished
        image: Current best learned content
        children: Test links, most recently added first
        followed_by: Optional handle of the node that follows this one
        named_by: Optional handle of the node that names this one
    """
    reference: int
    contents: ListPattern
    image: ListPattern
    children: List[Link] = field(default_factory=list)
    followed_by: Optional[int] = None
    named_by: Optional[int] = None

    def __post_init__(self):
        self.contents = self.contents.clone()
        self.contents.set_not_finished()

    @property
    def modality(self) -> Modality:
        return self.contents.modality

    def is_leaf(self) -> bool:
        return not self.children

    def add_test_link(self, test: ListPattern, child: int) -> None:
        self.children.insert(0, Link(test, child))


# =============================================================================
# SECTION 2: Network Arena
# =============================================================================

class DiscriminationNetwork:
    """
    Arena of nodes with network-local handle allocation.

    Handles are assigned in creation order starting at 0 and are never
    reused; nodes are never removed.
    """

    def __init__(self, max_growth_depth: int = DEFAULT_MAX_GROWTH_DEPTH):
        if max_growth_depth < 1:
            raise ValueError(f"max_growth_depth must be >= 1, got {max_growth_depth}")
        self.max_growth_depth = max_growth_depth
        self._nodes: List[Node] = []
        self._roots: Dict[Modality, int] = {}
        self._growth_depth = 0

    # -------------------------------------------------------------------------
    # Arena access
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, handle: int) -> bool:
        return isinstance(handle, int) and 0 <= handle < len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def node(self, handle: int) -> Node:
        """Node record for a handle; KeyError if the handle is unknown."""
        if handle not in self:
            raise KeyError(f"Unknown node handle: {handle}")
        return self._nodes[handle]

    @property
    def roots(self) -> Dict[Modality, int]:
        return dict(self._roots)

    def create_root(self, modality: Modality) -> int:
        """Create the root node of a modality; each modality has one root."""
        if modality in self._roots:
            raise ValueError(f"Root for {modality.title} already exists")
        empty = ListPattern(modality)
        handle = self._new_node(empty, empty.clone())
        self._roots[modality] = handle
        return handle

    def root_for(self, modality: Modality) -> int:
        if modality not in self._roots:
            raise KeyError(f"No root for modality {modality.title}")
        return self._roots[modality]

    def is_root(self, handle: int) -> bool:
        return handle in self._roots.values()

    def _new_node(self, contents: ListPattern, image: ListPattern) -> int:
        handle = len(self._nodes)
        self._nodes.append(Node(handle, contents, image))
        return handle

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node], **kwargs) -> 'DiscriminationNetwork':
        """
        Build a network around existing node records.

        Records must arrive in handle order starting at 0. A node no link
        points to becomes the root of its modality.

        Raises:
            ValueError: out-of-order handles, or two roots for one modality
        """
        network = cls(**kwargs)
        for node in nodes:
            if node.reference != len(network._nodes):
                raise ValueError(
                    f"Expected handle {len(network._nodes)}, got {node.reference}")
            network._nodes.append(node)

        linked = {link.child for node in network._nodes for link in node.children}
        for node in network._nodes:
            if node.reference in linked:
                continue
            if node.modality in network._roots:
                raise ValueError(f"Root for {node.modality.title} already exists")
            network._roots[node.modality] = node.reference
        return network

    # -------------------------------------------------------------------------
    # Associative references
    # -------------------------------------------------------------------------

    def set_followed_by(self, handle: int, target: Optional[int]) -> None:
        if target is not None:
            self.node(target)
        self.node(handle).followed_by = target

    def set_named_by(self, handle: int, target: Optional[int]) -> None:
        if target is not None:
            self.node(target)
        self.node(handle).named_by = target

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def size(self, handle: int) -> int:
        """Number of nodes in the subtree rooted at handle, self included."""
        count = 0
        stack = [handle]
        while stack:
            count += 1
            stack.extend(link.child for link in self.node(stack.pop()).children)
        return count

    def leaf_depths(self, handle: int) -> List[int]:
        """Depth of every leaf below handle (direct children are depth 1)."""
        depths: List[int] = []
        stack = [(link.child, 1) for link in reversed(self.node(handle).children)]
        while stack:
            current, depth = stack.pop()
            node = self.node(current)
            if node.is_leaf():
                depths.append(depth)
            else:
                stack.extend((link.child, depth + 1) for link in reversed(node.children))
        return depths

    def preorder(self, handle: int) -> Iterator[int]:
        """Handles of the subtree rooted at handle, parents before children."""
        stack = [handle]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(link.child for link in reversed(self.node(current).children))

    def average_depth(self, handle: int) -> float:
        """Mean leaf depth below handle; 0.0 for a node with no children."""
        depths = self.leaf_depths(handle)
        if not depths:
            return 0.0
        return float(np.mean(depths))

    def depth_histogram(self, handle: int) -> np.ndarray:
        """Leaf counts indexed by depth below handle."""
        depths = self.leaf_depths(handle)
        if not depths:
            return np.zeros(1, dtype=np.int64)
        return np.bincount(np.asarray(depths, dtype=np.int64))

    # -------------------------------------------------------------------------
    # Growth
    # -------------------------------------------------------------------------

    @contextmanager
    def _growth_frame(self):
        depth = self._growth_depth + 1
        if depth > self.max_growth_depth:
            raise GrowthDepthExceeded(depth, self.max_growth_depth)
        self._growth_depth = depth
        try:
            yield
        finally:
            self._growth_depth -= 1

    def learn_primitive(self, model: 'LearningModel', handle: int,
                        pattern: ListPattern) -> int:
        """
        Add a child holding exactly the given primitive.

        The pattern must be finished and hold a single item. The child's
        contents are the open item, its image the finished pattern.

        Returns:
            Handle of the new child
        """
        if not (pattern.is_finished() and pattern.size() == 1):
            raise PreconditionViolation(
                f"learn_primitive needs a finished single-item pattern, got {pattern}")

        with self._growth_frame():
            contents = pattern.clone()
            contents.set_not_finished()
            child = self._new_node(contents, pattern.clone())
            self.node(handle).add_test_link(contents, child)
            model.advance_clock(model.discrimination_time())
            logger.debug("learned primitive %s as node %d under %d", pattern, child, handle)
            return child

    def _add_test(self, model: 'LearningModel', handle: int,
                  test: ListPattern) -> int:
        node = self.node(handle)
        child = self._new_node(node.contents.append(test), ListPattern(node.modality))
        node.add_test_link(test, child)
        model.advance_clock(model.discrimination_time())
        logger.debug("added test %s from node %d to new node %d", test, handle, child)
        return child

    def _extend_image(self, model: 'LearningModel', handle: int,
                      new_information: ListPattern) -> int:
        node = self.node(handle)
        node.image = node.image.append(new_information)
        model.advance_clock(model.familiarisation_time())
        logger.debug("extended image of node %d to %s", handle, node.image)
        return handle

    def discriminate(self, model: 'LearningModel', handle: int,
                     pattern: ListPattern) -> int:
        """
        Grow a new branch below handle to separate it from pattern.

        Returns:
            Handle of the node that was created or changed (handle itself
            when there was nothing to learn)
        """
        with self._growth_frame():
            new_information = pattern.remove(self.node(handle).contents)

            # 1 & 2: nothing left but possibly the end marker
            if new_information.is_empty():
                if new_information.is_finished():
                    return self._add_test(model, handle, new_information)
                return handle

            root = model.root_for(new_information.modality)
            retrieved = model.recognise(new_information)
            if retrieved == root:
                # 3: first item is an unknown primitive
                return self.learn_primitive(model, root, new_information.first_item())

            chunk_image = self.node(retrieved).image
            if chunk_image.is_empty():
                # 4: chunk exists but has no content yet
                return self.familiarise(model, retrieved, new_information)
            if chunk_image.matches(new_information):
                # 5: the chunk's image becomes the test
                return self._add_test(model, handle, chunk_image.clone())

            # 6: mismatch; the first item is known since retrieval got past the root
            first_item = new_information.first_item()
            first_item.set_not_finished()
            return self._add_test(model, handle, first_item)

    def familiarise(self, model: 'LearningModel', handle: int,
                    pattern: ListPattern) -> int:
        """
        Extend the image of handle with information from pattern.

        Returns:
            Handle of the node that was changed or created
        """
        with self._growth_frame():
            new_information = pattern.remove(self.node(handle).image)

            # 1 & 2: only the end marker, or nothing at all
            if new_information.is_empty():
                if new_information.is_finished():
                    return self._extend_image(model, handle, new_information)
                return handle

            root = model.root_for(new_information.modality)
            retrieved = model.recognise(new_information)
            if retrieved == root:
                # 3: first item is an unknown primitive
                return self.learn_primitive(model, root, new_information.first_item())

            chunk_image = self.node(retrieved).image
            if chunk_image.is_empty():
                # 4: first item is known, as new information sorted to a chunk
                first_item = new_information.first_item()
                first_item.set_not_finished()
                return self._extend_image(model, handle, first_item)
            if chunk_image.matches(new_information):
                # 5: extend with the whole chunk, kept open
                extension = chunk_image.clone()
                extension.set_not_finished()
                return self._extend_image(model, handle, extension)

            # 6: mismatch; use the chunk's first item only
            first_item = chunk_image.first_item()
            first_item.set_not_finished()
            return self._extend_image(model, handle, first_item)
