"""
Learning Model Module

The growth routines in the network depend on their owner only through the
LearningModel capability interface: retrieval, root lookup, and a logical
clock with its timing constants.

Memory is the reference owner: one DiscriminationNetwork with a root per
modality, exact edge-walking retrieval, and recognise-and-learn.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .constants import (
    DEFAULT_DISCRIMINATION_TIME,
    DEFAULT_FAMILIARISATION_TIME,
    DEFAULT_MAX_GROWTH_DEPTH,
)
from .network import DiscriminationNetwork
from .pattern import ListPattern, Modality


logger = logging.getLogger(__name__)


class LearningModel(ABC):
    """What the growth routines need from the model that owns the network."""

    @abstractmethod
    def recognise(self, pattern: ListPattern) -> int:
        """Handle of the deepest node reached by pattern; at least the root."""
        ...

    @abstractmethod
    def root_for(self, modality: Modality) -> int:
        ...

    @abstractmethod
    def advance_clock(self, amount: float) -> None:
        ...

    @abstractmethod
    def discrimination_time(self) -> float:
        ...

    @abstractmethod
    def familiarisation_time(self) -> float:
        ...


@dataclass(frozen=True)
class TimingConfig:
    """Clock charges for each kind of structural change."""
    discrimination_time: float = DEFAULT_DISCRIMINATION_TIME
    familiarisation_time: float = DEFAULT_FAMILIARISATION_TIME

    def __post_init__(self):
        """Validate configuration."""
        if self.discrimination_time < 0:
            raise ValueError(f"discrimination_time must be >= 0, got {self.discrimination_time}")
        if self.familiarisation_time < 0:
            raise ValueError(f"familiarisation_time must be >= 0, got {self.familiarisation_time}")


class Memory(LearningModel):
    """
    Reference model owning a discrimination network.

    A root is created for every Modality on construction. The clock only
    moves when the network charges it for a change.
    """

    def __init__(self,
                 timing: Optional[TimingConfig] = None,
                 max_growth_depth: int = DEFAULT_MAX_GROWTH_DEPTH,
                 network: Optional[DiscriminationNetwork] = None):
        self.timing = timing or TimingConfig()
        if network is None:
            network = DiscriminationNetwork(max_growth_depth=max_growth_depth)
            for modality in Modality:
                network.create_root(modality)
        self.network = network
        self._clock = 0.0

    # -------------------------------------------------------------------------
    # LearningModel
    # -------------------------------------------------------------------------

    def recognise(self, pattern: ListPattern) -> int:
        """
        Sort pattern through the network from its modality's root.

        At each node the links are tried in order; the first one whose test
        the remaining pattern passes is followed, and its test is removed
        from the remaining pattern.
        """
        current = self.root_for(pattern.modality)
        remaining = pattern
        children = self.network.node(current).children
        next_link = 0
        while next_link < len(children):
            link = children[next_link]
            if link.passes(remaining):
                current = link.child
                children = self.network.node(current).children
                next_link = 0
                remaining = remaining.remove(link.test)
            else:
                next_link += 1
        return current

    def root_for(self, modality: Modality) -> int:
        return self.network.root_for(modality)

    def advance_clock(self, amount: float) -> None:
        self._clock += amount

    def discrimination_time(self) -> float:
        return self.timing.discrimination_time

    def familiarisation_time(self) -> float:
        return self.timing.familiarisation_time

    @property
    def clock(self) -> float:
        return self._clock

    # -------------------------------------------------------------------------
    # Learning
    # -------------------------------------------------------------------------

    def learn(self, pattern: ListPattern) -> int:
        """
        Recognise pattern and learn from it.

        Discriminates when the recognised node is the root, its image does
        not match the pattern, or its image is already finished; otherwise
        familiarises the recognised node.

        Returns:
            Handle of the node produced by learning
        """
        handle = self.recognise(pattern)
        image = self.network.node(handle).image
        if (handle == self.root_for(pattern.modality) or
                not image.matches(pattern) or
                image.is_finished()):
            logger.debug("discriminating node %d on %s", handle, pattern)
            return self.network.discriminate(self, handle, pattern)
        logger.debug("familiarising node %d on %s", handle, pattern)
        return self.network.familiarise(self, handle, pattern)

    def recalls(self, pattern: ListPattern) -> ListPattern:
        """Image of the node that pattern is sorted to."""
        return self.network.node(self.recognise(pattern)).image.clone()

    def name(self, handle: int, name_handle: int) -> None:
        """Record that name_handle names handle."""
        self.network.set_named_by(handle, name_handle)

    def sequence(self, handle: int, next_handle: int) -> None:
        """Record that next_handle follows handle."""
        self.network.set_followed_by(handle, next_handle)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def statistics(self) -> Dict[str, Any]:
        """Size and depth summary for each modality."""
        per_modality = {}
        for modality, root in self.network.roots.items():
            per_modality[modality.value] = {
                "size": self.network.size(root),
                "average_depth": self.network.average_depth(root),
                "depth_histogram": self.network.depth_histogram(root).tolist(),
            }
        return {
            "total_nodes": len(self.network),
            "clock": self._clock,
            "modalities": per_modality,
        }
