"""
chunknet - A Discrimination Network for Learning Chunks

Incrementally grows a tree of recognised chunks from streams of sequential,
modality-tagged patterns. Nodes hold a test path (contents) and a learned
payload (image); the network grows by discrimination (new branches) and
familiarisation (richer images).
"""

__version__ = "0.1.0"

from .pattern import ListPattern, Modality, DEFAULT_MODALITY
from .network import DiscriminationNetwork, Node, Link
from .model import LearningModel, Memory, TimingConfig
from .errors import PreconditionViolation, GrowthDepthExceeded, ParseError
from .persistence import (
    NodeRecord,
    write_node,
    write_network,
    read_node,
    read_network,
    dumps,
    loads,
)

__all__ = [
    "ListPattern",
    "Modality",
    "DEFAULT_MODALITY",
    "DiscriminationNetwork",
    "Node",
    "Link",
    "LearningModel",
    "Memory",
    "TimingConfig",
    "PreconditionViolation",
    "GrowthDepthExceeded",
    "ParseError",
    "NodeRecord",
    "write_node",
    "write_network",
    "read_node",
    "read_network",
    "dumps",
    "loads",
]
