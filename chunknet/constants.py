# chunknet/constants.py
"""
Chunk Network Constants

Defaults used throughout the discrimination network:

TIMING (logical clock charges)
- DEFAULT_DISCRIMINATION_TIME: cost of adding a test link + child node
- DEFAULT_FAMILIARISATION_TIME: cost of extending a node's image

GROWTH
- DEFAULT_MAX_GROWTH_DEPTH: ceiling on nested growth calls

RENDERING
- FINISHED_MARKER: rendering of the closure marker in pattern strings
"""


# =============================================================================
# TIMING: Logical Clock Charges
# =============================================================================

DEFAULT_DISCRIMINATION_TIME = 10000
DEFAULT_FAMILIARISATION_TIME = 2000


# =============================================================================
# GROWTH: Nested Growth Ceiling
# =============================================================================

# Counts nested discriminate/familiarise/learn_primitive calls.
DEFAULT_MAX_GROWTH_DEPTH = 64


# =============================================================================
# RENDERING
# =============================================================================

FINISHED_MARKER = "$"
