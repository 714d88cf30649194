import logging
from typing import List, Optional

from adp_layout.datamodels.layout import LayoutNode

_log = logging.getLogger(__name__)

# Scan start value; boxes at or beyond it are never picked.
FAR_CORNER = 100000


def _closest_to_top_left(nodes: List[LayoutNode]) -> Optional[int]:
    """Index of the node picked by one greedy scan, or None.

    A node replaces the current pick only when its top *and* its left are
    both strictly smaller, so this is not a lexicographic (top, left) minimum.
    """
    closest_left = FAR_CORNER
    closest_top = FAR_CORNER
    picked = None
    for index, node in enumerate(nodes):
        if node.location.t < closest_top and node.location.l < closest_left:
            closest_left = node.location.l
            closest_top = node.location.t
            picked = index
    return picked


def sort_blocks_and_tables(
    blocks: List[LayoutNode], tables: List[LayoutNode]
) -> List[LayoutNode]:
    """Merge blocks and tables into an approximate reading order."""
    remaining = list(blocks) + list(tables)
    ordered: List[LayoutNode] = []
    while remaining:
        picked = _closest_to_top_left(remaining)
        if picked is None:
            break
        ordered.append(remaining.pop(picked))
    if remaining:
        _log.warning(
            f"{len(remaining)} nodes lie beyond the sortable page area and were left out"
        )
    return ordered
