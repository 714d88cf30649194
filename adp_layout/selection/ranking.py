from typing import List, Optional

from adp_layout.datamodels.key_value import Ranking

NOT_RANKED = -1


def find_rank(
    rankings: List[Ranking],
    key_class: Optional[str],
    key_class_id: Optional[str],
    kvp_id: Optional[str],
) -> int:
    """Position of ``kvp_id`` in the ranking of its key class.

    The key class is matched on both id and name. Returns 0 for the best
    candidate, and ``NOT_RANKED`` when the class or the KVP is not ranked.
    """
    for ranking in rankings:
        if (
            ranking.key_class_id is not None
            and ranking.key_class_id == key_class_id
            and ranking.key_class_name is not None
            and ranking.key_class_name == key_class
        ):
            for index, entry in enumerate(ranking.ranked_list):
                if entry.kvp_id is not None and entry.kvp_id == kvp_id:
                    return index
            return NOT_RANKED
    return NOT_RANKED
