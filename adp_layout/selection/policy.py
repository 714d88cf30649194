"""Retention rules deciding which extracted key-value pairs are kept."""

import logging
from typing import List

from adp_layout.datamodels.key_value import KeyValuePair, Ranking
from adp_layout.datamodels.types import FieldsAction
from adp_layout.selection.ranking import find_rank

_log = logging.getLogger(__name__)


def should_keep(
    kvp: KeyValuePair, rankings: List[Ranking], action: FieldsAction
) -> bool:
    """Decide whether one KVP survives ``action``.

    The two single-best rules disagree on KVPs missing from the ranking:
    KEEP_SINGLE_BEST keeps them, KEEP_SINGLE_BEST_WITH_KEY_CLASS drops them.
    """
    has_key_class = kvp.key_class is not None and len(kvp.key_class) > 0

    if action == FieldsAction.KEEP_ALL:
        return True

    if action == FieldsAction.KEEP_ALL_WITH_KEY_CLASS:
        if not has_key_class:
            _log.debug(f"keepallwithkeyclass: no key class, dropping key {kvp.key}")
            return False
        return True

    if action == FieldsAction.KEEP_SINGLE_BEST_WITH_KEY_CLASS:
        if not has_key_class:
            _log.debug(
                f"keepsinglebestwithkeyclass: no key class, dropping key {kvp.key}"
            )
            return False
        rank = find_rank(rankings, kvp.key_class, kvp.key_class_id, kvp.kvp_id)
        if rank == 0:
            _log.debug(
                "keepsinglebestwithkeyclass: KVP was first in ranking, keeping it"
            )
            return True
        elif rank < 0:
            _log.debug("keepsinglebestwithkeyclass: KVP not in ranking, dropping it")
            return False
        _log.debug(
            f"keepsinglebestwithkeyclass: KVP was number {rank} in ranking, dropping it"
        )
        return False

    if action == FieldsAction.KEEP_SINGLE_BEST:
        if not has_key_class:
            _log.debug("keepsinglebest: no key class, keeping it")
            return True
        rank = find_rank(rankings, kvp.key_class, kvp.key_class_id, kvp.kvp_id)
        if rank == 0:
            _log.debug("keepsinglebest: KVP was first in ranking, keeping it")
            return True
        elif rank < 0:
            _log.debug("keepsinglebest: KVP not in ranking, keeping it")
            return True
        _log.debug(f"keepsinglebest: KVP was number {rank} in ranking, dropping it")
        return False

    return True


def select_key_value_pairs(
    kvps: List[KeyValuePair], rankings: List[Ranking], action: FieldsAction
) -> List[KeyValuePair]:
    """Return the KVPs kept by ``action``, in their original order."""
    selected = [kvp for kvp in kvps if should_keep(kvp, rankings, action)]
    _log.info(f"Selection {action.value}: kept {len(selected)} of {len(kvps)} KVPs")
    return selected
