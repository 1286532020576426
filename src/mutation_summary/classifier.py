"""Mutation log classifier.

Folds an ordered batch of mutation records into a ChangeLedger.  The rules
make the result independent of how the batch interleaved its events:

- The *first* structural event for a node fixes its old parent: a removal
  records the parent it was removed from, an addition means "not in the tree
  before this batch".
- The *latest* structural event decides ``added``.
- Attribute and text old values are first-write-wins: the earliest value in
  the batch is the value at observation start.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mutation_summary.ledger import ChangeLedger
from mutation_summary.records import (
    AttributeChange,
    MutationRecord,
    StructuralChange,
    TextChange,
)

logger = logging.getLogger(__name__)


def _handle_structural(ledger: ChangeLedger, record: StructuralChange) -> None:
    ledger.child_list_changes = True

    for node in record.removed_nodes:
        change = ledger.structural_change_for(node)
        # Removed again after an earlier event: keep the original old parent.
        if change.added or change.old_parent is not None:
            change.added = False
        else:
            change.old_parent = record.target

    for node in record.added_nodes:
        ledger.structural_change_for(node).added = True


def _handle_attribute(ledger: ChangeLedger, record: AttributeChange) -> None:
    ledger.attributes_changes = True

    change = ledger.change_for(record.target)
    change.attributes = True
    change.attribute_old_values.setdefault(record.attribute_name, record.old_value)


def _handle_text(ledger: ChangeLedger, record: TextChange) -> None:
    ledger.character_data_changes = True

    change = ledger.change_for(record.target)
    if change.character_data:
        return
    change.character_data = True
    change.character_data_old_value = record.old_value


def classify_mutations(records: Iterable[MutationRecord]) -> ChangeLedger:
    """Build the ledger for one batch of records, in emission order.

    Args:
        records: StructuralChange, AttributeChange and TextChange records.

    Returns:
        A fresh ChangeLedger.

    Raises:
        TypeError: If a record is of an unknown type.
    """
    ledger = ChangeLedger()
    count = 0
    for record in records:
        if isinstance(record, StructuralChange):
            _handle_structural(ledger, record)
        elif isinstance(record, AttributeChange):
            _handle_attribute(ledger, record)
        elif isinstance(record, TextChange):
            _handle_text(ledger, record)
        else:
            raise TypeError(f"Unsupported mutation record: {type(record)!r}")
        count += 1

    logger.debug("Classified %d records touching %d nodes", count, len(ledger))
    return ledger
