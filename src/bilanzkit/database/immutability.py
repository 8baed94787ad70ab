"""ORM-level immutability guards (GoBD).

A ``before_flush`` listener rejects changes to finalized records:

- posted journal entries and their line items (update, delete, new lines)
- posted balance sheets (update, delete)
- closed fiscal years (any change, including reopening)

The check looks at the value a record had when it was loaded, so the
transition that finalizes a record (setting ``posted_at`` or ``closed``)
is allowed; every change after that is not.
"""

import logging

from sqlalchemy import event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.attributes import get_history

from bilanzkit.database.models import BalanceSheet, FiscalYear, JournalEntry, LineItem
from bilanzkit.domain.errors import ImmutableRecordError

logger = logging.getLogger(__name__)


def _original(obj, attribute: str):
    """Return the value an attribute had when the object was loaded."""
    history = get_history(obj, attribute)
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    # pending object: nothing loaded yet
    return None


def _entry_was_posted(entry) -> bool:
    return entry is not None and _original(entry, "posted_at") is not None


def _reject(kind: str, ident, operation: str) -> None:
    logger.warning("Blocked %s of finalized %s %s", operation, kind, ident)
    raise ImmutableRecordError(f"{kind} {ident} is finalized and cannot be {operation}d (GoBD)")


def check_immutability(session, flush_context, instances) -> None:
    """Raise ImmutableRecordError for pending changes to finalized records."""
    for obj in list(session.dirty):
        if not session.is_modified(obj, include_collections=False):
            continue
        if isinstance(obj, JournalEntry) and _entry_was_posted(obj):
            _reject("Journal entry", obj.id, "update")
        elif isinstance(obj, LineItem) and _entry_was_posted(obj.journal_entry):
            _reject("Line item", obj.id, "update")
        elif isinstance(obj, BalanceSheet) and _original(obj, "posted_at") is not None:
            _reject("Balance sheet", obj.id, "update")
        elif isinstance(obj, FiscalYear) and _original(obj, "closed"):
            _reject("Fiscal year", obj.year, "update")

    for obj in list(session.deleted):
        if isinstance(obj, JournalEntry) and _entry_was_posted(obj):
            _reject("Journal entry", obj.id, "delete")
        elif isinstance(obj, LineItem) and _entry_was_posted(obj.journal_entry):
            _reject("Line item", obj.id, "delete")
        elif isinstance(obj, BalanceSheet) and _original(obj, "posted_at") is not None:
            _reject("Balance sheet", obj.id, "delete")
        elif isinstance(obj, FiscalYear) and _original(obj, "closed"):
            _reject("Fiscal year", obj.year, "delete")

    for obj in list(session.new):
        if isinstance(obj, LineItem) and _entry_was_posted(obj.journal_entry):
            _reject("Journal entry", obj.journal_entry.id, "update")


def register_immutability_guards(session_factory: sessionmaker) -> None:
    """Attach the guards to every session created by ``session_factory``."""
    if not event.contains(session_factory, "before_flush", check_immutability):
        event.listen(session_factory, "before_flush", check_immutability)
