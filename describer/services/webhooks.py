"""
Post-commit webhook trigger.

Services call ``queue_webhook`` while the transaction is open. Ids are kept
on the session and handed to Celery only once the outermost transaction
commits; a rollback drops them. A resource queued twice in one
transaction is delivered once.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

logger = logging.getLogger(__name__)

PENDING_WEBHOOKS_KEY = "describer.pending_webhooks"


def enqueue_webhook_delivery(resource_id: UUID) -> None:
    """
    Fire-and-forget: enqueue the Celery webhook task.
    Import is deferred to avoid circular imports at module load.
    """
    from describer.workers.webhook_tasks import notify_resource_webhook

    notify_resource_webhook.delay(str(resource_id))
    logger.info("Queued webhook delivery for resource %s", resource_id)


def queue_webhook(db: AsyncSession | Session, resource_id: UUID) -> None:
    session = db.sync_session if isinstance(db, AsyncSession) else db
    pending: list[UUID] = session.info.setdefault(PENDING_WEBHOOKS_KEY, [])
    if resource_id not in pending:
        pending.append(resource_id)


def pending_webhooks(db: AsyncSession | Session) -> list[UUID]:
    session = db.sync_session if isinstance(db, AsyncSession) else db
    return list(session.info.get(PENDING_WEBHOOKS_KEY, []))


@event.listens_for(Session, "after_commit")
def _deliver_pending_webhooks(session: Session) -> None:
    # also fired on savepoint release; only the root commit drains the queue
    if session.get_nested_transaction() is not None:
        return
    for resource_id in session.info.pop(PENDING_WEBHOOKS_KEY, []):
        enqueue_webhook_delivery(resource_id)


@event.listens_for(Session, "after_transaction_end")
def _discard_pending_webhooks(session: Session, transaction: SessionTransaction) -> None:
    # savepoints come and go during a request; only the outermost end counts
    if transaction.parent is None:
        session.info.pop(PENDING_WEBHOOKS_KEY, None)
