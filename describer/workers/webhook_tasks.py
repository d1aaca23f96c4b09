"""
Webhook delivery background tasks.

POSTs a resource's current attributes to every webhook configured on the
resource's groups. Queued after a commit that changed a watched field.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from describer.core.config import settings
from describer.models.resource import Resource
from describer.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def build_webhook_payload(resource: Resource) -> dict[str, Any]:
    """JSON:API style document describing ``resource``."""
    return {
        "data": {
            "id": str(resource.id),
            "type": "resource",
            "attributes": {
                "identifier": resource.identifier,
                "canonical_id": resource.canonical_id,
                "title": resource.title,
                "resource_type": resource.resource_type.value,
                "source_uri": resource.source_uri,
                "host_uris": list(resource.host_uris or []),
                "priority_flag": resource.priority_flag,
                "ordinality": resource.ordinality,
                "created_at": resource.created_at.isoformat() if resource.created_at else None,
                "updated_at": resource.updated_at.isoformat() if resource.updated_at else None,
            },
        }
    }


@celery_app.task(
    name="describer.workers.webhook_tasks.notify_resource_webhook",
    bind=True,
    max_retries=3,
    default_retry_delay=10,
)
def notify_resource_webhook(self, resource_id: str) -> dict[str, Any]:
    """Deliver the resource payload; transport failures are retried."""
    try:
        # forked workers inherit pooled connections bound to the parent's loop
        from describer.core.database import AsyncSessionLocal, async_engine
        async_engine.sync_engine.dispose()

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            delivered = loop.run_until_complete(
                deliver_resource_webhooks(uuid.UUID(resource_id), AsyncSessionLocal)
            )
        finally:
            loop.close()
        return {"status": "delivered", "resource_id": resource_id, "webhooks": delivered}
    except httpx.HTTPError as exc:
        logger.error("notify_resource_webhook failed for %s: %s", resource_id, exc)
        raise self.retry(exc=exc)


async def deliver_resource_webhooks(
    resource_id: uuid.UUID,
    session_factory: async_sessionmaker[AsyncSession],
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """
    POST the payload to each distinct webhook URI on the resource's groups.

    Returns the number of webhooks called. A resource deleted since the
    task was queued is skipped.
    """
    async with session_factory() as session:
        result = await session.execute(
            select(Resource)
            .where(Resource.id == resource_id)
            .options(selectinload(Resource.resource_groups))
        )
        resource = result.scalar_one_or_none()
        if resource is None:
            logger.info("Resource %s no longer exists, skipping webhooks", resource_id)
            return 0

        payload = build_webhook_payload(resource)
        uris = list(dict.fromkeys(g.webhook_uri for g in resource.resource_groups if g.has_webhook))

    async with httpx.AsyncClient(
        timeout=settings.WEBHOOK_TIMEOUT_SECONDS, transport=transport
    ) as client:
        for uri in uris:
            response = await client.post(uri, json=payload)
            response.raise_for_status()
            logger.info("Delivered webhook for resource %s to %s", resource_id, uri)

    return len(uris)
