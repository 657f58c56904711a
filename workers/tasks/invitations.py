"""Invitation maintenance tasks."""

import asyncio
import logging
from celery import Task

from workers.celery_app import celery_app
from database.engine import AsyncSessionLocal, close_db
from api.services.invitations import InvitationService
from api.services.email_invitations import EmailInvitationService

logger = logging.getLogger(__name__)


async def expire_invitations() -> dict:
    """
    Mark overdue PENDING invitations of both kinds as EXPIRED.

    Returns:
        Number of in-app and email invitations updated
    """
    try:
        async with AsyncSessionLocal() as session:
            invitations = await InvitationService(session).mark_expired_invitations()
            email_invitations = await EmailInvitationService(session).cleanup_expired_invitations()
    finally:
        # Pooled connections belong to this event loop only
        await close_db()

    return {"invitations": invitations, "email_invitations": email_invitations}


@celery_app.task(name="workers.tasks.invitations.cleanup_expired_invitations", bind=True)
def cleanup_expired_invitations(self: Task) -> dict:
    """Periodic sweep of expired invitations.

    Returns:
        Dictionary with the number of invitations expired per kind
    """
    try:
        result = asyncio.run(expire_invitations())
    except Exception as e:
        logger.error(f"Invitation cleanup failed: {e}")
        raise self.retry(exc=e, countdown=300, max_retries=3)

    logger.info(
        f"Expired {result['invitations']} invitations and "
        f"{result['email_invitations']} email invitations"
    )
    return result
