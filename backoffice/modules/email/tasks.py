"""
Celery tasks that deliver account emails.

Tasks take only plain values so they can be serialized to the broker; links
are built here from the token and FRONTEND_URL.
"""
import logging
from typing import Any, Dict, Optional

from backoffice.core.celery import celery_app
from backoffice.core.config import settings
from backoffice.modules.email.service import email_service

logger = logging.getLogger(__name__)

RETRY_BASE_SECONDS = 30


class EmailDeliveryError(Exception):
    pass


def _deliver(task, recipient: str, subject: str, template: str, context: Dict[str, Any]) -> dict:
    try:
        if not email_service.send_template([recipient], subject, template, context):
            raise EmailDeliveryError(f"{template} to {recipient} was not accepted")
    except EmailDeliveryError as exc:
        attempt = task.request.retries
        if attempt < task.max_retries:
            logger.warning(f"{exc}; retry {attempt + 1} of {task.max_retries}")
            raise task.retry(exc=exc, countdown=RETRY_BASE_SECONDS * (2 ** attempt))
        logger.error(f"Giving up on {template} to {recipient}")
        return {"status": "failed", "error": str(exc)}

    return {"status": "success", "email": recipient}


@celery_app.task(bind=True, max_retries=3)
def send_verification_email_task(
    self,
    user_email: str,
    user_name: str,
    verification_token: str,
    company_name: Optional[str] = None
):
    """Link that confirms an employee's email address."""
    return _deliver(self, user_email, "Verify your email address", "verification_email", {
        "user_name": user_name,
        "company_name": company_name,
        "verification_url": email_service.link("verify-email", verification_token),
        "expires_hours": settings.EMAIL_VERIFICATION_HOURS,
    })


@celery_app.task(bind=True, max_retries=3)
def send_password_reset_email_task(self, user_email: str, user_name: str, reset_token: str):
    return _deliver(self, user_email, "Reset your password", "password_reset_email", {
        "user_name": user_name,
        "reset_url": email_service.link("reset-password", reset_token),
        "expires_minutes": settings.PASSWORD_RESET_MINUTES,
    })
