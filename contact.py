"""
Contact form submission

validate -> honeypot -> rate limit -> confirmation + internal emails (sent
together) -> store the submission. Any failure after validation is logged
and reported to the visitor with one generic message.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

import email_templates
from config import Settings
from database import create_document
from email_client import EmailClient
from ratelimit import RateLimiter
from schemas import ContactForm, ContactSubmission, SubmissionResult
from validation import honeypot_tripped, validate

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you for reaching out! We'll be in touch within 24 hours."
INVALID_SUBMISSION = "Invalid submission"
CHECK_FORM = "Please check your form and try again."
TOO_MANY_REQUESTS = "Too many requests. Please try again later."
GENERIC_FAILURE = "Something went wrong. Please try again or email us directly."


def send_client_confirmation_email(email_client: EmailClient, settings: Settings, form: ContactForm) -> None:
    rendered = email_templates.contact_confirmation(form, settings.site_url)
    email_client.send(settings.email_from, form.email, rendered.subject, rendered.html)


def send_internal_notification_email(email_client: EmailClient, settings: Settings, form: ContactForm) -> None:
    rendered = email_templates.internal_notification(form)
    email_client.send(settings.notifications_from, settings.internal_notification_email, rendered.subject, rendered.html)


def save_submission(db: Database, form: ContactForm) -> str:
    submission = ContactSubmission(
        **form.model_dump(exclude={"honeypot"}),
        submitted_at=datetime.now(timezone.utc),
        status="new",
    )
    return create_document(db, "contactsubmission", submission)


async def submit_contact_form(
    data: Any,
    settings: Settings,
    email_client: EmailClient,
    db: Database,
    rate_limiter: RateLimiter,
) -> SubmissionResult:
    try:
        form, errors = validate(ContactForm, data)

        # Checked before field errors are reported so a bot learns nothing
        if honeypot_tripped(data):
            logger.info("contact form rejected: honeypot filled")
            return SubmissionResult(success=False, error=INVALID_SUBMISSION)

        if errors:
            return SubmissionResult(success=False, error=CHECK_FORM, field_errors=errors)

        allowed = await run_in_threadpool(rate_limiter.hit, f"contact:{form.email.lower()}")
        if not allowed:
            return SubmissionResult(success=False, error=TOO_MANY_REQUESTS)

        await asyncio.gather(
            run_in_threadpool(send_client_confirmation_email, email_client, settings, form),
            run_in_threadpool(send_internal_notification_email, email_client, settings, form),
        )
        submission_id = await run_in_threadpool(save_submission, db, form)
        logger.info("stored contact submission %s", submission_id)

        return SubmissionResult(success=True, message=SUCCESS_MESSAGE)
    except Exception:
        logger.exception("Contact form error")
        return SubmissionResult(success=False, error=GENERIC_FAILURE)
