"""
Newsletter subscription flows

Double opt-in: subscribing stores a pending record and mails a confirmation
link; following the link activates the subscription. Subscriber records are
keyed by lowercased email and written with upserts against a unique index.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.database import Database

import email_templates
from config import Settings
from email_client import EmailClient
from marketing import MarketingClient
from schemas import (
    NewsletterPreferences,
    NewsletterSubscribe,
    NewsletterUnsubscribe,
    SubmissionResult,
)
from tokens import (
    generate_confirmation_token,
    generate_unsubscribe_token,
    verify_confirmation_token,
    verify_unsubscribe_token,
)
from validation import honeypot_tripped, validate

logger = logging.getLogger(__name__)

COLLECTION = "newslettersubscriber"

INVALID_SUBMISSION = "Invalid submission"
CHECK_INFO = "Please check your information and try again."


def get_subscriber(db: Database, email: str) -> Optional[Dict[str, Any]]:
    return db[COLLECTION].find_one({"email": email})


def save_pending_subscriber(db: Database, form: NewsletterSubscribe, email: str, token_id: str) -> None:
    now = datetime.now(timezone.utc)
    db[COLLECTION].update_one(
        {"email": email},
        {
            "$set": {
                "first_name": form.first_name,
                "last_name": form.last_name,
                "interests": form.interests or [],
                "source": form.source,
                "status": "pending",
                "confirmation_token_id": token_id,
                "subscribed_at": now,
                "updated_at": now,
            },
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
    )


def update_subscriber(db: Database, email: str, updates: Dict[str, Any]) -> bool:
    updates = dict(updates, updated_at=datetime.now(timezone.utc))
    result = db[COLLECTION].update_one({"email": email}, {"$set": updates})
    return result.matched_count > 0


def subscribe_to_newsletter(
    data: Any,
    settings: Settings,
    email_client: EmailClient,
    marketing: MarketingClient,
    db: Database,
) -> SubmissionResult:
    try:
        form, errors = validate(NewsletterSubscribe, data)
        if honeypot_tripped(data):
            logger.info("newsletter signup rejected: honeypot filled")
            return SubmissionResult(success=False, error=INVALID_SUBMISSION)
        if errors:
            return SubmissionResult(success=False, error=CHECK_INFO, field_errors=errors)

        email = form.email.lower()
        existing = get_subscriber(db, email)
        if existing and existing.get("status") == "active":
            return SubmissionResult(
                success=True,
                message="You're already subscribed! Check your inbox for our latest updates.",
                already_subscribed=True,
            )

        issued = generate_confirmation_token(settings.confirmation_secret, email)
        marketing.subscribe(email, form.first_name, form.interests, form.source)

        rendered = email_templates.newsletter_confirmation(settings.site_url, issued.token)
        email_client.send(settings.email_from, email, rendered.subject, rendered.html)

        save_pending_subscriber(db, form, email, issued.token_id)

        return SubmissionResult(
            success=True,
            message="Almost there! Please check your email to confirm your subscription.",
            requires_confirmation=True,
        )
    except Exception:
        logger.exception("Newsletter subscription error")
        return SubmissionResult(success=False, error="Something went wrong. Please try again.")


def confirm_newsletter_subscription(
    token: str,
    settings: Settings,
    email_client: EmailClient,
    marketing: MarketingClient,
    db: Database,
) -> SubmissionResult:
    invalid = SubmissionResult(success=False, error="Invalid or expired confirmation link.")
    try:
        claims = verify_confirmation_token(settings.confirmation_secret, token)
        if claims is None:
            return invalid

        now = datetime.now(timezone.utc)
        # Matching on the token id makes the link single use
        result = db[COLLECTION].update_one(
            {"email": claims.email, "confirmation_token_id": claims.token_id},
            {
                "$set": {"status": "active", "confirmed_at": now, "updated_at": now},
                "$unset": {"confirmation_token_id": ""},
            },
        )
        if result.matched_count == 0:
            return invalid

        marketing.set_status(claims.email, "active")

        unsubscribe_token = generate_unsubscribe_token(settings.confirmation_secret, claims.email)
        rendered = email_templates.newsletter_welcome(settings.site_url, claims.email, unsubscribe_token)
        email_client.send(settings.email_from, claims.email, rendered.subject, rendered.html)

        return SubmissionResult(success=True, message="Welcome! Your subscription is confirmed.")
    except Exception:
        logger.exception("Newsletter confirmation error")
        return SubmissionResult(success=False, error="Failed to confirm subscription. Please try again.")


def unsubscribe_from_newsletter(
    data: Any,
    settings: Settings,
    email_client: EmailClient,
    marketing: MarketingClient,
    db: Database,
) -> SubmissionResult:
    try:
        form, errors = validate(NewsletterUnsubscribe, data)
        if errors:
            return SubmissionResult(success=False, error=CHECK_INFO, field_errors=errors)

        email = form.email.lower()
        if form.token and not verify_unsubscribe_token(settings.confirmation_secret, email, form.token):
            return SubmissionResult(success=False, error="Invalid unsubscribe link.")

        now = datetime.now(timezone.utc)
        update_subscriber(db, email, {"status": "unsubscribed", "unsubscribed_at": now})
        marketing.unsubscribe(email)

        rendered = email_templates.unsubscribe_confirmation(settings.site_url)
        email_client.send(settings.email_from, email, rendered.subject, rendered.html)

        return SubmissionResult(success=True, message="You've been unsubscribed. We're sorry to see you go!")
    except Exception:
        logger.exception("Newsletter unsubscribe error")
        return SubmissionResult(success=False, error="Failed to unsubscribe. Please try again.")


def update_newsletter_preferences(
    data: Any,
    marketing: MarketingClient,
    db: Database,
) -> SubmissionResult:
    try:
        form, errors = validate(NewsletterPreferences, data)
        if errors:
            return SubmissionResult(success=False, error=CHECK_INFO, field_errors=errors)

        email = form.email.lower()
        updates = form.model_dump(exclude={"email"}, exclude_none=True)
        if updates:
            update_subscriber(db, email, updates)
            marketing.update_preferences(email, form.interests, form.frequency)

        return SubmissionResult(success=True, message="Your preferences have been updated.")
    except Exception:
        logger.exception("Newsletter preferences error")
        return SubmissionResult(success=False, error="Failed to update preferences.")
