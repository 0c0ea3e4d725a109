"""
Database Schemas and form input

Stored models map to MongoDB collections; the collection name is the
lowercase of the class name by convention:

- AdminUser -> "adminuser"
- ContactSubmission -> "contactsubmission"
- NewsletterSubscriber -> "newslettersubscriber"

Form models describe what the site's forms POST. They accept the frontend's
camelCase field names (``projectDescription``, ``gdprConsent``,
``_honeypot``) and expose snake_case attributes.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

OrganizationType = Literal[
    "nonprofit-education",
    "nonprofit-health",
    "nonprofit-justice",
    "nonprofit-environment",
    "nonprofit-arts",
    "nonprofit-other",
    "corporate-tech",
    "corporate-finance",
    "corporate-healthcare",
    "corporate-other",
    "government",
    "foundation",
    "individual",
    "other",
]
OrganizationSize = Literal["small", "medium", "large", "enterprise"]
ProjectTimeline = Literal["urgent", "soon", "flexible", "planning"]
Budget = Literal["under-10k", "10k-25k", "25k-50k", "50k-100k", "over-100k", "not-sure"]
SubscriberStatus = Literal["pending", "active", "unsubscribed"]
Frequency = Literal["weekly", "biweekly", "monthly"]


class FormModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# Auth/User
class AdminUser(BaseModel):
    email: str = Field(..., description="Editor email (unique)")
    password_hash: str = Field(..., description="BCrypt hash of password")
    role: str = Field("editor", description="Role: admin|editor")
    name: Optional[str] = Field(None, description="Display name")
    last_login: Optional[datetime] = Field(None)
    is_active: bool = Field(True)


# Contact
class ContactForm(FormModel):
    # Personal information
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    organization: str = Field(..., min_length=2, max_length=200)

    # Organization details
    organization_type: OrganizationType
    organization_size: Optional[OrganizationSize] = None

    # Project details
    project_type: List[str]
    project_description: str = Field(..., max_length=2000)
    goals: Optional[str] = Field(None, max_length=1000)

    timeline: ProjectTimeline
    budget: Optional[Budget] = None

    referral_source: Optional[str] = None
    additional_info: Optional[str] = Field(None, max_length=1000)

    marketing_consent: bool = False

    # Hidden field; people leave it empty
    honeypot: Optional[str] = Field(None, alias="_honeypot", max_length=0)

    @field_validator("project_type")
    @classmethod
    def check_project_type(cls, v: List[str]) -> List[str]:
        v = [p.strip() for p in v if p and p.strip()]
        if not v:
            raise ValueError("Select at least one service")
        return v

    @field_validator("project_description")
    @classmethod
    def check_description(cls, v: str) -> str:
        if len(v) < 50:
            raise ValueError("Please provide more detail about your project")
        return v


class ContactSubmission(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    organization: str
    organization_type: str
    organization_size: Optional[str] = None
    project_type: List[str]
    project_description: str
    goals: Optional[str] = None
    timeline: str
    budget: Optional[str] = None
    referral_source: Optional[str] = None
    additional_info: Optional[str] = None
    marketing_consent: bool = False
    submitted_at: datetime
    status: str = Field("new", description="new|contacted|qualified|closed")


# Newsletter
class NewsletterSubscribe(FormModel):
    email: EmailStr
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    interests: Optional[List[str]] = None
    source: Optional[str] = None
    gdpr_consent: bool
    honeypot: Optional[str] = Field(None, alias="_honeypot", max_length=0)

    @field_validator("gdpr_consent")
    @classmethod
    def check_consent(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must consent to receive emails")
        return v


class NewsletterUnsubscribe(FormModel):
    email: EmailStr
    token: Optional[str] = None


class NewsletterPreferences(FormModel):
    email: EmailStr
    interests: Optional[List[str]] = None
    frequency: Optional[Frequency] = None


class NewsletterSubscriber(BaseModel):
    email: str = Field(..., description="Subscriber email (unique)")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    source: Optional[str] = None
    frequency: Optional[str] = None
    status: SubscriberStatus = "pending"
    confirmation_token_id: Optional[str] = Field(None, description="jti of the outstanding confirmation token")
    subscribed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    unsubscribed_at: Optional[datetime] = None


# Handler results
class SubmissionResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    field_errors: Optional[Dict[str, List[str]]] = None
    already_subscribed: Optional[bool] = None
    requires_confirmation: Optional[bool] = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
