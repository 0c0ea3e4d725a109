import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database

import blog
import case_studies
import catalog
from auth import (
    create_access_token,
    find_admin,
    get_current_admin,
    get_db,
    get_password_hash,
    get_settings,
    oauth2_scheme,
    require_preview,
    verify_password,
)
from config import Settings
from contact import submit_contact_form
from content import (
    BlogPost,
    CaseStudy,
    CaseStudyListItem,
    PaginatedBlogPosts,
    ServiceListItem,
    TeamMemberListItem,
)
from content_client import ContentClient
from database import connect, create_document, ensure_indexes, get_documents
from email_client import EmailClient
from marketing import MarketingClient
from newsletter import (
    confirm_newsletter_subscription,
    subscribe_to_newsletter,
    unsubscribe_from_newsletter,
    update_newsletter_preferences,
)
from ratelimit import RateLimiter
from schemas import AdminUser, SubmissionResult

logger = logging.getLogger(__name__)

CASE_STUDY_CACHE = "public, s-maxage=300, stale-while-revalidate=600"
BLOG_CACHE = "public, s-maxage=60, stale-while-revalidate=300"
CATALOG_CACHE = "public, s-maxage=300, stale-while-revalidate=600"
NO_CACHE = "no-cache"

router = APIRouter()


# ---------------------- Dependencies ----------------------
def get_content_client(request: Request) -> ContentClient:
    return request.app.state.content_client


def get_email_client(request: Request) -> EmailClient:
    return request.app.state.email_client


def get_marketing_client(request: Request) -> MarketingClient:
    return request.app.state.marketing


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def _fetch_failed(what: str) -> JSONResponse:
    return JSONResponse({"error": f"Failed to fetch {what}"}, status_code=500)


def _form_response(result: SubmissionResult) -> JSONResponse:
    return JSONResponse(result.to_response(), status_code=200 if result.success else 400)


def _internal_error() -> JSONResponse:
    return JSONResponse({"success": False, "error": "Internal server error"}, status_code=500)


# ---------------------- Auth ----------------------
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None


@router.post("/auth/register", response_model=Token)
def register_admin(
    payload: AdminCreate,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # The first editor bootstraps the site; after that only editors add editors
    if db["adminuser"].count_documents({}) > 0 and find_admin(db, settings, token) is None:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    email = payload.email.lower()
    if db["adminuser"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Email already registered")
    hashed = get_password_hash(payload.password)
    create_document(db, "adminuser", AdminUser(email=email, password_hash=hashed, name=payload.name or email.split("@")[0]))
    return Token(access_token=create_access_token(settings, {"sub": email}))


@router.post("/auth/token", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    email = form_data.username.lower()
    user = db["adminuser"].find_one({"email": email})
    if not user or not user.get("is_active", True) or not verify_password(form_data.password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    db["adminuser"].update_one({"email": email}, {"$set": {"last_login": datetime.now(timezone.utc)}})
    return Token(access_token=create_access_token(settings, {"sub": email}))


# ---------------------- Case Studies ----------------------
@router.get("/api/case-studies", response_model=List[CaseStudyListItem])
def list_case_studies(
    response: Response,
    industry: Optional[str] = None,
    project_type: Optional[str] = Query(None, alias="projectType"),
    featured: bool = False,
    preview: bool = Depends(require_preview),
    client: ContentClient = Depends(get_content_client),
):
    try:
        items = case_studies.get_case_studies(
            client,
            industry=industry,
            project_type=project_type,
            featured=featured,
            preview=preview,
        )
    except Exception:
        logger.exception("Error fetching case studies")
        return _fetch_failed("case studies")
    response.headers["Cache-Control"] = NO_CACHE if preview else CASE_STUDY_CACHE
    return items


@router.get("/api/case-studies/{slug}", response_model=CaseStudy)
def get_case_study(
    slug: str,
    response: Response,
    preview: bool = Depends(require_preview),
    client: ContentClient = Depends(get_content_client),
):
    try:
        item = case_studies.get_case_study_by_slug(client, slug, preview=preview)
    except Exception:
        logger.exception("Error fetching case study %s", slug)
        return _fetch_failed("case study")
    if item is None:
        raise HTTPException(status_code=404, detail="Case study not found")
    response.headers["Cache-Control"] = NO_CACHE if preview else CASE_STUDY_CACHE
    return item


# ---------------------- Blog ----------------------
@router.get("/api/blog", response_model=PaginatedBlogPosts)
def list_blog_posts(
    response: Response,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    preview: bool = Depends(require_preview),
    client: ContentClient = Depends(get_content_client),
):
    try:
        posts = blog.get_blog_posts(
            client,
            page=page,
            page_size=page_size,
            category=category,
            tag=tag,
            search=search,
            preview=preview,
        )
    except Exception:
        logger.exception("Error fetching blog posts")
        return _fetch_failed("blog posts")
    response.headers["Cache-Control"] = NO_CACHE if preview else BLOG_CACHE
    return posts


@router.get("/api/blog/{slug}", response_model=BlogPost)
def get_blog_post(
    slug: str,
    response: Response,
    preview: bool = Depends(require_preview),
    client: ContentClient = Depends(get_content_client),
):
    try:
        post = blog.get_blog_post_by_slug(client, slug, preview=preview)
    except Exception:
        logger.exception("Error fetching blog post %s", slug)
        return _fetch_failed("blog post")
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    response.headers["Cache-Control"] = NO_CACHE if preview else BLOG_CACHE
    return post


# ---------------------- Services & Team ----------------------
@router.get("/api/services", response_model=List[ServiceListItem])
def list_services(
    response: Response,
    category: Optional[str] = None,
    featured: bool = False,
    order: Literal["display", "name"] = "display",
    client: ContentClient = Depends(get_content_client),
):
    try:
        items = catalog.get_services(client, category=category, featured=featured, order=order)
    except Exception:
        logger.exception("Error fetching services")
        return _fetch_failed("services")
    response.headers["Cache-Control"] = CATALOG_CACHE
    return items


@router.get("/api/team", response_model=List[TeamMemberListItem])
def list_team(
    response: Response,
    department: Optional[str] = None,
    order: Literal["display", "name", "joined"] = "display",
    client: ContentClient = Depends(get_content_client),
):
    try:
        items = catalog.get_team_members(client, department=department, order=order)
    except Exception:
        logger.exception("Error fetching team members")
        return _fetch_failed("team members")
    response.headers["Cache-Control"] = CATALOG_CACHE
    return items


# ---------------------- Contact ----------------------
@router.post("/api/contact-us")
async def contact_us(
    request: Request,
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    db: Database = Depends(get_db),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    try:
        body = await request.json()
        result = await submit_contact_form(body, settings, email_client, db, rate_limiter)
    except Exception:
        logger.exception("Contact form API error")
        return _internal_error()
    return _form_response(result)


@router.get("/api/contact-submissions")
def list_contact_submissions(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    admin: AdminUser = Depends(get_current_admin),
    db: Database = Depends(get_db),
):
    flt = {"status": status} if status else {}
    return get_documents(db, "contactsubmission", flt, limit)


# ---------------------- Newsletter ----------------------
@router.post("/api/newsletter")
async def newsletter_subscribe(
    request: Request,
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    marketing: MarketingClient = Depends(get_marketing_client),
    db: Database = Depends(get_db),
):
    try:
        body = await request.json()
        result = await run_in_threadpool(subscribe_to_newsletter, body, settings, email_client, marketing, db)
    except Exception:
        logger.exception("Newsletter API error")
        return _internal_error()
    return _form_response(result)


@router.get("/api/newsletter/confirm")
def newsletter_confirm(
    token: str = "",
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    marketing: MarketingClient = Depends(get_marketing_client),
    db: Database = Depends(get_db),
):
    result = confirm_newsletter_subscription(token, settings, email_client, marketing, db)
    return _form_response(result)


@router.post("/api/newsletter/unsubscribe")
async def newsletter_unsubscribe(
    request: Request,
    settings: Settings = Depends(get_settings),
    email_client: EmailClient = Depends(get_email_client),
    marketing: MarketingClient = Depends(get_marketing_client),
    db: Database = Depends(get_db),
):
    try:
        body = await request.json()
        result = await run_in_threadpool(unsubscribe_from_newsletter, body, settings, email_client, marketing, db)
    except Exception:
        logger.exception("Newsletter unsubscribe API error")
        return _internal_error()
    return _form_response(result)


@router.post("/api/newsletter/preferences")
async def newsletter_preferences(
    request: Request,
    marketing: MarketingClient = Depends(get_marketing_client),
    db: Database = Depends(get_db),
):
    try:
        body = await request.json()
        result = await run_in_threadpool(update_newsletter_preferences, body, marketing, db)
    except Exception:
        logger.exception("Newsletter preferences API error")
        return _internal_error()
    return _form_response(result)


# ---------------------- Health ----------------------
@router.get("/")
def read_root():
    return {"message": "Equity by Design API running"}


# ---------------------- App ----------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # The rate limiter depends on the unique index; refuse to start without it
    ensure_indexes(app.state.db)
    yield


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    content_client: Optional[ContentClient] = None,
    email_client: Optional[EmailClient] = None,
    marketing: Optional[MarketingClient] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Equity by Design API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*" if settings.frontend_url == "*" else settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.db = db if db is not None else connect(settings.database_url, settings.database_name)
    app.state.content_client = content_client or ContentClient.from_settings(settings)
    app.state.email_client = email_client or EmailClient(settings.resend_api_key)
    app.state.marketing = marketing or MarketingClient(
        settings.convertkit_api_key,
        settings.convertkit_form_id,
        api_secret=settings.convertkit_api_secret,
    )
    app.state.rate_limiter = rate_limiter or RateLimiter(
        app.state.db,
        max_hits=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
