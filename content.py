"""
Content documents as returned by the query projections

These mirror what the content store sends back, not what editors type in the
CMS. Attribute names are snake_case; JSON names are the store's camelCase.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

RichText = List[Dict[str, Any]]


class ContentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # The store sends null for unset fields and for references it cannot
        # resolve inside arrays; fall back to the defaults and skip the holes
        if isinstance(data, dict):
            return {
                k: [i for i in v if i is not None] if isinstance(v, list) else v
                for k, v in data.items()
                if v is not None
            }
        return data


class Document(ContentModel):
    id: str = Field(..., alias="_id")
    slug: Optional[str] = None


class Image(ContentModel):
    url: Optional[str] = None
    alt: Optional[str] = None
    caption: Optional[str] = None


class Seo(ContentModel):
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    no_index: bool = False


# ---------------------- Case studies ----------------------
class ClientSummary(ContentModel):
    name: Optional[str] = None
    industry: Optional[str] = None


class Client(ClientSummary):
    location: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class ImpactMetric(ContentModel):
    metric: Optional[str] = None
    value: Optional[str] = None
    change: Optional[str] = None
    context: Optional[str] = None
    icon: Optional[str] = None


class CaseStudyListItem(Document):
    title: str
    short_description: Optional[str] = None
    client: Optional[ClientSummary] = None
    project_type: List[str] = Field(default_factory=list)
    hero_image: Optional[str] = None
    impact_metrics: List[ImpactMetric] = Field(default_factory=list)
    featured: bool = False
    published_at: Optional[datetime] = None


class Timeline(ContentModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[str] = None


class PainPoint(ContentModel):
    point: Optional[str] = None
    description: Optional[str] = None


class Challenge(ContentModel):
    overview: RichText = Field(default_factory=list)
    pain_points: List[PainPoint] = Field(default_factory=list)
    context: Optional[str] = None


class ProcessStep(ContentModel):
    step_number: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    activities: List[str] = Field(default_factory=list)
    icon: Optional[str] = None


class Approach(ContentModel):
    methodology: RichText = Field(default_factory=list)
    process_steps: List[ProcessStep] = Field(default_factory=list)


class Deliverable(ContentModel):
    name: Optional[str] = None
    description: Optional[str] = None


class Solution(ContentModel):
    overview: RichText = Field(default_factory=list)
    deliverables: List[Deliverable] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)


class Testimonial(ContentModel):
    quote: Optional[str] = None
    author: Optional[str] = None
    role: Optional[str] = None
    photo: Optional[Dict[str, Any]] = None


class Impact(ContentModel):
    overview: RichText = Field(default_factory=list)
    metrics: List[ImpactMetric] = Field(default_factory=list)
    testimonial: Optional[Testimonial] = None
    long_term_impact: Optional[str] = None


class CaseStudy(Document):
    title: str
    short_description: Optional[str] = None
    client: Optional[Client] = None
    project_type: List[str] = Field(default_factory=list)
    timeline: Optional[Timeline] = None
    challenge: Optional[Challenge] = None
    approach: Optional[Approach] = None
    solution: Optional[Solution] = None
    impact: Optional[Impact] = None
    hero_image: Optional[Image] = None
    gallery: List[Image] = Field(default_factory=list)
    before_after: Optional[Dict[str, Any]] = None
    videos: List[Dict[str, Any]] = Field(default_factory=list)
    seo: Optional[Seo] = None
    featured: bool = False
    is_draft: bool = False
    published_at: Optional[datetime] = None
    related_case_studies: List[CaseStudyListItem] = Field(default_factory=list)


class IndustryCount(ContentModel):
    industry: str
    count: int


class ProjectTypeCount(ContentModel):
    type: str
    count: int


class CaseStudyStats(ContentModel):
    total_projects: int = 0
    featured_projects: int = 0
    industries_served: int = 0


# ---------------------- Blog ----------------------
class AuthorSummary(ContentModel):
    name: Optional[str] = None
    photo: Optional[str] = None


class Author(AuthorSummary):
    id: Optional[str] = Field(None, alias="_id")
    slug: Optional[str] = None
    role: Optional[str] = None


class Category(ContentModel):
    id: Optional[str] = Field(None, alias="_id")
    title: Optional[str] = None
    slug: Optional[str] = None
    color: Optional[str] = None


class CategoryCount(Category):
    count: int = 0


class TagCount(ContentModel):
    tag: str
    count: int


class BlogPostListItem(Document):
    title: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[AuthorSummary] = None
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    reading_time: Optional[int] = None


class BlogPost(Document):
    title: str
    excerpt: Optional[str] = None
    content: RichText = Field(default_factory=list)
    featured_image: Optional[Image] = None
    author: Optional[Author] = None
    categories: List[Category] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    is_draft: bool = False
    reading_time: Optional[int] = None
    seo: Optional[Seo] = None
    related_posts: List[BlogPostListItem] = Field(default_factory=list)


class PaginatedBlogPosts(ContentModel):
    posts: List[BlogPostListItem]
    total: int
    page: int
    page_size: int
    has_more: bool


# ---------------------- Services & team ----------------------
class ServiceListItem(Document):
    name: str
    tagline: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    featured: bool = False
    featured_image: Optional[str] = None
    starting_price: Optional[str] = None
    display_order: Optional[int] = None


class ServicePackage(ContentModel):
    name: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    recommended: bool = False


class Service(ServiceListItem):
    full_description: RichText = Field(default_factory=list)
    ideal_for: List[str] = Field(default_factory=list)
    capabilities: List[Dict[str, Any]] = Field(default_factory=list)
    deliverables: List[Deliverable] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    process_overview: Optional[str] = None
    process_steps: List[ProcessStep] = Field(default_factory=list)
    timeline: Optional[Dict[str, Any]] = None
    pricing_model: Optional[str] = None
    pricing_details: Optional[str] = None
    packages: List[ServicePackage] = Field(default_factory=list)
    faqs: List[Dict[str, Any]] = Field(default_factory=list)
    related_case_studies: List[CaseStudyListItem] = Field(default_factory=list)


class SocialLinks(ContentModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    dribbble: Optional[str] = None
    behance: Optional[str] = None
    website: Optional[str] = None


class TeamMemberListItem(Document):
    name: str
    role: Optional[str] = None
    department: Optional[str] = None
    display_order: Optional[int] = None
    photo: Optional[str] = None
    short_bio: Optional[str] = None
    pronouns: Optional[str] = None
    social_links: Optional[SocialLinks] = None


class TeamMember(TeamMemberListItem):
    full_bio: RichText = Field(default_factory=list)
    expertise: List[str] = Field(default_factory=list)
    quote: Optional[str] = None
    years_experience: Optional[int] = None
    education: List[Dict[str, Any]] = Field(default_factory=list)
    awards: List[Dict[str, Any]] = Field(default_factory=list)
    email: Optional[str] = None
    join_date: Optional[date] = None
    languages: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    favorite_project: Optional[CaseStudyListItem] = None
