"""
GROQ query building

Projections for the list and detail views of each content type, and a small
builder that keeps filter predicates in order together with the parameters
they bind. Caller values never go into the query text.

The case study and blog post detail projections expect a ``$preview`` parameter:
referenced documents that are drafts (or unpublished posts) are left out
unless it is true.
"""
from typing import Any, Dict, List, Sequence, Tuple

# ---------------------- Case studies ----------------------
CASE_STUDY_LIST_FIELDS = """
  _id,
  title,
  "slug": slug.current,
  shortDescription,
  client {
    name,
    industry
  },
  projectType,
  "heroImage": heroImage.asset->url,
  "impactMetrics": impact.metrics[0..2] {
    metric,
    value
  },
  featured,
  publishedAt
"""

CASE_STUDY_FIELDS = f"""
  _id,
  _createdAt,
  _updatedAt,
  title,
  "slug": slug.current,
  shortDescription,
  client {{
    name,
    industry,
    location,
    website,
    "logo": logo.asset->url
  }},
  projectType,
  timeline,
  challenge,
  approach {{
    methodology,
    "processSteps": processSteps | order(stepNumber asc)
  }},
  solution,
  impact,
  "heroImage": heroImage {{
    "url": asset->url,
    alt
  }},
  "gallery": gallery[] | order(order asc) {{
    "url": asset->url,
    alt,
    caption
  }},
  beforeAfter,
  videos,
  seo,
  featured,
  isDraft,
  publishedAt,
  "relatedCaseStudies": relatedCaseStudies[$preview || @->isDraft != true]-> {{
    {CASE_STUDY_LIST_FIELDS}
  }}
"""

CASE_STUDY_ORDERINGS = {
    "featured": "featured desc, publishedAt desc",
    "recent": "publishedAt desc",
    "client": "client.name asc",
}

# ---------------------- Blog posts ----------------------
BLOG_POST_LIST_FIELDS = """
  _id,
  title,
  "slug": slug.current,
  excerpt,
  "featuredImage": featuredImage.asset->url,
  author-> {
    name,
    "photo": photo.asset->url
  },
  "categories": categories[]->title,
  tags,
  publishedAt,
  readingTime
"""

BLOG_POST_FIELDS = f"""
  _id,
  _createdAt,
  _updatedAt,
  title,
  "slug": slug.current,
  excerpt,
  content,
  "featuredImage": featuredImage {{
    "url": asset->url,
    alt
  }},
  author-> {{
    _id,
    name,
    "slug": slug.current,
    "photo": photo.asset->url,
    role
  }},
  categories[]-> {{
    _id,
    title,
    "slug": slug.current,
    color
  }},
  tags,
  publishedAt,
  isDraft,
  readingTime,
  seo,
  "relatedPosts": relatedPosts[$preview || (@->isDraft != true && @->publishedAt <= now())]-> {{
    {BLOG_POST_LIST_FIELDS}
  }}
"""

BLOG_POST_ORDERINGS = {
    "recent": "publishedAt desc",
    "oldest": "publishedAt asc",
    "title": "title asc",
}

# ---------------------- Services & team ----------------------
SERVICE_LIST_FIELDS = """
  _id,
  name,
  "slug": slug.current,
  tagline,
  description,
  icon,
  category,
  featured,
  "featuredImage": featuredImage.asset->url,
  startingPrice,
  displayOrder
"""

SERVICE_FIELDS = f"""
  {SERVICE_LIST_FIELDS},
  fullDescription,
  idealFor,
  capabilities,
  deliverables,
  benefits,
  processOverview,
  "processSteps": processSteps | order(stepNumber asc),
  timeline,
  pricingModel,
  pricingDetails,
  packages,
  faqs,
  "relatedCaseStudies": relatedCaseStudies[@->isDraft != true]-> {{
    {CASE_STUDY_LIST_FIELDS}
  }}
"""

SERVICE_ORDERINGS = {
    "display": "displayOrder asc",
    "name": "name asc",
}

TEAM_MEMBER_LIST_FIELDS = """
  _id,
  name,
  "slug": slug.current,
  role,
  department,
  displayOrder,
  "photo": photo.asset->url,
  shortBio,
  pronouns,
  socialLinks
"""

TEAM_MEMBER_FIELDS = f"""
  {TEAM_MEMBER_LIST_FIELDS},
  fullBio,
  expertise,
  quote,
  yearsExperience,
  education,
  awards,
  email,
  joinDate,
  languages,
  interests,
  "favoriteProject": select(favoriteProject->isDraft != true => favoriteProject-> {{
    {CASE_STUDY_LIST_FIELDS}
  }})
"""

TEAM_ORDERINGS = {
    "display": "displayOrder asc",
    "name": "name asc",
    "joined": "joinDate asc",
}


def build_filter(predicates: Sequence[str]) -> str:
    """AND together an ordered list of predicates; the type predicate comes first."""
    if not predicates:
        raise ValueError("A filter needs at least the document type predicate")
    return " && ".join(predicates)


def order_clause(orderings: Dict[str, str], name: str) -> str:
    try:
        return orderings[name]
    except KeyError:
        raise ValueError(f"Unknown ordering {name!r}; expected one of {sorted(orderings)}")


def page_range(page: int, page_size: int) -> Tuple[int, int]:
    """Half-open slice bounds for a 1-based page."""
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    start = (page - 1) * page_size
    return start, start + page_size


def wildcard(term: str) -> str:
    return f"*{term.strip().lower()}*"


class Filter:
    """Ordered predicates for one document type plus the parameters they bind."""

    def __init__(self, doc_type: str):
        self.predicates: List[str] = ["_type == $type"]
        self.params: Dict[str, Any] = {"type": doc_type}

    def where(self, clause: str, **params: Any) -> "Filter":
        clash = set(params) & set(self.params)
        if clash:
            raise ValueError(f"Parameter(s) already bound: {sorted(clash)}")
        self.predicates.append(clause)
        self.params.update(params)
        return self

    def visible(self, preview: bool = False, gate_publish_date: bool = False) -> "Filter":
        if not preview:
            self.where("isDraft != true")
            if gate_publish_date:
                self.where("publishedAt <= now()")
        return self

    def render(self) -> str:
        return build_filter(self.predicates)

    def __str__(self) -> str:
        return self.render()
