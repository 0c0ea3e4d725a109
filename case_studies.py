"""
Case study access functions

Each function builds one query, runs it on the given content client and
returns typed results. Transport errors propagate to the caller.
"""
from collections import Counter
from typing import Dict, List, Optional

from content import CaseStudy, CaseStudyListItem, CaseStudyStats, IndustryCount, ProjectTypeCount
from content_client import ContentClient
from queries import (
    CASE_STUDY_FIELDS,
    CASE_STUDY_LIST_FIELDS,
    CASE_STUDY_ORDERINGS,
    Filter,
    order_clause,
)

DOC_TYPE = "caseStudy"


def get_case_studies(
    client: ContentClient,
    industry: Optional[str] = None,
    project_type: Optional[str] = None,
    featured: bool = False,
    preview: bool = False,
    order: str = "featured",
) -> List[CaseStudyListItem]:
    flt = Filter(DOC_TYPE).visible(preview)
    if industry:
        flt.where("client.industry == $industry", industry=industry)
    if project_type:
        flt.where("$projectType in projectType", projectType=project_type)
    if featured:
        flt.where("featured == true")

    query = f"*[{flt}] | order({order_clause(CASE_STUDY_ORDERINGS, order)}) {{{CASE_STUDY_LIST_FIELDS}}}"
    docs = client.fetch(query, flt.params) or []
    return [CaseStudyListItem.model_validate(d) for d in docs]


def get_case_study_by_slug(client: ContentClient, slug: str, preview: bool = False) -> Optional[CaseStudy]:
    flt = Filter(DOC_TYPE).where("slug.current == $slug", slug=slug).visible(preview)
    query = f"*[{flt}][0] {{{CASE_STUDY_FIELDS}}}"
    doc = client.fetch(query, dict(flt.params, preview=preview))
    if not doc:
        return None
    return CaseStudy.model_validate(doc)


def get_featured_case_studies(client: ContentClient, limit: int = 3) -> List[CaseStudyListItem]:
    """Most recently published featured case studies, for the homepage."""
    if limit <= 0:
        return []
    flt = Filter(DOC_TYPE).visible().where("featured == true")
    params = dict(flt.params, limit=limit)
    query = f"*[{flt}] | order(publishedAt desc) [0...$limit] {{{CASE_STUDY_LIST_FIELDS}}}"
    docs = client.fetch(query, params) or []
    return [CaseStudyListItem.model_validate(d) for d in docs[:limit]]


def get_related_case_studies(client: ContentClient, case_study_id: str, limit: int = 3) -> List[CaseStudyListItem]:
    """
    Other published case studies that share a project type or the client
    industry with the given one, newest first.
    """
    if limit <= 0:
        return []
    related = (
        Filter(DOC_TYPE)
        .where("_id != ^._id")
        .visible()
        .where("(client.industry == ^.client.industry || count((projectType)[@ in ^.projectType]) > 0)")
    )
    query = f"""*[_type == $type && _id == $id][0] {{
      "related": *[{related}] | order(publishedAt desc) [0...$limit] {{{CASE_STUDY_LIST_FIELDS}}}
    }}.related"""
    docs = client.fetch(query, dict(related.params, id=case_study_id, limit=limit)) or []
    items = [CaseStudyListItem.model_validate(d) for d in docs]
    return [item for item in items if item.id != case_study_id][:limit]


def get_case_study_industries(client: ContentClient) -> List[IndustryCount]:
    flt = Filter(DOC_TYPE).visible()
    industries = client.fetch(f"*[{flt}].client.industry", flt.params) or []
    counts = Counter(i for i in industries if i)
    return [
        IndustryCount(industry=name, count=n)
        for name, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def get_case_study_project_types(client: ContentClient) -> List[ProjectTypeCount]:
    flt = Filter(DOC_TYPE).visible()
    types = client.fetch(f"*[{flt}].projectType[]", flt.params) or []
    counts = Counter(t for t in types if t)
    return [
        ProjectTypeCount(type=name, count=n)
        for name, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def get_case_study_stats(client: ContentClient) -> CaseStudyStats:
    """Headline numbers for the homepage stats band."""
    flt = Filter(DOC_TYPE).visible()
    query = f"""{{
      "totalProjects": count(*[{flt}]),
      "featuredProjects": count(*[{flt} && featured == true]),
      "industries": array::unique(*[{flt}].client.industry)
    }}"""
    result = client.fetch(query, flt.params) or {}
    industries = [i for i in result.get("industries") or [] if i]
    return CaseStudyStats(
        total_projects=result.get("totalProjects") or 0,
        featured_projects=result.get("featuredProjects") or 0,
        industries_served=len(industries),
    )


def generate_case_study_static_params(client: ContentClient) -> List[Dict[str, str]]:
    flt = Filter(DOC_TYPE).visible()
    docs = client.fetch(f'*[{flt}] {{ "slug": slug.current }}', flt.params) or []
    return [{"slug": d["slug"]} for d in docs if d.get("slug")]
