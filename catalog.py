"""
Service catalog and team access functions
"""
from typing import Dict, List, Optional

from content import Service, ServiceListItem, TeamMember, TeamMemberListItem
from content_client import ContentClient
from queries import (
    SERVICE_FIELDS,
    SERVICE_LIST_FIELDS,
    SERVICE_ORDERINGS,
    TEAM_MEMBER_FIELDS,
    TEAM_MEMBER_LIST_FIELDS,
    TEAM_ORDERINGS,
    Filter,
    order_clause,
)


def _active(doc_type: str) -> Filter:
    return Filter(doc_type).where("isActive != false")


def _slugs(client: ContentClient, flt: Filter) -> List[Dict[str, str]]:
    docs = client.fetch(f'*[{flt}] {{ "slug": slug.current }}', flt.params) or []
    return [{"slug": d["slug"]} for d in docs if d.get("slug")]


# ---------------------- Services ----------------------
def get_services(
    client: ContentClient,
    category: Optional[str] = None,
    featured: bool = False,
    order: str = "display",
) -> List[ServiceListItem]:
    flt = _active("service")
    if category:
        flt.where("category == $category", category=category)
    if featured:
        flt.where("featured == true")
    query = f"*[{flt}] | order({order_clause(SERVICE_ORDERINGS, order)}) {{{SERVICE_LIST_FIELDS}}}"
    return [ServiceListItem.model_validate(d) for d in client.fetch(query, flt.params) or []]


def get_service_by_slug(client: ContentClient, slug: str) -> Optional[Service]:
    flt = _active("service").where("slug.current == $slug", slug=slug)
    doc = client.fetch(f"*[{flt}][0] {{{SERVICE_FIELDS}}}", flt.params)
    return Service.model_validate(doc) if doc else None


def generate_service_static_params(client: ContentClient) -> List[Dict[str, str]]:
    return _slugs(client, _active("service"))


# ---------------------- Team ----------------------
def get_team_members(
    client: ContentClient,
    department: Optional[str] = None,
    order: str = "display",
) -> List[TeamMemberListItem]:
    flt = _active("teamMember")
    if department:
        flt.where("department == $department", department=department)
    query = f"*[{flt}] | order({order_clause(TEAM_ORDERINGS, order)}) {{{TEAM_MEMBER_LIST_FIELDS}}}"
    return [TeamMemberListItem.model_validate(d) for d in client.fetch(query, flt.params) or []]


def get_team_member_by_slug(client: ContentClient, slug: str) -> Optional[TeamMember]:
    flt = _active("teamMember").where("slug.current == $slug", slug=slug)
    doc = client.fetch(f"*[{flt}][0] {{{TEAM_MEMBER_FIELDS}}}", flt.params)
    return TeamMember.model_validate(doc) if doc else None


def generate_team_member_static_params(client: ContentClient) -> List[Dict[str, str]]:
    return _slugs(client, _active("teamMember"))
