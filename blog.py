"""
Blog post access functions

Public queries hide drafts and posts scheduled for the future. Passing
``preview=True`` lifts both gates; only editor-authenticated callers may do
that (see ``auth.require_preview``).
"""
import math
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from content import BlogPost, BlogPostListItem, CategoryCount, PaginatedBlogPosts, TagCount
from content_client import ContentClient
from queries import (
    BLOG_POST_FIELDS,
    BLOG_POST_LIST_FIELDS,
    BLOG_POST_ORDERINGS,
    Filter,
    order_clause,
    page_range,
    wildcard,
)

DOC_TYPE = "blogPost"
WORDS_PER_MINUTE = 200


def _published(preview: bool = False) -> Filter:
    return Filter(DOC_TYPE).visible(preview, gate_publish_date=True)


def _list_items(docs: Optional[List[Dict[str, Any]]], limit: Optional[int] = None) -> List[BlogPostListItem]:
    items = [BlogPostListItem.model_validate(d) for d in docs or []]
    return items[:limit] if limit is not None else items


def get_blog_posts(
    client: ContentClient,
    page: int = 1,
    page_size: int = 10,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    preview: bool = False,
    order: str = "recent",
) -> PaginatedBlogPosts:
    flt = _published(preview)
    if category:
        flt.where("$category in categories[]->slug.current", category=category)
    if tag:
        flt.where("$tag in tags", tag=tag)
    if search and search.strip():
        flt.where("(lower(title) match $search || lower(excerpt) match $search)", search=wildcard(search))

    start, end = page_range(page, page_size)
    params = dict(flt.params, start=start, end=end)
    query = f"""{{
      "posts": *[{flt}] | order({order_clause(BLOG_POST_ORDERINGS, order)}) [$start...$end] {{{BLOG_POST_LIST_FIELDS}}},
      "total": count(*[{flt}])
    }}"""
    result = client.fetch(query, params) or {}
    total = result.get("total") or 0
    return PaginatedBlogPosts(
        posts=_list_items(result.get("posts"), page_size),
        total=total,
        page=page,
        page_size=page_size,
        has_more=end < total,
    )


def get_blog_post_by_slug(client: ContentClient, slug: str, preview: bool = False) -> Optional[BlogPost]:
    flt = _published(preview).where("slug.current == $slug", slug=slug)
    doc = client.fetch(f"*[{flt}][0] {{{BLOG_POST_FIELDS}}}", dict(flt.params, preview=preview))
    if not doc:
        return None
    post = BlogPost.model_validate(doc)
    if post.reading_time is None:
        post.reading_time = calculate_reading_time(post.content)
    return post


def get_related_blog_posts(client: ContentClient, post_id: str, limit: int = 3) -> List[BlogPostListItem]:
    """Published posts sharing a category or a tag with the given post, newest first."""
    if limit <= 0:
        return []
    related = (
        Filter(DOC_TYPE)
        .where("_id != ^._id")
        .visible(gate_publish_date=True)
        .where(
            "(count((categories[]._ref)[@ in ^.categories[]._ref]) > 0"
            " || count((tags)[@ in ^.tags]) > 0)"
        )
    )
    query = f"""*[_type == $type && _id == $id][0] {{
      "related": *[{related}] | order(publishedAt desc) [0...$limit] {{{BLOG_POST_LIST_FIELDS}}}
    }}.related"""
    docs = client.fetch(query, dict(related.params, id=post_id, limit=limit))
    return [item for item in _list_items(docs) if item.id != post_id][:limit]


def get_blog_categories(client: ContentClient) -> List[CategoryCount]:
    posts = _published()
    query = f"""*[_type == "category"] {{
      _id,
      title,
      "slug": slug.current,
      color,
      "count": count(*[{posts} && references(^._id)])
    }} | order(count desc)"""
    docs = client.fetch(query, posts.params) or []
    return [CategoryCount.model_validate(d) for d in docs]


def get_blog_tags(client: ContentClient) -> List[TagCount]:
    flt = _published()
    tags = client.fetch(f"*[{flt}].tags[]", flt.params) or []
    counts = Counter(t for t in tags if t)
    return [
        TagCount(tag=tag, count=n)
        for tag, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def search_blog_posts(client: ContentClient, search_term: str, limit: int = 10) -> List[BlogPostListItem]:
    """
    Case-insensitive substring search over title, excerpt and body text.

    There is no relevance ranking: matches come back newest first.
    """
    if limit <= 0 or not search_term.strip():
        return []
    flt = _published().where(
        "(lower(title) match $search || lower(excerpt) match $search"
        " || lower(pt::text(content)) match $search)",
        search=wildcard(search_term),
    )
    query = f"*[{flt}] | order(publishedAt desc) [0...$limit] {{{BLOG_POST_LIST_FIELDS}}}"
    return _list_items(client.fetch(query, dict(flt.params, limit=limit)), limit)


def get_recent_blog_posts(client: ContentClient, limit: int = 3) -> List[BlogPostListItem]:
    if limit <= 0:
        return []
    flt = _published()
    query = f"*[{flt}] | order(publishedAt desc) [0...$limit] {{{BLOG_POST_LIST_FIELDS}}}"
    return _list_items(client.fetch(query, dict(flt.params, limit=limit)), limit)


def get_featured_blog_posts(client: ContentClient, limit: int = 3) -> List[BlogPostListItem]:
    # Posts have no featured flag; the most recent ones stand in
    return get_recent_blog_posts(client, limit)


def generate_blog_post_static_params(client: ContentClient) -> List[Dict[str, str]]:
    flt = _published()
    docs = client.fetch(f'*[{flt}] {{ "slug": slug.current }}', flt.params) or []
    return [{"slug": d["slug"]} for d in docs if d.get("slug")]


# ---------------------- Helpers ----------------------
def calculate_reading_time(content: List[Dict[str, Any]]) -> int:
    """Minutes to read, from the text spans of paragraph blocks at 200 wpm, rounded up."""
    words = 0
    for block in content or []:
        if block.get("_type") != "block":
            continue
        for child in block.get("children") or []:
            if child.get("_type") == "span":
                words += len((child.get("text") or "").split())
    return math.ceil(words / WORDS_PER_MINUTE)


def get_blog_post_url(slug: str) -> str:
    return f"/insights/{slug}"


def format_date(value: Union[str, date, datetime]) -> str:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{value.strftime('%B')} {value.day}, {value.year}"
