import pytest

from queries import (
    BLOG_POST_FIELDS,
    BLOG_POST_ORDERINGS,
    CASE_STUDY_FIELDS,
    SERVICE_FIELDS,
    TEAM_MEMBER_FIELDS,
    Filter,
    build_filter,
    order_clause,
    page_range,
    wildcard,
)


def test_build_filter_joins_in_order():
    assert build_filter(["_type == $type", "featured == true"]) == "_type == $type && featured == true"


def test_build_filter_rejects_empty():
    with pytest.raises(ValueError):
        build_filter([])


def test_filter_starts_with_type_predicate():
    flt = Filter("caseStudy")
    assert str(flt) == "_type == $type"
    assert flt.params == {"type": "caseStudy"}


def test_filter_binds_values_as_params():
    flt = Filter("caseStudy").where("client.industry == $industry", industry='Health" || true')
    assert "Health" not in flt.render()
    assert flt.params["industry"] == 'Health" || true'


def test_filter_rejects_rebinding_a_param():
    flt = Filter("blogPost").where("$tag in tags", tag="equity")
    with pytest.raises(ValueError):
        flt.where("$tag in keywords", tag="design")


def test_visible_hides_drafts_unless_previewing():
    assert "isDraft != true" in Filter("caseStudy").visible().render()
    assert Filter("caseStudy").visible(preview=True).render() == "_type == $type"


def test_visible_can_gate_on_publish_date():
    rendered = Filter("blogPost").visible(gate_publish_date=True).render()
    assert rendered == "_type == $type && isDraft != true && publishedAt <= now()"


def test_order_clause():
    assert order_clause(BLOG_POST_ORDERINGS, "recent") == "publishedAt desc"
    with pytest.raises(ValueError):
        order_clause(BLOG_POST_ORDERINGS, "popular")


def test_page_range_is_half_open():
    assert page_range(1, 10) == (0, 10)
    assert page_range(3, 5) == (10, 15)
    with pytest.raises(ValueError):
        page_range(0, 10)


def test_wildcard_lowercases_and_trims():
    assert wildcard("  Equity ") == "*equity*"


def test_case_study_detail_orders_process_steps_and_expands_related():
    assert "processSteps | order(stepNumber asc)" in CASE_STUDY_FIELDS
    assert "relatedCaseStudies[$preview || @->isDraft != true]->" in CASE_STUDY_FIELDS


def test_detail_projections_leave_out_draft_references():
    assert "relatedPosts[$preview || (@->isDraft != true && @->publishedAt <= now())]->" in BLOG_POST_FIELDS
    assert "relatedCaseStudies[@->isDraft != true]->" in SERVICE_FIELDS
    assert "select(favoriteProject->isDraft != true =>" in TEAM_MEMBER_FIELDS
    for fields in (CASE_STUDY_FIELDS, BLOG_POST_FIELDS, SERVICE_FIELDS, TEAM_MEMBER_FIELDS):
        assert "[]->" not in fields.replace("categories[]->", "")
