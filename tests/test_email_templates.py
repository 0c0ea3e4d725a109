import email_templates
from schemas import ContactForm

SITE = "https://equitybydesign.com"


def make_form(contact_data, **overrides):
    contact_data.update(overrides)
    return ContactForm.model_validate(contact_data)


def test_contact_confirmation(contact_data):
    rendered = email_templates.contact_confirmation(make_form(contact_data), SITE)
    assert rendered.subject == "We received your inquiry - Equity by Design"
    assert "Thank You, Ada Lovelace!" in rendered.html
    assert f'href="{SITE}/work"' in rendered.html


def test_user_data_is_escaped(contact_data):
    form = make_form(contact_data, name="<script>alert(1)</script>", organization="Tom & Jerry's")
    confirmation = email_templates.contact_confirmation(form, SITE)
    notification = email_templates.internal_notification(form)

    for html in (confirmation.html, notification.html):
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
    assert "Tom &amp; Jerry&#39;s" in notification.html


def test_every_free_text_field_is_escaped(contact_data):
    payload = '<img src=x onerror="alert(1)">'
    form = make_form(
        contact_data,
        phone=payload,
        goals=payload,
        referralSource=payload,
        additionalInfo=payload,
        projectType=[payload],
    )
    html = email_templates.internal_notification(form).html
    assert "<img" not in html
    assert html.count("&lt;img src=x onerror=&#34;alert(1)&#34;&gt;") == 5


def test_subject_is_plain_text(contact_data):
    form = make_form(contact_data, organization="Tom & Jerry's")
    assert email_templates.internal_notification(form).subject == "New Project Inquiry: Tom & Jerry's"


def test_internal_notification_lists_details(contact_data):
    rendered = email_templates.internal_notification(make_form(contact_data))
    assert rendered.subject == "New Project Inquiry: Analytical Engines Trust"
    assert "accessibility-audit, web-design" in rendered.html
    assert "URGENT" in rendered.html
    assert "#FF6B6B" in rendered.html
    assert "Phone:" in rendered.html
    assert "Budget:" in rendered.html


def test_internal_notification_omits_missing_optional_lines(contact_data):
    del contact_data["phone"]
    del contact_data["budget"]
    rendered = email_templates.internal_notification(make_form(contact_data, timeline="planning"))
    assert "Phone:" not in rendered.html
    assert "Budget:" not in rendered.html
    assert "#81B29A" in rendered.html


def test_newsletter_confirmation_link():
    rendered = email_templates.newsletter_confirmation(SITE, "abc.def.ghi")
    assert f"{SITE}/newsletter/confirm?token=abc.def.ghi" in rendered.html
    assert rendered.subject == "Confirm your subscription to Equity by Design"


def test_welcome_has_preferences_and_unsubscribe_links():
    rendered = email_templates.newsletter_welcome(SITE, "grace@hopper.net", "tok")
    assert "/newsletter/preferences?email=grace%40hopper.net" in rendered.html
    assert "/newsletter/unsubscribe?email=grace%40hopper.net&amp;token=tok" in rendered.html


def test_unsubscribe_confirmation():
    rendered = email_templates.unsubscribe_confirmation(SITE)
    assert rendered.subject == "You've been unsubscribed"
    assert f"{SITE}/newsletter" in rendered.html
