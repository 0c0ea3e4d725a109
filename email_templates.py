"""
Transactional email templates

Each function takes the submission data and returns a subject line and an
HTML body. Bodies are Jinja2 templates rendered with autoescaping on, so
every interpolated value is HTML-escaped. Subjects are plain text.
"""
from typing import NamedTuple
from urllib.parse import urlencode

from jinja2 import DictLoader, Environment, StrictUndefined

from schemas import ContactForm

BRAND = "Equity by Design"
PHONE = "(555) 123-4567"

TIMELINE_COLORS = {
    "urgent": "#FF6B6B",
    "soon": "#FFA500",
}
DEFAULT_TIMELINE_COLOR = "#81B29A"

TEMPLATES = {
    "base.html": """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <style>
      body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; line-height: 1.6; color: #333; }
      .container { max-width: 600px; margin: 0 auto; padding: 20px; }
      .footer { text-align: center; margin-top: 30px; font-size: 14px; color: #666; }
      a { color: #3D5A80; }
      {% block style %}{% endblock %}
    </style>
  </head>
  <body>
    <div class="container">
{% block body %}{% endblock %}
    </div>
  </body>
</html>
""",
    "contact_confirmation.html": """{% extends "base.html" %}
{% block style %}
      .header { background: #E07A5F; color: white; padding: 30px; text-align: center; border-radius: 8px 8px 0 0; }
      .content { background: #F4F1DE; padding: 30px; border-radius: 0 0 8px 8px; }
{% endblock %}
{% block body %}
      <div class="header">
        <h1>Thank You, {{ form.name }}!</h1>
      </div>
      <div class="content">
        <p>We've received your inquiry about working with {{ brand }} for {{ form.organization }}.</p>
        <p>Our team is reviewing your project details and will reach out within 24 hours to discuss next steps.</p>
        <p>In the meantime, feel free to:</p>
        <ul>
          <li><a href="{{ site_url }}/work">Explore our case studies</a></li>
          <li><a href="{{ site_url }}/insights">Read our latest insights</a></li>
          <li><a href="{{ site_url }}/about">Learn more about our team</a></li>
        </ul>
        <p>If you have any immediate questions, reply to this email or call us at {{ phone }}.</p>
        <p>Looking forward to creating change together!</p>
        <p><strong>The {{ brand }} Team</strong></p>
      </div>
      <div class="footer">
        <p>{{ brand }} | Design for Everyone</p>
        <p><a href="{{ site_url }}">{{ site_host }}</a></p>
      </div>
{% endblock %}
""",
    "internal_notification.html": """{% extends "base.html" %}
{% block style %}
      body { font-family: monospace; }
      .container { max-width: 800px; }
      .section { background: #f5f5f5; padding: 15px; margin: 15px 0; border-left: 4px solid #E07A5F; }
      .label { font-weight: bold; color: #3D5A80; }
      .priority { border-left-color: {{ timeline_color }}; }
{% endblock %}
{% block body %}
      <h1>New Project Inquiry</h1>
      <div class="section">
        <h2>Contact Information</h2>
        <p><span class="label">Name:</span> {{ form.name }}</p>
        <p><span class="label">Email:</span> <a href="mailto:{{ form.email }}">{{ form.email }}</a></p>
        {% if form.phone %}<p><span class="label">Phone:</span> {{ form.phone }}</p>{% endif %}
        <p><span class="label">Organization:</span> {{ form.organization }}</p>
        <p><span class="label">Type:</span> {{ form.organization_type }}</p>
        {% if form.organization_size %}<p><span class="label">Size:</span> {{ form.organization_size }}</p>{% endif %}
      </div>
      <div class="section priority">
        <h2>Project Details</h2>
        <p><span class="label">Services Requested:</span> {{ form.project_type | join(", ") }}</p>
        <p><span class="label">Timeline:</span> {{ form.timeline | upper }}</p>
        {% if form.budget %}<p><span class="label">Budget:</span> {{ form.budget }}</p>{% endif %}
        <p><span class="label">Description:</span></p>
        <p>{{ form.project_description }}</p>
        {% if form.goals %}<p><span class="label">Goals:</span> {{ form.goals }}</p>{% endif %}
        {% if form.referral_source %}<p><span class="label">Heard about us:</span> {{ form.referral_source }}</p>{% endif %}
        {% if form.additional_info %}<p><span class="label">Additional info:</span> {{ form.additional_info }}</p>{% endif %}
      </div>
      <div class="section">
        <h2>Next Steps</h2>
        <ol>
          <li>Review project details and assess fit</li>
          <li>Check team availability</li>
          <li>Respond within 24 hours</li>
          <li>Schedule discovery call if appropriate</li>
        </ol>
      </div>
      <p style="margin-top: 30px;">
        <a href="mailto:{{ form.email }}?{{ reply_query }}"
           style="background: #E07A5F; color: white; padding: 12px 24px; text-decoration: none; border-radius: 4px; display: inline-block;">
          Reply to {{ form.name }}
        </a>
      </p>
{% endblock %}
""",
    "newsletter_confirmation.html": """{% extends "base.html" %}
{% block style %}
      .button { background: #E07A5F; color: white; padding: 16px 32px; text-decoration: none; border-radius: 6px; display: inline-block; font-weight: bold; }
{% endblock %}
{% block body %}
      <h1>Welcome to {{ brand }}!</h1>
      <p>Thanks for subscribing to our newsletter. We're excited to share insights on design, equity, and social impact with you.</p>
      <p>Please confirm your email address to complete your subscription:</p>
      <p style="text-align: center; margin: 30px 0;">
        <a href="{{ confirm_url }}" class="button">Confirm Subscription</a>
      </p>
      <p style="font-size: 14px; color: #666;">
        Or copy and paste this link into your browser:<br>
        {{ confirm_url }}
      </p>
      <div class="footer">
        <p>If you didn't sign up for this newsletter, you can safely ignore this email.</p>
        <p>{{ brand }} | Design for Everyone</p>
      </div>
{% endblock %}
""",
    "newsletter_welcome.html": """{% extends "base.html" %}
{% block style %}
      .card { background: #F4F1DE; padding: 20px; margin: 15px 0; border-radius: 8px; }
{% endblock %}
{% block body %}
      <h1>You're in!</h1>
      <p>Welcome to the {{ brand }} community! You'll now receive our insights on design for equity, social impact, and creating meaningful change.</p>
      <div class="card">
        <h3>What to expect:</h3>
        <ul>
          <li><strong>Weekly insights</strong> on equity-centered design</li>
          <li><strong>Case studies</strong> showing real-world impact</li>
          <li><strong>Practical tips</strong> for creating inclusive experiences</li>
          <li><strong>Exclusive content</strong> and early access to resources</li>
        </ul>
      </div>
      <h3>While you wait for our next newsletter:</h3>
      <ul>
        <li><a href="{{ site_url }}/work">Explore our case studies</a></li>
        <li><a href="{{ site_url }}/insights">Read our latest articles</a></li>
        <li><a href="{{ site_url }}/about">Meet our team</a></li>
      </ul>
      <p>Have questions or feedback? Just reply to this email, we'd love to hear from you!</p>
      <p><strong>The {{ brand }} Team</strong></p>
      <p style="margin-top: 40px; font-size: 12px; color: #666;">
        <a href="{{ preferences_url }}">Update preferences</a> |
        <a href="{{ unsubscribe_url }}">Unsubscribe</a>
      </p>
{% endblock %}
""",
    "unsubscribe_confirmation.html": """{% extends "base.html" %}
{% block body %}
      <h2>You've been unsubscribed</h2>
      <p>We're sorry to see you go! You've been removed from our mailing list.</p>
      <p>If this was a mistake, you can <a href="{{ site_url }}/newsletter">resubscribe anytime</a>.</p>
      <p>Thanks for being part of our community!</p>
{% endblock %}
""",
}

env = Environment(loader=DictLoader(TEMPLATES), autoescape=True, undefined=StrictUndefined)


class RenderedEmail(NamedTuple):
    subject: str
    html: str


def _render(name: str, **context) -> str:
    return env.get_template(name).render(brand=BRAND, **context)


def _url(site_url: str, path: str, **query: str) -> str:
    url = f"{site_url}{path}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def contact_confirmation(form: ContactForm, site_url: str) -> RenderedEmail:
    html = _render(
        "contact_confirmation.html",
        form=form,
        site_url=site_url,
        site_host=site_url.split("://", 1)[-1],
        phone=PHONE,
    )
    return RenderedEmail(f"We received your inquiry - {BRAND}", html)


def internal_notification(form: ContactForm) -> RenderedEmail:
    html = _render(
        "internal_notification.html",
        form=form,
        timeline_color=TIMELINE_COLORS.get(form.timeline, DEFAULT_TIMELINE_COLOR),
        reply_query=urlencode({"subject": f"Re: Your {BRAND} inquiry"}),
    )
    return RenderedEmail(f"New Project Inquiry: {form.organization}", html)


def newsletter_confirmation(site_url: str, token: str) -> RenderedEmail:
    html = _render("newsletter_confirmation.html", confirm_url=_url(site_url, "/newsletter/confirm", token=token))
    return RenderedEmail(f"Confirm your subscription to {BRAND}", html)


def newsletter_welcome(site_url: str, email: str, unsubscribe_token: str) -> RenderedEmail:
    html = _render(
        "newsletter_welcome.html",
        site_url=site_url,
        preferences_url=_url(site_url, "/newsletter/preferences", email=email),
        unsubscribe_url=_url(site_url, "/newsletter/unsubscribe", email=email, token=unsubscribe_token),
    )
    return RenderedEmail(f"Welcome to the {BRAND} community!", html)


def unsubscribe_confirmation(site_url: str) -> RenderedEmail:
    return RenderedEmail("You've been unsubscribed", _render("unsubscribe_confirmation.html", site_url=site_url))
