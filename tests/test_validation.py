from schemas import ContactForm, NewsletterPreferences, NewsletterSubscribe, SubmissionResult
from validation import FORM_ERRORS_KEY, honeypot_tripped, validate


def test_valid_contact_form(contact_data):
    form, errors = validate(ContactForm, contact_data)
    assert errors is None
    assert form.organization_type == "nonprofit-education"
    assert form.project_type == ["accessibility-audit", "web-design"]
    assert form.marketing_consent is True


def test_errors_keyed_by_submitted_field_name(contact_data):
    contact_data.update(name="A", projectDescription="Too short", projectType=[" "], timeline="someday")
    form, errors = validate(ContactForm, contact_data)

    assert form is None
    assert set(errors) == {"name", "projectDescription", "projectType", "timeline"}
    assert errors["projectDescription"] == ["Please provide more detail about your project"]
    assert errors["projectType"] == ["Select at least one service"]


def test_description_upper_bound(contact_data):
    contact_data["projectDescription"] = "x" * 2001
    _, errors = validate(ContactForm, contact_data)
    assert "projectDescription" in errors


def test_missing_required_fields():
    _, errors = validate(ContactForm, {"email": "not-an-email"})
    assert {"name", "email", "organization", "organizationType", "projectType", "timeline"} <= set(errors)


def test_non_object_body():
    assert validate(ContactForm, ["a", "b"]) == (None, {FORM_ERRORS_KEY: ["Expected a JSON object"]})


def test_newsletter_requires_consent(newsletter_data):
    newsletter_data["gdprConsent"] = False
    _, errors = validate(NewsletterSubscribe, newsletter_data)
    assert errors == {"gdprConsent": ["You must consent to receive emails"]}


def test_newsletter_first_name_optional_but_not_empty(newsletter_data):
    del newsletter_data["firstName"]
    assert validate(NewsletterSubscribe, newsletter_data)[1] is None
    newsletter_data["firstName"] = ""
    assert "firstName" in validate(NewsletterSubscribe, newsletter_data)[1]


def test_preferences_frequency_enum():
    _, errors = validate(NewsletterPreferences, {"email": "ada@lovelace.org", "frequency": "daily"})
    assert "frequency" in errors


def test_honeypot():
    assert honeypot_tripped({"_honeypot": "http://spam.biz"})
    assert not honeypot_tripped({"_honeypot": ""})
    assert not honeypot_tripped({"_honeypot": "   "})
    assert not honeypot_tripped({})
    assert not honeypot_tripped("junk")


def test_filled_honeypot_is_also_a_field_error(contact_data):
    contact_data["_honeypot"] = "gotcha"
    _, errors = validate(ContactForm, contact_data)
    assert "_honeypot" in errors


def test_result_envelope_uses_camel_case_and_omits_unset():
    result = SubmissionResult(success=False, error="Please check", field_errors={"email": ["bad"]})
    assert result.to_response() == {"success": False, "error": "Please check", "fieldErrors": {"email": ["bad"]}}
    assert SubmissionResult(success=True, requires_confirmation=True).to_response() == {
        "success": True,
        "requiresConfirmation": True,
    }
