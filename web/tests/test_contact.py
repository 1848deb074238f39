"""Test contact form validation and forwarding."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from catalog.errors import ValidationError
from web.contact import ContactSubmission, forward_submission, parse_contact_form

VALID_FORM = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "mobile": "+91 98765 43210",
    "message": "Please send bulk pricing.",
    "productInterest": "Astral Gold Pen",
}


class TestParseContactForm:
    """Field validation."""

    def test_valid_form(self):
        submission = parse_contact_form(VALID_FORM)

        assert submission.name == "Asha Rao"
        assert submission.product_interest == "Astral Gold Pen"

    @pytest.mark.parametrize("field", ["name", "email", "message"])
    def test_required_fields(self, field):
        data = {**VALID_FORM, field: "  "}

        with pytest.raises(ValidationError, match=field):
            parse_contact_form(data)

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="email"):
            parse_contact_form({**VALID_FORM, "email": "not-an-email"})

    def test_invalid_mobile(self):
        with pytest.raises(ValidationError, match="mobile"):
            parse_contact_form({**VALID_FORM, "mobile": "call me"})

    def test_mobile_is_optional(self):
        data = {k: v for k, v in VALID_FORM.items() if k != "mobile"}

        assert parse_contact_form(data).mobile == ""

    def test_empty_input(self):
        with pytest.raises(ValidationError):
            parse_contact_form(None)


class TestForwardSubmission:
    """Forwarding to the configured form endpoint."""

    def test_disabled_without_url(self):
        with patch("web.contact.requests.post") as mock_post:
            assert forward_submission(ContactSubmission("A", "a@example.com", "Hi"), url="") is False

        mock_post.assert_not_called()

    def test_posts_form_fields(self):
        submission = parse_contact_form(VALID_FORM)
        with patch("web.contact.requests.post", return_value=MagicMock()) as mock_post:
            assert forward_submission(submission, url="https://forms.example.com/shivaya") is True

        args, kwargs = mock_post.call_args
        assert args == ("https://forms.example.com/shivaya",)
        assert kwargs["data"]["email"] == "asha@example.com"
        assert kwargs["data"]["product_interest"] == "Astral Gold Pen"
        assert kwargs["data"]["_captcha"] == "false"
        assert "_subject" in kwargs["data"]


class TestContactEndpoint:
    """Test POST /api/contact."""

    def test_accepts_json(self, client):
        with patch("web.api.forward_submission", return_value=False):
            response = client.post("/api/contact", json=VALID_FORM)

        assert response.status_code == 200
        assert response.get_json() == {"success": True, "forwarded": False}

    def test_accepts_form_encoding(self, client):
        with patch("web.api.forward_submission", return_value=True):
            response = client.post("/api/contact", data=VALID_FORM)

        assert response.get_json()["forwarded"] is True

    def test_validation_error(self, client):
        response = client.post("/api/contact", json={"name": "Asha"})

        assert response.status_code == 400
        assert "email" in response.get_json()["error"]

    def test_forwarding_failure(self, client):
        with patch("web.api.forward_submission", side_effect=requests.ConnectionError("down")):
            response = client.post("/api/contact", json=VALID_FORM)

        assert response.status_code == 502
        assert response.get_json()["success"] is False
