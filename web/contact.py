"""Contact form handling and product inquiry messages."""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

import requests

from catalog.errors import ValidationError
from catalog.models import Product

from .config import CONTACT_FORWARD_URL, CONTACT_SUBJECT, CONTACT_TIMEOUT

__all__ = ["ContactSubmission", "parse_contact_form", "forward_submission", "build_inquiry_message"]

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MOBILE_RE = re.compile(r"^\+?[\d\s\-()]{7,20}$")


@dataclass
class ContactSubmission:
    name: str
    email: str
    message: str
    mobile: str = ""
    product_interest: str = ""


def parse_contact_form(data: Optional[Mapping[str, Any]]) -> ContactSubmission:
    """Validate raw form/JSON input.

    Raises:
        ValidationError: A required field is missing or malformed.
    """
    data = data or {}

    def field(*keys: str) -> str:
        for key in keys:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return ""

    submission = ContactSubmission(
        name=field("name"),
        email=field("email"),
        message=field("message"),
        mobile=field("mobile"),
        product_interest=field("product_interest", "productInterest"),
    )

    missing = [k for k in ("name", "email", "message") if not getattr(submission, k)]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    if not _EMAIL_RE.match(submission.email):
        raise ValidationError("Please enter a valid email address")
    if submission.mobile and not _MOBILE_RE.match(submission.mobile):
        raise ValidationError("Please enter a valid mobile number")
    return submission


def forward_submission(submission: ContactSubmission, url: str = CONTACT_FORWARD_URL) -> bool:
    """POST the submission to the configured form endpoint.

    Returns:
        True if forwarded, False when no endpoint is configured.

    Raises:
        requests.RequestException: The endpoint rejected or did not answer.
    """
    if not url:
        logger.info("Contact form received from %s (forwarding disabled)", submission.email)
        return False

    payload: Dict[str, str] = {k: v for k, v in asdict(submission).items() if v}
    payload.update({"_subject": CONTACT_SUBJECT, "_template": "table", "_captcha": "false"})

    response = requests.post(
        url,
        data=payload,
        headers={"Accept": "application/json"},
        timeout=CONTACT_TIMEOUT,
    )
    response.raise_for_status()
    logger.info("Forwarded contact form from %s", submission.email)
    return True


def build_inquiry_message(product: Product) -> str:
    """Prefilled contact-form message asking about a product."""
    lines = [
        "Hello,",
        "",
        "I am interested in the following product:",
        "",
        f"Product Name: {product.name}",
        f"Category: {product.category}",
    ]
    if product.subcategory:
        lines.append(f"Subcategory: {product.subcategory}")
    if product.series:
        lines.append(f"Series: {product.series}")
    if product.material:
        lines.append(f"Material: {product.material}")
    capacity = product.extra.get("capacity")
    if capacity not in (None, ""):
        lines.append(f"Capacity: {capacity}L")
    if product.dimensions:
        lines.append(f"Dimensions: {product.dimensions}")
    if product.model:
        lines.append(f"Model: {product.model}")
    if product.color:
        lines.append(f"Color: {product.color}")

    lines += [
        "",
        f"Description: {product.description}",
        "",
        "Please provide me with the following information:",
        "- Pricing details",
        "- Minimum order quantity",
        "- Availability and delivery time",
        "- Technical specifications (if any)",
        "- Bulk pricing options",
        "",
        "Thank you for your time. I look forward to hearing from you.",
        "",
        "Best regards",
    ]
    return "\n".join(lines)
