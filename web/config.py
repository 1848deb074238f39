"""Centralized configuration for the storefront web app."""

import os
from pathlib import Path

# Determine project root (parent of 'web' directory)
_THIS_DIR = Path(__file__).parent
_PROJECT_ROOT = _THIS_DIR.parent

# Flask app settings (allow env overrides; default debug off for safety)
# Hosting platforms set PORT dynamically; fall back to FLASK_PORT or 5000 for local.
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

# Admin credentials for the /api/admin endpoints (auth disabled when unset)
ADMIN_USER_ENV = "ADMIN_USER"
ADMIN_PASS_ENV = "ADMIN_PASS"

# Contact form submissions are forwarded here when set (e.g. a form-to-email service)
CONTACT_FORWARD_URL = os.getenv("CONTACT_FORWARD_URL", "")
CONTACT_SUBJECT = os.getenv("CONTACT_SUBJECT", "New Contact Form Submission - Shivaya Solutions")
CONTACT_TIMEOUT = int(os.getenv("CONTACT_TIMEOUT", "10"))

# Filename offered for admin CSV exports
EXPORT_FILENAME = "shivaya-products.csv"

# Upper bound on products returned by one listing call
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "500"))
