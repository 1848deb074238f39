"""Admin API: product and category management, CSV import/export, catalog refresh."""

import base64
import binascii
import logging
import os
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from catalog.errors import ValidationError
from catalog.store import CategoryStore

from .api import get_product_store
from .config import ADMIN_PASS_ENV, ADMIN_USER_ENV, EXPORT_FILENAME

__all__ = ["admin", "require_basic_auth"]

logger = logging.getLogger(__name__)

admin = Blueprint("admin", __name__, url_prefix="/api/admin")


def get_category_store() -> CategoryStore:
    return current_app.extensions["category_store"]


# ---------- BASIC AUTH ----------


def _basic_auth_creds() -> Tuple[Optional[str], Optional[str]]:
    """Get admin credentials from environment."""
    return os.getenv(ADMIN_USER_ENV), os.getenv(ADMIN_PASS_ENV)


def _unauthorized() -> Response:
    return Response(
        "Authentication required",
        401,
        {"WWW-Authenticate": 'Basic realm="Admin"'},
    )


@admin.before_request
def require_basic_auth() -> Optional[Response]:
    """
    Enforce HTTP Basic Auth for admin routes.
    Skips enforcement if credentials are not configured (ADMIN_USER/ADMIN_PASS unset).
    """
    user, password = _basic_auth_creds()
    if not user or not password:
        return None  # auth disabled

    header = request.headers.get("Authorization", "")
    if not header.startswith("Basic "):
        return _unauthorized()

    try:
        decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
        username, passwd = decoded.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return _unauthorized()

    if username == user and passwd == password:
        return None
    return _unauthorized()


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ---------- PRODUCTS ----------


@admin.route("/products", methods=["POST"])
def create_product() -> Tuple[Response, int]:
    product = get_product_store().create(_json_body())
    return jsonify({"product": product.to_dict()}), 201


@admin.route("/products/<int:product_id>", methods=["PUT"])
def update_product(product_id: int) -> Response:
    product = get_product_store().update(product_id, _json_body())
    return jsonify({"product": product.to_dict()})


@admin.route("/products/<int:product_id>", methods=["DELETE"])
def delete_product(product_id: int) -> Response:
    get_product_store().delete(product_id)
    return jsonify({"success": True, "id": product_id})


@admin.route("/import", methods=["POST"])
def import_products() -> Response:
    """Bulk import a CSV body (raw text or a multipart ``file`` field).

    ``?replace=true`` replaces the whole catalog instead of appending.
    """
    upload = request.files.get("file")
    try:
        csv_text = upload.read().decode("utf-8-sig") if upload else request.get_data(as_text=True)
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded") from None
    if not csv_text.strip():
        raise ValidationError("No CSV data provided")

    replace = request.args.get("replace", "false").lower() == "true"
    count = get_product_store().import_csv(csv_text, replace_existing=replace)
    return jsonify({"success": True, "imported": count, "replaced": replace})


@admin.route("/export", methods=["GET"])
def export_products() -> Response:
    return Response(
        get_product_store().export_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@admin.route("/refresh", methods=["POST"])
def refresh_catalog() -> Tuple[Response, int]:
    """Re-run catalog conversion from the JSON sources."""
    store = get_product_store()
    if not store.refresh():
        return jsonify({"success": False, "error": store.last_error}), 502
    return jsonify({"success": True, "total_products": len(store.get_all())}), 200


# ---------- CATEGORIES ----------


@admin.route("/categories", methods=["GET"])
def list_categories() -> Response:
    return jsonify({"categories": [c.to_row() for c in get_category_store().get_all()]})


@admin.route("/categories", methods=["POST"])
def create_category() -> Tuple[Response, int]:
    category = get_category_store().create(_json_body())
    return jsonify({"category": category.to_row()}), 201


@admin.route("/categories/<int:category_id>", methods=["PUT"])
def update_category(category_id: int) -> Response:
    category = get_category_store().update(category_id, _json_body())
    return jsonify({"category": category.to_row()})


@admin.route("/categories/<int:category_id>", methods=["DELETE"])
def delete_category(category_id: int) -> Response:
    get_category_store().delete(category_id)
    return jsonify({"success": True, "id": category_id})
