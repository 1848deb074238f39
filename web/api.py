"""Public storefront API: product browsing, search, inquiries and contact form."""

import logging
from typing import Any, Dict, Optional, Tuple, Union

import requests
from flask import Blueprint, Response, current_app, jsonify, request

from catalog.errors import ProductNotFoundError, ValidationError
from catalog.store import ProductStore

from .config import MAX_PAGE_SIZE
from .contact import build_inquiry_message, forward_submission, parse_contact_form

__all__ = ["api", "get_product_store"]

logger = logging.getLogger(__name__)

# Create blueprint for API
api = Blueprint("api", __name__, url_prefix="/api")


def get_product_store() -> ProductStore:
    return current_app.extensions["product_store"]


def _parse_bool_arg(name: str) -> Optional[bool]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationError(f"Invalid value for '{name}': {value}")


def _parse_float_arg(name: str) -> Optional[float]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"Invalid number for '{name}': {value}") from None


def _parse_int_arg(name: str, default: int) -> int:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f"Invalid integer for '{name}': {value}") from None
    if number < 0:
        raise ValidationError(f"'{name}' must not be negative")
    return number


@api.route("/products", methods=["GET"])
def list_products() -> Response:
    """List products with optional search and filters.

    Query params: q, category, subcategory, in_stock, min_price, max_price,
    limit, offset.
    """
    store = get_product_store()

    products = store.search(request.args.get("q", ""))
    products = store.filter(
        products,
        category=request.args.get("category") or None,
        subcategory=request.args.get("subcategory") or None,
        in_stock=_parse_bool_arg("in_stock"),
        min_price=_parse_float_arg("min_price"),
        max_price=_parse_float_arg("max_price"),
    )

    offset = _parse_int_arg("offset", 0)
    limit = min(_parse_int_arg("limit", MAX_PAGE_SIZE), MAX_PAGE_SIZE)
    page = products[offset : offset + limit]

    body: Dict[str, Any] = {
        "products": [p.to_dict() for p in page],
        "count": len(products),
        "offset": offset,
        "limit": limit,
    }
    if not products and store.last_error:
        body["error"] = store.last_error
    return jsonify(body)


@api.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id: int) -> Response:
    product = get_product_store().get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return jsonify({"product": product.to_dict()})


@api.route("/products/<int:product_id>/inquiry", methods=["GET"])
def product_inquiry(product_id: int) -> Response:
    """Prefilled contact-form message for a product."""
    product = get_product_store().get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return jsonify({"product_interest": product.name, "message": build_inquiry_message(product)})


@api.route("/categories", methods=["GET"])
def list_categories() -> Response:
    """Distinct product category strings with product counts."""
    counts = get_product_store().stats()["products_by_category"]
    return jsonify(
        {"categories": [{"name": name, "count": counts[name]} for name in sorted(counts)]}
    )


@api.route("/stats", methods=["GET"])
def stats() -> Response:
    return jsonify(get_product_store().stats())


@api.route("/contact", methods=["POST"])
def contact() -> Union[Response, Tuple[Response, int]]:
    """Accept a contact form submission (JSON or form-encoded)."""
    data = request.get_json(silent=True) if request.is_json else request.form
    submission = parse_contact_form(data)

    try:
        forwarded = forward_submission(submission)
    except requests.RequestException as e:
        logger.error("Failed to forward contact form: %s", e)
        return jsonify({"success": False, "error": "Could not send your message, please try again later."}), 502

    return jsonify({"success": True, "forwarded": forwarded})
