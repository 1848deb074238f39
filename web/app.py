"""Flask web app for the Shivaya Solutions storefront.

Serves the public product API and the admin API on top of a shared
ProductStore/CategoryStore pair.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv
from flask import Flask, Response, jsonify

from catalog.errors import (
    CatalogError,
    CategoryNotFoundError,
    ProductNotFoundError,
    StorageError,
    ValidationError,
)
from catalog.logging_config import setup_logging
from catalog.storage import create_storage
from catalog.store import CategoryStore, ProductStore

from .admin import admin
from .api import api
from .config import FLASK_DEBUG, FLASK_HOST, FLASK_PORT

__all__ = ["create_app"]

# Load environment variables from .env file (explicitly specify path)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> Tuple[Response, int]:
    return jsonify({"success": False, "error": message}), status


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ProductNotFoundError)
    @app.errorhandler(CategoryNotFoundError)
    def not_found(e: CatalogError) -> Tuple[Response, int]:
        return _error(str(e), 404)

    @app.errorhandler(ValidationError)
    def bad_request(e: ValidationError) -> Tuple[Response, int]:
        return _error(str(e), 400)

    @app.errorhandler(StorageError)
    def storage_unavailable(e: StorageError) -> Tuple[Response, int]:
        logger.error("Storage failure: %s", e)
        return _error("Product storage is unavailable", 503)


def create_app(
    store: Optional[ProductStore] = None,
    category_store: Optional[CategoryStore] = None,
) -> Flask:
    """Build the app; stores default to the configured storage backend."""
    app = Flask(__name__)

    if store is None or category_store is None:
        storage = create_storage()
        store = store or ProductStore(storage)
        category_store = category_store or CategoryStore(storage)

    app.extensions["product_store"] = store
    app.extensions["category_store"] = category_store

    app.register_blueprint(api)
    app.register_blueprint(admin)
    _register_error_handlers(app)

    @app.route("/api/health", methods=["GET"])
    def health() -> Response:
        return jsonify(
            {
                "status": "ok",
                "products_loaded": store.initialize(),
                "last_updated": store.last_saved(),
                "error": store.last_error,
            }
        )

    return app


if __name__ == "__main__":
    setup_logging()
    create_app().run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
