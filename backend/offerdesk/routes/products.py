# backend/offerdesk/routes/products.py
"""
Product catalog routes.

Create and update are multipart: scalar fields in the form, images under
product_images (1-10 files on create, optional on update).
"""
from flask import Blueprint, current_app, request

from ..responses import error_response, internal_error, success_response
from ..services import catalog_service
from ..services.storage_service import get_image_store
from ..validation import NotFoundError, ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _uploaded_images():
    return [f for f in request.files.getlist("product_images") if f and f.filename]


@products_bp.post("")
def create_product_route():
    try:
        product = catalog_service.create_product(request.form, _uploaded_images(), get_image_store())
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return internal_error()
    return success_response(product.to_dict(), "Product added successfully", 201)


@products_bp.get("")
def list_products_route():
    return success_response([p.to_dict() for p in catalog_service.list_products()])


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = catalog_service.get_product(product_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(product.to_dict())


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    try:
        product = catalog_service.update_product(
            product_id, request.form, _uploaded_images(), get_image_store()
        )
    except NotFoundError as e:
        return error_response(str(e), 404)
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return internal_error()
    return success_response(product.to_dict(), "Product updated successfully")


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        name = catalog_service.delete_product(product_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return internal_error()
    return success_response(message=f'Product "{name}" deleted successfully')
