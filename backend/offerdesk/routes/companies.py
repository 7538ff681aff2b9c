# backend/offerdesk/routes/companies.py
"""
Company (brand / manufacturer) routes.

Create and update are multipart: company_name plus an optional company_logo file.
Deleting a company requires the admin PIN and removes its products, their
ledgers and every offer attached to them.
"""
from flask import Blueprint, current_app, request

from ..decorators import require_admin_pin
from ..responses import error_response, internal_error, success_response
from ..services import catalog_service
from ..services.storage_service import get_image_store
from ..validation import NotFoundError, ValidationError

companies_bp = Blueprint("companies", __name__, url_prefix="/api/companies")


@companies_bp.post("")
def create_company_route():
    try:
        company = catalog_service.create_company(
            request.form, request.files.get("company_logo"), get_image_store()
        )
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to create company")
        return internal_error()
    return success_response(company.to_dict(), "Company added successfully", 201)


@companies_bp.get("")
def list_companies_route():
    companies = catalog_service.list_companies()
    return success_response([c.to_dict() for c in companies])


@companies_bp.get("/<int:company_id>")
def get_company_route(company_id: int):
    try:
        company = catalog_service.get_company(company_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(company.to_dict())


@companies_bp.put("/<int:company_id>")
def update_company_route(company_id: int):
    try:
        company = catalog_service.update_company(
            company_id, request.form, request.files.get("company_logo"), get_image_store()
        )
    except NotFoundError as e:
        return error_response(str(e), 404)
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to update company")
        return internal_error()
    return success_response(company.to_dict(), "Company updated successfully")


@companies_bp.delete("/<int:company_id>")
@require_admin_pin(aliases=("pin",))
def delete_company_route(company_id: int):
    try:
        name = catalog_service.delete_company(company_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to delete company")
        return internal_error()
    current_app.logger.info("company %s (%s) deleted", company_id, name)
    return success_response(message=f'Company "{name}" deleted successfully')
