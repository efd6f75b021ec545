"""FastAPI dependency injection — collaborator snapshots and domain-error responses."""
from typing import Iterable

from fastapi import HTTPException, Request, status

from simshop.services.catalog_store import ShippingZoneStore
from simshop.services.checkout_service import CheckoutService
from simshop.services.errors import CatalogLookupError, DomainError


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout


def get_zone_store(request: Request) -> ShippingZoneStore:
    return request.app.state.checkout.zones


def domain_error(errors: Iterable[DomainError], message: str) -> HTTPException:
    """400 carrying every domain error; the storefront maps ``kind`` to its own copy."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "errors": [e.to_dict() for e in errors]},
    )


def not_found(exc: CatalogLookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": str(exc)})
