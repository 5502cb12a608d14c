import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request, Response

from storefront.domain.schemas import CustomerCreate, CustomerRead, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])
logger = logging.getLogger(__name__)


def _repo(request: Request):
    return request.app.state.customer_repo


@router.post("", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, request: Request):
    return _repo(request).create_customer(payload)


@router.get("", response_model=List[CustomerRead])
def list_customers(request: Request):
    return _repo(request).list_customers()


@router.get("/email/{email}", response_model=CustomerRead)
def get_customer_by_email(email: str, request: Request):
    """404 here is how the checkout client learns it must create the customer."""
    customer = _repo(request).get_customer_by_email(email)
    if customer is None:
        logger.info(f"No customer with email {email}")
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, request: Request):
    customer = _repo(request).get_customer(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, request: Request):
    customer = _repo(request).update_customer(customer_id, payload)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.delete("/{customer_id}", status_code=204)
def delete_customer(customer_id: int, request: Request):
    if not _repo(request).delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return Response(status_code=204)
