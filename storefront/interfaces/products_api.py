from typing import List

from fastapi import APIRouter, HTTPException, Request, Response

from storefront.domain.schemas import ProductCreate, ProductRead, ProductUpdate

router = APIRouter(prefix="/products", tags=["products"])


def _repo(request: Request):
    return request.app.state.product_repo


@router.post("", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, request: Request):
    return _repo(request).create_product(payload)


@router.get("", response_model=List[ProductRead])
def list_products(request: Request):
    return _repo(request).list_products()


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, request: Request):
    product = _repo(request).get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, request: Request):
    product = _repo(request).update_product(product_id, payload)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, request: Request):
    if not _repo(request).delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)
