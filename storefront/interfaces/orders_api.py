from typing import List, Optional

from fastapi import APIRouter, Body, HTTPException, Request, Response

from storefront.domain.schemas import (
    OrderCreate,
    OrderItemRead,
    OrderItemUpdate,
    OrderRead,
    OrderSummaryRead,
    OrderUpdate,
)

router = APIRouter(tags=["orders"])


def _repo(request: Request):
    return request.app.state.order_repo


@router.post("/orders", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, request: Request):
    customer_repo = request.app.state.customer_repo
    if customer_repo.get_customer(payload.customer_id) is None:
        raise HTTPException(status_code=400, detail=f"Customer {payload.customer_id} does not exist")
    return _repo(request).create_order(payload)


@router.get("/orders", response_model=List[OrderSummaryRead])
def list_orders(request: Request, limit: int = 50):
    return _repo(request).list_orders(limit=limit)


@router.get("/orders/{order_id}", response_model=OrderRead)
def get_order(order_id: int, request: Request):
    order = _repo(request).get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.patch("/orders/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderUpdate, request: Request):
    order = _repo(request).update_order(order_id, payload)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(order_id: int, request: Request):
    if not _repo(request).delete_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=204)


# ---------------------------------------------------------
# ORDER ITEMS
# ---------------------------------------------------------
@router.patch("/order-items/{item_id}", response_model=Optional[OrderItemRead])
def patch_order_item(item_id: int, request: Request, payload: Optional[OrderItemUpdate] = Body(None)):
    """
    ``{"quantity": n}`` changes the line; an empty body deletes it.
    Either way the order total is recalculated.
    """
    repo = _repo(request)
    if payload is None:
        if not repo.delete_item(item_id):
            raise HTTPException(status_code=404, detail="Order item not found")
        return Response(status_code=204)

    item = repo.update_item_quantity(item_id, payload.quantity)
    if item is None:
        raise HTTPException(status_code=404, detail="Order item not found")
    return item
