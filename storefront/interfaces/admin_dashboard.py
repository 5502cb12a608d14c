from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

router = APIRouter(prefix="/admin", tags=["admin"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.get("/orders", response_class=HTMLResponse)
def read_orders(request: Request, limit: int = 20):
    # Latest orders first, each with its line items
    orders = request.app.state.order_repo.list_orders_with_items(limit=limit)
    return templates.TemplateResponse(request, "dashboard.html", {"orders": orders})
