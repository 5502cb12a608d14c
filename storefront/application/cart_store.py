import json
import logging
from decimal import Decimal
from typing import List, Protocol

from pydantic import ValidationError as PydanticValidationError

from storefront.domain.cart import CartLine, calculate_total_price
from storefront.interfaces.IKeyValueStore import IKeyValueStore

logger = logging.getLogger(__name__)

CART_KEY = "cart"
QUANTITY_CHOICES = range(1, 6)  # what the cart page offers


class ProductLike(Protocol):
    id: int
    name: str
    price: Decimal


class CartStore:
    """
    The shopper's cart for one client session.

    Every mutation is written straight through to ``storage`` so a restarted
    client picks up where it left off.
    """

    def __init__(self, storage: IKeyValueStore, key: str = CART_KEY):
        self.storage = storage
        self.key = key
        self._lines: List[CartLine] = self._load()

    def _load(self) -> List[CartLine]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            return [CartLine.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, PydanticValidationError) as e:
            logger.warning(f"Stored cart is unreadable ({e}); starting with an empty cart")
            return []

    def _persist(self) -> None:
        payload = [line.model_dump(mode="json") for line in self._lines]
        self.storage.set(self.key, json.dumps(payload))

    @property
    def lines(self) -> List[CartLine]:
        return [line.model_copy() for line in self._lines]

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def total_price(self) -> Decimal:
        return calculate_total_price(self._lines)

    def add_to_cart(self, product: ProductLike) -> CartLine:
        for line in self._lines:
            if line.product_id == product.id:
                line.quantity += 1
                break
        else:
            line = CartLine(
                product_id=product.id,
                name=product.name,
                price=Decimal(product.price),
                quantity=1,
                description=getattr(product, "description", "") or "",
                image=getattr(product, "image", "") or "",
            )
            self._lines.append(line)
        self._persist()
        return line.model_copy()

    def remove_from_cart(self, product_id: int) -> None:
        remaining = [line for line in self._lines if line.product_id != product_id]
        if len(remaining) == len(self._lines):
            return
        self._lines = remaining
        self._persist()

    def set_quantity(self, product_id: int, quantity: int) -> None:
        # Stored as given; only flagged when outside what the cart page offers.
        if quantity not in QUANTITY_CHOICES:
            logger.warning(f"Quantity {quantity} for product {product_id} is outside 1..5")
        for line in self._lines:
            if line.product_id == product_id:
                line.quantity = quantity
                self._persist()
                return

    def clear(self) -> None:
        self._lines = []
        self._persist()
