from abc import ABC, abstractmethod
from typing import List, Optional

from storefront.domain.schemas import (
    OrderCreate,
    OrderItemRead,
    OrderRead,
    OrderSummaryRead,
    OrderUpdate,
)

class IOrderRepository(ABC):
    @abstractmethod
    def create_order(self, order: OrderCreate) -> OrderRead:
        pass

    @abstractmethod
    def list_orders(self, limit: int = 50) -> List[OrderSummaryRead]:
        pass

    @abstractmethod
    def list_orders_with_items(self, limit: int = 50) -> List[OrderRead]:
        pass

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[OrderRead]:
        pass

    @abstractmethod
    def get_order_by_payment_id(self, payment_id: str) -> Optional[OrderRead]:
        pass

    @abstractmethod
    def update_order(self, order_id: int, updates: OrderUpdate) -> Optional[OrderRead]:
        pass

    @abstractmethod
    def delete_order(self, order_id: int) -> bool:
        pass

    @abstractmethod
    def update_item_quantity(self, item_id: int, quantity: int) -> Optional[OrderItemRead]:
        pass

    @abstractmethod
    def delete_item(self, item_id: int) -> bool:
        pass
