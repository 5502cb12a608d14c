import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload, sessionmaker

from storefront.core.errors import DependencyError
from storefront.domain.models import Order, OrderItem
from storefront.domain.schemas import (
    OrderCreate,
    OrderItemRead,
    OrderRead,
    OrderSummaryRead,
    OrderUpdate,
)
from storefront.infrastructure.database import SessionLocal
from storefront.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)


def _recalculate_total(order: Order) -> None:
    order.total_price = sum(
        (Decimal(item.unit_price) * item.quantity for item in order.order_items),
        Decimal("0"),
    )


class PostgresOrderRepository(IOrderRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def create_order(self, order: OrderCreate) -> OrderRead:
        session = self.session_factory()
        try:
            new_order = Order(**order.model_dump(exclude={"order_items"}))
            new_order.order_items = [OrderItem(**item.model_dump()) for item in order.order_items]
            session.add(new_order)
            session.commit()
            session.refresh(new_order)
            logger.info(f"Order {new_order.id} created for customer {new_order.customer_id} (total {new_order.total_price})")
            return OrderRead.model_validate(new_order)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error creating order: {e}")
            raise DependencyError("Failed to create order") from e
        finally:
            session.close()

    def list_orders(self, limit: int = 50) -> List[OrderSummaryRead]:
        """
        Latest orders without their line items.
        Ordered by created_at DESC (Newest first).
        """
        session = self.session_factory()
        try:
            orders = session.query(Order).order_by(desc(Order.created_at), desc(Order.id)).limit(limit).all()
            return [OrderSummaryRead.model_validate(o) for o in orders]
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to list orders") from e
        finally:
            session.close()

    def list_orders_with_items(self, limit: int = 50) -> List[OrderRead]:
        session = self.session_factory()
        try:
            orders = (
                session.query(Order)
                .options(selectinload(Order.order_items))
                .order_by(desc(Order.created_at), desc(Order.id))
                .limit(limit)
                .all()
            )
            return [OrderRead.model_validate(o) for o in orders]
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to list orders") from e
        finally:
            session.close()

    def get_order(self, order_id: int) -> Optional[OrderRead]:
        session = self.session_factory()
        try:
            order = session.get(Order, order_id)
            return OrderRead.model_validate(order) if order else None
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError(f"Failed to read order {order_id}") from e
        finally:
            session.close()

    def get_order_by_payment_id(self, payment_id: str) -> Optional[OrderRead]:
        if not payment_id:
            return None
        session = self.session_factory()
        try:
            order = (
                session.query(Order)
                .filter(Order.payment_id == payment_id)
                .order_by(desc(Order.id))
                .first()
            )
            return OrderRead.model_validate(order) if order else None
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to look up order by payment id") from e
        finally:
            session.close()

    def update_order(self, order_id: int, updates: OrderUpdate) -> Optional[OrderRead]:
        session = self.session_factory()
        try:
            order = session.get(Order, order_id)
            if order is None:
                return None
            for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(order, field, value)
            session.commit()
            session.refresh(order)
            logger.info(
                f"Order {order_id} updated: payment_status={order.payment_status} "
                f"order_status={order.order_status} payment_id={order.payment_id or '-'}"
            )
            return OrderRead.model_validate(order)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error updating order {order_id}: {e}")
            raise DependencyError(f"Failed to update order {order_id}") from e
        finally:
            session.close()

    def delete_order(self, order_id: int) -> bool:
        session = self.session_factory()
        try:
            order = session.get(Order, order_id)
            if order is None:
                return False
            session.delete(order)
            session.commit()
            logger.info(f"Order {order_id} deleted")
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error deleting order {order_id}: {e}")
            raise DependencyError(f"Failed to delete order {order_id}") from e
        finally:
            session.close()

    def update_item_quantity(self, item_id: int, quantity: int) -> Optional[OrderItemRead]:
        session = self.session_factory()
        try:
            item = session.get(OrderItem, item_id)
            if item is None:
                return None
            item.quantity = quantity
            session.flush()
            _recalculate_total(item.order)
            session.commit()
            session.refresh(item)
            return OrderItemRead.model_validate(item)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error updating order item {item_id}: {e}")
            raise DependencyError(f"Failed to update order item {item_id}") from e
        finally:
            session.close()

    def delete_item(self, item_id: int) -> bool:
        session = self.session_factory()
        try:
            item = session.get(OrderItem, item_id)
            if item is None:
                return False
            order = item.order
            order.order_items.remove(item)  # delete-orphan removes the row
            _recalculate_total(order)
            session.commit()
            logger.info(f"Order item {item_id} removed from order {order.id}")
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error deleting order item {item_id}: {e}")
            raise DependencyError(f"Failed to delete order item {item_id}") from e
        finally:
            session.close()
