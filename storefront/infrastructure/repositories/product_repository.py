import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import DependencyError
from storefront.domain.models import Product
from storefront.domain.schemas import ProductCreate, ProductRead, ProductUpdate
from storefront.infrastructure.database import SessionLocal
from storefront.interfaces.IProductRepository import IProductRepository

logger = logging.getLogger(__name__)

class PostgresProductRepository(IProductRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def create_product(self, product: ProductCreate) -> ProductRead:
        session = self.session_factory()
        try:
            new_product = Product(**product.model_dump())
            session.add(new_product)
            session.commit()
            session.refresh(new_product)
            return ProductRead.model_validate(new_product)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error creating product: {e}")
            raise DependencyError("Failed to create product") from e
        finally:
            session.close()

    def list_products(self) -> List[ProductRead]:
        session = self.session_factory()
        try:
            return [ProductRead.model_validate(p) for p in session.query(Product).order_by(Product.id).all()]
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to list products") from e
        finally:
            session.close()

    def get_product(self, product_id: int) -> Optional[ProductRead]:
        session = self.session_factory()
        try:
            product = session.get(Product, product_id)
            return ProductRead.model_validate(product) if product else None
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError(f"Failed to read product {product_id}") from e
        finally:
            session.close()

    def update_product(self, product_id: int, updates: ProductUpdate) -> Optional[ProductRead]:
        session = self.session_factory()
        try:
            product = session.get(Product, product_id)
            if product is None:
                return None
            for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(product, field, value)
            session.commit()
            session.refresh(product)
            return ProductRead.model_validate(product)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error updating product {product_id}: {e}")
            raise DependencyError(f"Failed to update product {product_id}") from e
        finally:
            session.close()

    def delete_product(self, product_id: int) -> bool:
        session = self.session_factory()
        try:
            product = session.get(Product, product_id)
            if product is None:
                return False
            session.delete(product)
            session.commit()
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error deleting product {product_id}: {e}")
            raise DependencyError(f"Failed to delete product {product_id}") from e
        finally:
            session.close()
