import logging
from typing import List, Optional

from argon2 import PasswordHasher
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import DependencyError, ValidationError
from storefront.domain.models import Customer
from storefront.domain.schemas import CustomerCreate, CustomerRead, CustomerUpdate
from storefront.infrastructure.database import SessionLocal
from storefront.interfaces.ICustomerRepository import ICustomerRepository

logger = logging.getLogger(__name__)

password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Returns an argon2id PHC string (``$argon2id$v=19$...``)."""
    return password_hasher.hash(password)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class PostgresCustomerRepository(ICustomerRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def create_customer(self, customer: CustomerCreate) -> CustomerRead:
        session = self.session_factory()
        try:
            data = customer.model_dump(exclude={"password"})
            data["email"] = _normalize_email(data["email"])
            new_customer = Customer(**data, password_hash=hash_password(customer.password))
            session.add(new_customer)
            session.commit()
            session.refresh(new_customer)
            logger.info(f"Customer {new_customer.id} created ({new_customer.email})")
            return CustomerRead.model_validate(new_customer)
        except IntegrityError as e:
            session.rollback()
            raise ValidationError(f"A customer with email {customer.email} already exists", status_code=409) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error creating customer: {e}")
            raise DependencyError("Failed to create customer") from e
        finally:
            session.close()

    def list_customers(self) -> List[CustomerRead]:
        session = self.session_factory()
        try:
            return [CustomerRead.model_validate(c) for c in session.query(Customer).order_by(Customer.id).all()]
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to list customers") from e
        finally:
            session.close()

    def get_customer(self, customer_id: int) -> Optional[CustomerRead]:
        session = self.session_factory()
        try:
            customer = session.get(Customer, customer_id)
            return CustomerRead.model_validate(customer) if customer else None
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError(f"Failed to read customer {customer_id}") from e
        finally:
            session.close()

    def get_customer_by_email(self, email: str) -> Optional[CustomerRead]:
        session = self.session_factory()
        try:
            customer = session.query(Customer).filter(Customer.email == _normalize_email(email)).first()
            return CustomerRead.model_validate(customer) if customer else None
        except SQLAlchemyError as e:
            logger.error(f"DB Read Error: {e}")
            raise DependencyError("Failed to look up customer by email") from e
        finally:
            session.close()

    def update_customer(self, customer_id: int, updates: CustomerUpdate) -> Optional[CustomerRead]:
        session = self.session_factory()
        try:
            customer = session.get(Customer, customer_id)
            if customer is None:
                return None
            changes = updates.model_dump(exclude_unset=True, exclude_none=True)
            if "password" in changes:
                customer.password_hash = hash_password(changes.pop("password"))
            if "email" in changes:
                changes["email"] = _normalize_email(changes["email"])
            for field, value in changes.items():
                setattr(customer, field, value)
            session.commit()
            session.refresh(customer)
            return CustomerRead.model_validate(customer)
        except IntegrityError as e:
            session.rollback()
            raise ValidationError(f"A customer with email {updates.email} already exists", status_code=409) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error updating customer {customer_id}: {e}")
            raise DependencyError(f"Failed to update customer {customer_id}") from e
        finally:
            session.close()

    def delete_customer(self, customer_id: int) -> bool:
        session = self.session_factory()
        try:
            customer = session.get(Customer, customer_id)
            if customer is None:
                return False
            session.delete(customer)
            session.commit()
            logger.info(f"Customer {customer_id} deleted")
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"DB Error deleting customer {customer_id}: {e}")
            raise DependencyError(f"Failed to delete customer {customer_id}") from e
        finally:
            session.close()
