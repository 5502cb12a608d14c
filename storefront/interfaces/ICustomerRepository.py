from abc import ABC, abstractmethod
from typing import List, Optional

from storefront.domain.schemas import CustomerCreate, CustomerRead, CustomerUpdate

class ICustomerRepository(ABC):
    @abstractmethod
    def create_customer(self, customer: CustomerCreate) -> CustomerRead:
        pass

    @abstractmethod
    def list_customers(self) -> List[CustomerRead]:
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[CustomerRead]:
        pass

    @abstractmethod
    def get_customer_by_email(self, email: str) -> Optional[CustomerRead]:
        pass

    @abstractmethod
    def update_customer(self, customer_id: int, updates: CustomerUpdate) -> Optional[CustomerRead]:
        pass

    @abstractmethod
    def delete_customer(self, customer_id: int) -> bool:
        pass
