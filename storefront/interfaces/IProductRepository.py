from abc import ABC, abstractmethod
from typing import List, Optional

from storefront.domain.schemas import ProductCreate, ProductRead, ProductUpdate

class IProductRepository(ABC):
    @abstractmethod
    def create_product(self, product: ProductCreate) -> ProductRead:
        pass

    @abstractmethod
    def list_products(self) -> List[ProductRead]:
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[ProductRead]:
        pass

    @abstractmethod
    def update_product(self, product_id: int, updates: ProductUpdate) -> Optional[ProductRead]:
        pass

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        pass
