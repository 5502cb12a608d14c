from abc import ABC, abstractmethod
from typing import List, Optional

from storefront.domain.schemas import CheckoutLine, CheckoutSessionResponse, SessionStatus

class IPaymentProcessor(ABC):
    """Server-side view of the hosted payment provider."""

    @abstractmethod
    def create_checkout_session(
        self,
        cart: List[CheckoutLine],
        customer_id: int,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> CheckoutSessionResponse:
        pass

    @abstractmethod
    def retrieve_session(self, session_id: str) -> SessionStatus:
        pass
