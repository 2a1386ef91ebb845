"""Customer service layer (Use Cases).

Customers are an external collaborator of the order workflow: this
service only creates them and looks them up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.models import Customer

if TYPE_CHECKING:
    from modules.customers.dtos import CreateCustomerDTO
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_customer(self, dto: CreateCustomerDTO) -> Customer:
        """Create a new customer.

        Raises:
            CustomerAlreadyExists: if the email is already registered.
        """
        log = logger.bind(email=dto.email)

        if self._repo.get_by_email(dto.email):
            log.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        customer = Customer(
            first_name=dto.first_name,
            last_name=dto.last_name,
            email=dto.email,
            phone=dto.phone,
            street=dto.address.street,
            city=dto.address.city,
            state=dto.address.state,
            zip_code=dto.address.zip_code,
            country=dto.address.country,
        )
        try:
            with transaction.atomic():
                customer = self._repo.save(customer)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email.
            log.warning("customer.duplicate_email", race=True)
            raise CustomerAlreadyExists("Email already registered.") from exc

        log.info("customer.created", customer_id=str(customer.id))
        return customer

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_customer(self, id: str) -> Customer:
        """Raises ``CustomerNotFound`` if the customer does not exist."""
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(id)
        return customer

    def get_customer_by_email(self, email: str) -> Customer:
        """Raises ``CustomerNotFound`` if no customer has this email."""
        customer = self._repo.get_by_email(email)
        if not customer:
            raise CustomerNotFound(email, f"Customer with email {email} not found.")
        return customer

    def list_customers(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[Customer]:
        return self._repo.list(filters)
