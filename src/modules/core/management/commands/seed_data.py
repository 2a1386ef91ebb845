from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.customers.dtos import AddressDTO, CreateCustomerDTO
from modules.customers.exceptions import CustomerAlreadyExists
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.services import CustomerService
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InsufficientStock
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.dtos import CreateProductDTO
from modules.products.exceptions import ProductAlreadyExists
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

SEED_CUSTOMERS = [
    ("Ana", "Souza", "ana@example.com", "Lisbon", "PT"),
    ("Bruno", "Lima", "bruno@example.com", "Porto", "PT"),
    ("Carla", "Mendes", "carla@example.com", "Madrid", "ES"),
    ("Daniel", "Costa", "daniel@example.com", "Berlin", "DE"),
    ("Helena", "Ferreira", "helena@example.com", "Paris", "FR"),
]

SEED_CATALOG = [
    ("ELEC-001", 'Monitor 27"', "electronics", Decimal("1299.90")),
    ("ELEC-002", "Mechanical Keyboard", "electronics", Decimal("399.90")),
    ("ELEC-003", "Gaming Mouse", "electronics", Decimal("249.90")),
    ("FURN-001", "Office Desk", "furniture", Decimal("899.00")),
    ("FURN-002", "Ergonomic Chair", "furniture", Decimal("1499.00")),
    ("OFF-001", "A4 Paper", "office", Decimal("29.90")),
    ("OFF-002", "Blue Pen", "office", Decimal("4.90")),
    ("OFF-003", "Notebook", "office", Decimal("19.90")),
]


class Command(BaseCommand):
    help = "Seed database with development data through the service layer."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20)
        parser.add_argument("--seed", type=int, default=42)

    def handle(self, *args, **options):
        random.seed(options["seed"])
        self.stdout.write("Seeding development data...")

        customers = self._seed_customers()
        products = self._seed_products()
        orders_created = self._seed_orders(customers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_customers(self) -> list[Customer]:
        service = CustomerService(repository=CustomerDjangoRepository())
        customers: list[Customer] = []
        for first_name, last_name, email, city, country in SEED_CUSTOMERS:
            dto = CreateCustomerDTO(
                first_name=first_name,
                last_name=last_name,
                email=email,
                address=AddressDTO(city=city, country=country),
            )
            try:
                customers.append(service.create_customer(dto))
            except CustomerAlreadyExists:
                customers.append(service.get_customer_by_email(email))
        return customers

    def _seed_products(self) -> list[Product]:
        service = ProductService(repository=ProductDjangoRepository())
        products: list[Product] = []
        for sku, name, category, price in SEED_CATALOG:
            dto = CreateProductDTO(
                sku=sku,
                name=name,
                category=category,
                price=price,
                stock_quantity=random.randint(10, 200),
            )
            try:
                products.append(service.create_product(dto))
            except ProductAlreadyExists:
                products.append(service.get_product_by_sku(sku))
        return products

    def _seed_orders(
        self, customers: list[Customer], products: list[Product], count: int
    ) -> int:
        if not customers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers/products)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        statuses = [s for s in OrderStatus.values if s != OrderStatus.PENDING]
        created = 0
        for _ in range(count):
            picked = random.sample(products, k=random.randint(1, min(4, len(products))))
            items = [(product.id, random.randint(1, 3)) for product in picked]
            try:
                order = service.place_order(random.choice(customers).id, items)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            if random.random() < 0.6:
                service.update_status(order.id, random.choice(statuses))
            created += 1
        return created
