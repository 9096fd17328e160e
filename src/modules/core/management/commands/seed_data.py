from __future__ import annotations

import random

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.core.exceptions import DomainError
from modules.orders.constants import OrderStatus, PaymentMethod, ShippingMethod
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

# Status paths walked from ``pending`` through the state machine.
STATUS_PATHS = [
    [],
    [OrderStatus.CONFIRMED],
    [OrderStatus.CONFIRMED, OrderStatus.SHIPPED],
    [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
    [OrderStatus.CANCELLED],
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=15,
            help="Number of demo orders to place through the checkout service.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="manager").exists():
            User.objects.create_user("manager", password="manager123", is_staff=True)
            created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        # Prices in centavos.
        catalog = [
            ("CEL-001", "Samsung Galaxy A55", "Celulares", 64999900),
            ("CEL-002", "Motorola Edge 50", "Celulares", 59999900),
            ("CEL-003", "iPhone 15 128GB", "Celulares", 189999900),
            ("NOT-001", "Notebook Lenovo IdeaPad 15\"", "Notebooks", 89999900),
            ("NOT-002", "MacBook Air M3", "Notebooks", 249999900),
            ("TV-001", "Smart TV LG 55\" 4K", "Televisores", 79999900),
            ("TV-002", "Smart TV Samsung 43\"", "Televisores", 49999900),
            ("AUD-001", "Auriculares JBL Tune 520BT", "Audio", 6999900),
            ("AUD-002", "Parlante Sony SRS-XB100", "Audio", 8999900),
            ("ACC-001", "Cargador USB-C 65W", "Accesorios", 2999900),
            ("ACC-002", "Mouse Logitech M170", "Accesorios", 1499900),
            ("ACC-003", "Teclado Redragon Kumara", "Accesorios", 4499900),
        ]
        for sku, name, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "description": category,
                    "price": price,
                    "stock": random.randint(10, 60),
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, products: list[Product], count: int) -> int:
        self.stdout.write("Creating orders...")
        if not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no products)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        customers = [
            ("Ana", "Gómez", "Córdoba", "Córdoba", "5000"),
            ("Bruno", "Fernández", "Rosario", "Santa Fe", "2000"),
            ("Carla", "López", "CABA", "Buenos Aires", "1425"),
            ("Diego", "Martínez", "Mendoza", "Mendoza", "5500"),
            ("Elena", "Sosa", "La Plata", "Buenos Aires", "1900"),
        ]

        orders_created = 0
        for i in range(count):
            first_name, last_name, city, province, zip_code = random.choice(customers)
            lines = random.sample(products, k=random.randint(1, min(3, len(products))))
            dto = CreateOrderDTO(
                email=f"{first_name.lower()}.{i + 1}@example.com",
                phone="+54 11 5555-0000",
                first_name=first_name,
                last_name=last_name,
                address=f"Av. Siempre Viva {100 + i}",
                city=city,
                province=province,
                zip_code=zip_code,
                shipping_method=random.choice(list(ShippingMethod)),
                payment_method=random.choice(list(PaymentMethod)),
                items=[
                    CreateOrderItemDTO(product_id=p.id, quantity=random.randint(1, 2))
                    for p in lines
                ],
                idempotency_key=f"seed-order-{i + 1}",
            )
            try:
                order = service.create_order(dto)
                for next_status in random.choice(STATUS_PATHS):
                    order = service.update_status(order.id, next_status)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipping order {i + 1}: {exc}"))
                continue
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
