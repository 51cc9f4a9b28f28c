from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.accounts.models import Account, Role
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.catalog.models import Category, Product
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderLineDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_catalog()
        accounts = self._seed_accounts()
        orders_created = self._seed_orders(accounts, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"accounts={len(accounts)}, "
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
        if not User.objects.filter(username="user").exists():
            User.objects.create_user("user", password="user123")
            created += 1
        return created

    def _seed_catalog(self) -> list[Product]:
        self.stdout.write("Creating catalog...")
        products: list[Product] = []
        catalog = [
            ("27in Monitor", "Electronics", Decimal("1299.90")),
            ("Mechanical Keyboard", "Electronics", Decimal("399.90")),
            ("Gaming Mouse", "Electronics", Decimal("249.90")),
            ("14in Notebook", "Electronics", Decimal("3999.00")),
            ("Headset", "Electronics", Decimal("299.90")),
            ("Office Desk", "Furniture", Decimal("899.00")),
            ("Ergonomic Chair", "Furniture", Decimal("1499.00")),
            ("Bookcase", "Furniture", Decimal("699.00")),
            ("Two-seat Sofa", "Furniture", Decimal("2299.00")),
            ("A4 Paper", "Office", Decimal("29.90")),
            ("Blue Pen", "Office", Decimal("4.90")),
            ("Notebook Stand", "Office", Decimal("149.90")),
            ("Calculator", "Office", Decimal("89.90")),
            ("LED Lamp", "Office", Decimal("59.90")),
        ]
        for name, category_name, price in catalog:
            category, _ = Category.objects.get_or_create(name=category_name)
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"{category_name} item",
                    "price": price,
                    "stock": random.randint(10, 200),
                    "category": category,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating catalog... Done!"))
        return products

    def _seed_accounts(self) -> list[Account]:
        self.stdout.write("Creating accounts...")
        accounts: list[Account] = []
        seed_accounts = [
            ("ana", "ana@example.com", Role.ADMIN),
            ("bruno", "bruno@example.com", Role.USER),
            ("carla", "carla@example.com", Role.USER),
            ("daniel", "daniel@example.com", Role.USER),
            ("helena", "helena@example.com", Role.USER),
        ]
        for username, email, role in seed_accounts:
            account = Account.objects.filter(username=username).first()
            if account is None:
                account = Account(username=username, email=email, role=role)
                account.set_password(f"{username}-password")
                account.save()
            accounts.append(account)
        self.stdout.write(self.style.SUCCESS("Creating accounts... Done!"))
        return accounts

    def _seed_orders(self, accounts: list[Account], products: list[Product], count: int) -> int:
        self.stdout.write("Creating orders...")
        if not accounts or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no accounts/products)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            account_repository=AccountDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        created = 0
        for _ in range(count):
            picked = random.sample(products, k=random.randint(1, min(4, len(products))))
            dto = CreateOrderDTO(
                account_id=random.choice(accounts).id,
                lines=[
                    CreateOrderLineDTO(product_id=product.id, quantity=random.randint(1, 3))
                    for product in picked
                ],
            )
            result = service.create_order(dto)
            if not result.is_ok:
                self.stdout.write(self.style.WARNING(f"Order skipped: {result.message}"))
                continue

            created_at = timezone.now() - timedelta(days=random.randint(0, 30))
            Order.objects.filter(id=result.value.id).update(created_at=created_at)
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
