from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.events import OrderCancelled, OrderPlaced
        from modules.orders.handlers import (
            low_stock_alert_handler,
            order_cancelled_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderPlaced, low_stock_alert_handler)
        event_bus.subscribe(OrderCancelled, order_cancelled_handler)
