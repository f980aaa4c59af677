from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"

    def ready(self):
        from orders.signals import order_confirmed
        from notifications.receivers import send_order_confirmation

        order_confirmed.connect(
            send_order_confirmation,
            dispatch_uid="notifications.send_order_confirmation",
        )
