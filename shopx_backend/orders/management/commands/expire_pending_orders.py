# orders/management/commands/expire_pending_orders.py

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from orders.models import Order
from orders.services.order_status import expire_pending_orders


class Command(BaseCommand):
    help = "Cancel pending (unpaid) orders older than the configured TTL."

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Age in minutes after which a pending order expires "
            "(default: SHOPX['PENDING_ORDER_TTL_MINUTES']).",
        )
        parser.add_argument("--dry-run", action="store_true", help="Only count, do not cancel")

    def handle(self, *args, **options):
        minutes = options.get("minutes")
        if minutes is None:
            minutes = int((getattr(settings, "SHOPX", {}) or {}).get("PENDING_ORDER_TTL_MINUTES") or 30)

        if minutes <= 0:
            raise CommandError("--minutes must be a positive integer")

        older_than = timedelta(minutes=minutes)

        if options.get("dry_run"):
            count = Order.objects.filter(
                status=Order.STATUS_PENDING,
                created_at__lt=timezone.now() - older_than,
            ).count()
            self.stdout.write(f"[dry-run] {count} pending order(s) older than {minutes} minute(s)")
            return

        expired = expire_pending_orders(older_than=older_than)
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} pending order(s)"))
