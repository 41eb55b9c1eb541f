# core/management/commands/reconcile_payments.py
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from payments.models import Payment
from payments.services import reverify, mark_expired


class Command(BaseCommand):
    help = "Re-verify pending Payoneer payments whose callback never arrived and expire stale ones."

    def add_arguments(self, parser):
        parser.add_argument("--age-mins", type=int, default=5,
                            help="Only re-verify payments older than N minutes (default: 5)")
        parser.add_argument("--expire-hours", type=int, default=settings.PENDING_PAYMENT_EXPIRY_HOURS,
                            help="Expire pending payments older than N hours")
        parser.add_argument("--max", type=int, default=200,
                            help="Max payments to process (default: 200)")

    def handle(self, *args, **opts):
        now = timezone.now()
        cutoff = now - timedelta(minutes=opts["age_mins"])
        expire_before = now - timedelta(hours=opts["expire_hours"])

        pending = list(
            Payment.objects.select_related("user")
            .filter(status="pending", created_at__lte=cutoff)
            .order_by("created_at")[: opts["max"]]
        )

        paid = 0
        expired = 0
        for payment in pending:
            try:
                outcome = reverify(payment)
                if outcome.result == "paid":
                    paid += 1
                    continue
                if payment.created_at <= expire_before:
                    if mark_expired(payment).result == "expired":
                        expired += 1
            except Exception as e:
                self.stderr.write(f"{payment.transaction_id}: {e}")

        self.stdout.write(self.style.SUCCESS(
            f"Done. Checked {len(pending)} payment(s). Paid {paid}, expired {expired}."
        ))
