"""
Affiliate commissions and payouts.

Commission lifecycle on an order: ``pending`` (unpaid or in progress) ->
``approved`` (order completed) -> ``requested`` (affiliate asked for money)
-> ``paid`` (admin settled it). Cancelled or failed orders cancel their
commission; see ``orders.signals``.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Count, Sum, Q
from django.db.models.functions import Coalesce

from notifications.utils import notify_payout_requested
from orders.models import Order
from payments.payoneer import GatewayDisabled, GatewayError
from payments.payouts import PayoneerPayoutProvider
from services.pricing import format_cents
from .models import Affiliate, Payout

logger = logging.getLogger(__name__)

COMMISSION_BUCKETS = ("pending", "approved", "requested", "paid")


class AffiliateError(Exception):
    pass


def _earnings(status: str):
    return Coalesce(Sum("commission_amount", filter=Q(commission_status=status)), 0)


# ---------------------------------------------------------------------------
# Enrolment & stats
# ---------------------------------------------------------------------------
def join(user, referral_code: str) -> Affiliate:
    code = (referral_code or "").strip()
    if len(code) < 3:
        raise AffiliateError("Referral code must be at least 3 characters")
    if Affiliate.objects.filter(user=user).exists():
        raise AffiliateError("User is already an affiliate")
    if Affiliate.objects.filter(referral_code__iexact=code).exists():
        raise AffiliateError("Referral code already exists")
    try:
        return Affiliate.objects.create(
            user=user,
            referral_code=code,
            commission_rate=Decimal(str(settings.AFFILIATE_DEFAULT_COMMISSION_RATE)),
        )
    except IntegrityError:
        raise AffiliateError("Referral code already exists")


def stats(affiliate: Affiliate) -> Dict[str, int]:
    agg = Order.objects.filter(affiliate=affiliate).exclude(commission_status="none").aggregate(
        totalOrders=Count("id"),
        totalEarnings=Coalesce(Sum("commission_amount", filter=~Q(commission_status="cancelled")), 0),
        **{f"{bucket}Earnings": _earnings(bucket) for bucket in COMMISSION_BUCKETS},
    )
    return agg


# ---------------------------------------------------------------------------
# Manual payout workflow
# ---------------------------------------------------------------------------
def _claim_approved(affiliate: Affiliate, method: str, details: Dict) -> Payout:
    """Move every approved commission into a new pending Payout. Caller holds the transaction."""
    orders = list(
        Order.objects.select_for_update()
        .filter(affiliate=affiliate, commission_status="approved")
    )
    total = sum(o.commission_amount for o in orders)
    if total < settings.MIN_PAYOUT_CENTS:
        raise AffiliateError(f"Minimum withdrawal amount is {format_cents(settings.MIN_PAYOUT_CENTS)}")

    payout = Payout.objects.create(affiliate=affiliate, amount=total, method=method, details=details)
    Order.objects.filter(pk__in=[o.pk for o in orders]).update(commission_status="requested", payout=payout)
    return payout


def request_payout(affiliate: Affiliate) -> Payout:
    with transaction.atomic():
        Affiliate.objects.select_for_update().get(pk=affiliate.pk)
        payout = _claim_approved(affiliate, "manual", {})
        notify_payout_requested(affiliate, payout.amount)
    logger.info("Affiliate %s requested payout %s (%sc)", affiliate.id, payout.id, payout.amount)
    return payout


def payout_affiliate(affiliate_id: int) -> int:
    """Admin settles everything the affiliate has requested. Returns the number of orders paid."""
    with transaction.atomic():
        affiliate = Affiliate.objects.select_for_update().get(pk=affiliate_id)
        paid = Order.objects.filter(
            affiliate=affiliate, commission_status="requested", payout__method="manual"
        ).update(commission_status="paid")
        Payout.objects.filter(affiliate=affiliate, method="manual", status="pending").update(status="completed")
    logger.info("Affiliate %s paid out: %s order(s)", affiliate_id, paid)
    return paid


def payout_requests() -> List[Dict]:
    rows = (
        Affiliate.objects.select_related("user")
        .annotate(requested=_earnings_on_referred("requested", method="manual"))
        .filter(requested__gt=0)
        .order_by("-requested")
    )
    return [
        {
            "affiliateId": a.id,
            "referralCode": a.referral_code,
            "userId": a.user_id,
            "name": a.user.display_name,
            "email": a.user.email,
            "requestedEarnings": a.requested,
        }
        for a in rows
    ]


def _earnings_on_referred(status: str, method: str | None = None):
    cond = Q(referred_orders__commission_status=status)
    if method:
        cond &= Q(referred_orders__payout__method=method)
    return Coalesce(Sum("referred_orders__commission_amount", filter=cond), 0)


def admin_overview():
    return (
        Affiliate.objects.select_related("user")
        .annotate(
            total_orders=Count("referred_orders", filter=~Q(referred_orders__commission_status="none")),
            **{f"{bucket}_earnings": _earnings_on_referred(bucket) for bucket in COMMISSION_BUCKETS},
        )
    )


# ---------------------------------------------------------------------------
# Payoneer payouts
# ---------------------------------------------------------------------------
def request_payoneer_payout(affiliate: Affiliate, email: str, provider: PayoneerPayoutProvider | None = None) -> Payout:
    """
    Claim approved commissions and push them to Payoneer. A provider failure
    marks the Payout ``failed`` and hands the commissions back (``approved``)
    before re-raising.
    """
    provider = provider or PayoneerPayoutProvider()
    if not provider.enabled:
        raise GatewayDisabled()
    if not provider.validate_recipient({"email": email}):
        raise AffiliateError("Invalid Payoneer details")

    with transaction.atomic():
        Affiliate.objects.select_for_update().get(pk=affiliate.pk)
        payout = _claim_approved(affiliate, "payoneer", {"email": email})

    try:
        tx = provider.create_payout(payout.amount, payout.currency, {"email": email}, f"payout_{payout.id}")
    except GatewayError as e:
        with transaction.atomic():
            payout.status = "failed"
            payout.details = {"email": email, "error": str(e)}
            payout.save(update_fields=["status", "details", "updated_at"])
            Order.objects.filter(payout=payout, commission_status="requested").update(
                commission_status="approved", payout=None,
            )
        logger.warning("Payoneer payout %s failed: %s", payout.id, e)
        raise

    payout.transaction_id = tx
    payout.save(update_fields=["transaction_id", "updated_at"])
    notify_payout_requested(affiliate, payout.amount)
    logger.info("Payoneer payout %s submitted as %s", payout.id, tx)
    return payout


def refresh_payout(payout: Payout, provider: PayoneerPayoutProvider | None = None) -> Payout:
    """Poll Payoneer for a submitted payout and settle its commissions once transferred."""
    if payout.method != "payoneer" or payout.status != "pending" or not payout.transaction_id:
        return payout
    provider = provider or PayoneerPayoutProvider()
    new_status = provider.get_payout_status(payout.transaction_id)
    if new_status == payout.status:
        return payout

    with transaction.atomic():
        done = Payout.objects.filter(pk=payout.pk, status="pending").update(status=new_status)
        if done:
            if new_status == "completed":
                Order.objects.filter(payout=payout, commission_status="requested").update(commission_status="paid")
            else:
                Order.objects.filter(payout=payout, commission_status="requested").update(
                    commission_status="approved", payout=None,
                )
    payout.refresh_from_db()
    return payout
