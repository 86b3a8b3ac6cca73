# =============================================================================
# core/services/financing_service.py - Lease-to-Own Applications
# =============================================================================
# Backs the mobile sales app: payment quotes, applications, the equipment
# on them, and payment history with a collections summary.
# =============================================================================

import logging
import math
from typing import Any

from app.config import settings
from app.exceptions import DatabaseOperationError, InvalidRequestError
from core.models.financing import (
    ApplicationCreateRequest,
    ApplicationStatus,
    CalculatorRequest,
    PaymentStatus,
)
from lib.financing import MAX_TERM_MONTHS, calculate_lease
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, to_float, utc_now

logger = logging.getLogger(__name__)


def _as_number(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{name} must be a number")
    if not math.isfinite(result):
        raise InvalidRequestError(f"{name} must be a number")
    return result


class FinancingService:

    @staticmethod
    def calculate(request: CalculatorRequest) -> dict[str, Any]:
        """Quote a lease from raw calculator inputs."""
        if request.purchase_cost in (None, "") or request.term_months in (None, ""):
            raise InvalidRequestError("purchaseCost and termMonths are required")

        purchase_cost = _as_number(request.purchase_cost, "purchaseCost")
        term_months = int(_as_number(request.term_months, "termMonths"))
        if term_months <= 0:
            raise InvalidRequestError("termMonths must be greater than 0")
        if term_months > MAX_TERM_MONTHS:
            raise InvalidRequestError(f"termMonths must be at most {MAX_TERM_MONTHS}")

        sales_tax = _as_number(request.sales_tax if request.sales_tax not in (None, "") else 0, "salesTax")
        residual = _as_number(
            request.residual_percentage if request.residual_percentage not in (None, "") else 10,
            "residualPercentage",
        )

        try:
            return calculate_lease(
                purchase_cost,
                term_months,
                sales_tax=sales_tax,
                residual_percentage=residual,
                annual_rate=settings.LEASE_ANNUAL_RATE,
            )
        except (OverflowError, ValueError):
            raise InvalidRequestError("Calculator inputs are out of range")

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    @staticmethod
    def list_applications(client_id: str | None = None, status: str | None = None) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            query = client.table("financing_applications").select("*, clients(*), equipment_items(*)")
            if client_id:
                query = query.eq("client_id", client_id)
            if status:
                query = query.eq("status", status)
            response = query.order("created_at", desc=True).limit(50).execute()
        except Exception as e:
            raise DatabaseOperationError("fetch applications", str(e))
        return response.data or []

    @staticmethod
    def create_application(request: ApplicationCreateRequest) -> dict[str, Any]:
        """
        Create a pending application.

        The equipment row is best-effort: the application stands even if
        recording the equipment fails.
        """
        if not request.client_id or request.equipment_cost is None or not request.term_months:
            raise InvalidRequestError("client_id, equipment_cost, and term_months are required")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("financing_applications")
                .insert({
                    "client_id": request.client_id,
                    "equipment_cost": request.equipment_cost,
                    "term_months": request.term_months,
                    "sales_tax_rate": request.sales_tax_rate or 0,
                    "residual_percentage": request.residual_percentage if request.residual_percentage is not None else 10,
                    "monthly_payment": request.monthly_payment,
                    "notes": request.notes or "",
                    "status": ApplicationStatus.PENDING.value,
                })
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("create application", str(e))

        application = response.data[0]

        if request.equipment_name:
            try:
                client.table("equipment_items").insert({
                    "financing_application_id": application["id"],
                    "name": request.equipment_name,
                    "purchase_cost": request.equipment_cost,
                    "status": "active",
                }).execute()
            except Exception as e:
                logger.error(f"Failed to add equipment to application {application['id']}: {e}")

        logger.info(f"Created financing application {application['id']} for client {request.client_id}")
        return application

    @staticmethod
    def list_equipment(application_id: str | None = None, status: str | None = None) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            query = client.table("equipment_items").select("*")
            if application_id:
                query = query.eq("financing_application_id", application_id)
            if status:
                query = query.eq("status", status)
            response = query.order("created_at", desc=True).limit(100).execute()
        except Exception as e:
            raise DatabaseOperationError("fetch equipment", str(e))
        return response.data or []

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    @staticmethod
    def list_payments(
        application_id: str | None = None,
        status: str | None = None,
        client_id: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """
        Payment rows with their application and client.

        client_id is filtered after the fetch because it lives two joins away.
        """
        client = SupabaseClient.get_client()
        try:
            query = client.table("financing_payments").select(
                "*, financing_applications(id, status, term_months, monthly_payment, clients(id, name, email))"
            )
            if application_id:
                query = query.eq("financing_application_id", application_id)
            if status:
                query = query.eq("status", status)
            response = query.order("due_date", desc=True).limit(limit).execute()
        except Exception as e:
            raise DatabaseOperationError("fetch payments", str(e))

        payments = response.data or []
        if client_id:
            payments = [
                p for p in payments
                if ((p.get("financing_applications") or {}).get("clients") or {}).get("id") == client_id
            ]
        return payments

    @staticmethod
    def summarize_payments(payments: list[dict[str, Any]]) -> dict[str, Any]:
        """Collected, outstanding and overdue totals for a payment list."""
        now = utc_now()
        total_paid = 0.0
        total_pending = 0.0
        overdue = 0

        for payment in payments:
            if payment.get("status") == PaymentStatus.PAID.value:
                total_paid += to_float(payment.get("amount_paid"))
            elif payment.get("status") == PaymentStatus.PENDING.value:
                total_pending += to_float(payment.get("amount"))
                due = parse_timestamp(payment.get("due_date"))
                if due is not None and due < now:
                    overdue += 1

        return {
            "totalPaid": total_paid,
            "totalPending": total_pending,
            "overdueCount": overdue,
            "count": len(payments),
        }
