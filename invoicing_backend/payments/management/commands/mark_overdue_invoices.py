# payments/management/commands/mark_overdue_invoices.py

from __future__ import annotations

import uuid
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from companies.context import TenantContext
from companies.models import Company
from payments.services.payment_service import mark_overdue_invoices


class Command(BaseCommand):
    help = "Flip validated / partially paid invoices whose due date has passed to 'overdue'."

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            dest="company_id",
            help="Restrict the sweep to one company id (UUID).",
        )
        parser.add_argument(
            "--date",
            dest="today",
            help="Reference date YYYY-MM-DD (default: today).",
        )

    def handle(self, *args, **options):
        today = None
        if options.get("today"):
            try:
                today = date.fromisoformat(options["today"])
            except ValueError as exc:
                raise CommandError("Invalid --date. Use YYYY-MM-DD") from exc

        companies = Company.objects.filter(is_active=True)
        if options.get("company_id"):
            try:
                company_id = uuid.UUID(str(options["company_id"]))
            except ValueError as exc:
                raise CommandError("Invalid --company id. Use a UUID") from exc
            companies = companies.filter(id=company_id)
            if not companies.exists():
                raise CommandError(f"Company {company_id} not found")

        total = 0
        for company in companies.order_by("name"):
            count = mark_overdue_invoices(tenant=TenantContext.for_company(company), today=today)
            if count:
                self.stdout.write(f"{company.name}: {count} invoice(s) overdue")
            total += count

        self.stdout.write(self.style.SUCCESS(f"[OK] Invoices marked overdue: {total}"))
