# accounting/management/commands/validate_journal_integrity.py

from __future__ import annotations

import uuid

from django.core.management.base import BaseCommand

from accounting.services.journal_entry_service import find_unbalanced_entries
from companies.models import Company


class Command(BaseCommand):
    help = "Scan journal entries and report any whose debits and credits do not balance."

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            dest="company_id",
            help="Restrict the scan to one company id (UUID).",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any error is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))
        company_id = options.get("company_id")

        if company_id:
            try:
                company_id = uuid.UUID(str(company_id))
            except ValueError:
                self.stderr.write(self.style.ERROR("Invalid --company id. Use a UUID"))
                return self._exit(strict)

            if not Company.objects.filter(id=company_id).exists():
                self.stderr.write(self.style.ERROR(f"Company {company_id} not found"))
                return self._exit(strict)

        self.stdout.write(self.style.MIGRATE_HEADING("Journal Integrity Validation"))
        self.stdout.write(f"Scope: {company_id or 'ALL COMPANIES'}")
        self.stdout.write("")

        problems = find_unbalanced_entries(company_id=company_id)

        if not problems:
            self.stdout.write(self.style.SUCCESS("[OK] Every journal entry balances"))
            return

        self.stderr.write(self.style.ERROR(f"[FAIL] Unbalanced journal entries: {len(problems)}"))
        for p in problems[:20]:
            self.stderr.write(
                f"  entry_id={p['entry_id']} company={p['company_id']} "
                f"debit={p['total_debit']} credit={p['total_credit']} lines={p['line_count']}"
            )

        self._exit(strict)

    def _exit(self, strict: bool):
        if strict:
            raise SystemExit(1)
