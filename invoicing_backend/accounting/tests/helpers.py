# accounting/tests/helpers.py

from __future__ import annotations

from accounting.models.account import Account


def make_account(company, code: str, name: str | None = None, account_type: str = Account.ACTIF) -> Account:
    return Account.objects.create(
        company=company,
        code=code,
        name=name or f"Compte {code}",
        account_type=account_type,
    )


def two_legs(debit_account, credit_account, amount) -> list[dict]:
    return [
        {"account_id": debit_account.pk, "debit": amount, "credit": 0},
        {"account_id": credit_account.pk, "debit": 0, "credit": amount},
    ]
