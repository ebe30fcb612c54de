# documents/services/tax.py

"""
TAX / TOTALS CALCULATOR (PURE)

Tunisian FODEC + VAT cascade. No database access, no side effects.

Per line (order matters, FODEC is folded into the VAT base):
    ht             = quantity * unit_price
    fodec_amount   = ht * fodec_rate        (only when fodec_applicable)
    vat_amount     = (ht + fodec_amount) * vat_rate_percent / 100
    total_line_ttc = ht + fodec_amount + vat_amount

Per document:
    subtotal  = sum(ht)
    base_tva  = subtotal + total_fodec
    discount  = percent of base_tva, or a fixed value, clamped to [0, base_tva]
    stamp     = stamp_amount if stamp_included else 0
    total     = base_tva + tax_amount - discount + stamp

VAT is not recomputed on the discounted base. compute_* work in exact Decimal
arithmetic; quantize_* produce the 2dp snapshot persisted on documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.exceptions import InvalidInputError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

DISCOUNT_PERCENT = "percent"
DISCOUNT_FIXED = "fixed"
DISCOUNT_TYPES = (DISCOUNT_PERCENT, DISCOUNT_FIXED)


def _dec(value, field: str) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidInputError(f"{field}: invalid number {value!r}") from exc
    if not d.is_finite():
        raise InvalidInputError(f"{field}: invalid number {value!r}")
    return d


def _q2(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineInput:
    quantity: Decimal
    unit_price: Decimal
    vat_rate_percent: Decimal = ZERO
    fodec_applicable: bool = False
    fodec_rate_decimal: Decimal = ZERO


@dataclass(frozen=True)
class LineOutput:
    ht: Decimal
    fodec_amount: Decimal
    vat_amount: Decimal
    total_line_ttc: Decimal


@dataclass(frozen=True)
class DiscountConfig:
    type: str
    value: Decimal

    def __post_init__(self):
        if self.type not in DISCOUNT_TYPES:
            raise InvalidInputError(f"Discount type must be one of {DISCOUNT_TYPES}")
        value = _dec(self.value, "discount.value")
        if value < 0:
            raise InvalidInputError("Discount value cannot be negative")
        object.__setattr__(self, "value", value)

    @classmethod
    def from_value(cls, value) -> "DiscountConfig | None":
        """
        Accepts None, a DiscountConfig or a {"type": ..., "value": ...} mapping.
        A zero-valued discount is the same as no discount.
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, dict):
            if not value.get("type") and not value.get("value"):
                return None
            return cls(type=value.get("type") or DISCOUNT_PERCENT, value=value.get("value"))
        raise InvalidInputError("discount must be an object with type and value")


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    total_fodec: Decimal
    base_tva: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    stamp: Decimal
    total: Decimal


def compute_line(line: LineInput) -> LineOutput:
    quantity = _dec(line.quantity, "quantity")
    unit_price = _dec(line.unit_price, "unit_price")
    vat_rate = _dec(line.vat_rate_percent, "vat_rate_percent")
    fodec_rate = _dec(line.fodec_rate_decimal, "fodec_rate_decimal")

    if quantity < 0:
        raise InvalidInputError("quantity cannot be negative")
    if vat_rate < 0:
        raise InvalidInputError("vat_rate_percent cannot be negative")
    if fodec_rate < 0 or fodec_rate > 1:
        raise InvalidInputError("fodec_rate_decimal must be within [0, 1]")

    ht = quantity * unit_price
    fodec_amount = ht * fodec_rate if line.fodec_applicable else ZERO
    vat_amount = (ht + fodec_amount) * (vat_rate / HUNDRED)

    return LineOutput(
        ht=ht,
        fodec_amount=fodec_amount,
        vat_amount=vat_amount,
        total_line_ttc=ht + fodec_amount + vat_amount,
    )


def compute_discount(base_tva: Decimal, discount: DiscountConfig | None) -> Decimal:
    if discount is None or base_tva <= 0:
        return ZERO

    if discount.type == DISCOUNT_PERCENT:
        amount = base_tva * (discount.value / HUNDRED)
    else:
        amount = discount.value

    return min(max(amount, ZERO), base_tva)


def compute_totals(
    lines,
    *,
    stamp_included: bool = False,
    stamp_amount=ZERO,
    discount: DiscountConfig | None = None,
) -> DocumentTotals:
    stamp_value = _dec(stamp_amount, "stamp_amount")
    if stamp_value < 0:
        raise InvalidInputError("stamp_amount cannot be negative")

    subtotal = sum((ln.ht for ln in lines), ZERO)
    total_fodec = sum((ln.fodec_amount for ln in lines), ZERO)
    tax_amount = sum((ln.vat_amount for ln in lines), ZERO)
    base_tva = subtotal + total_fodec

    discount_amount = compute_discount(base_tva, DiscountConfig.from_value(discount))
    stamp = stamp_value if stamp_included else ZERO

    return DocumentTotals(
        subtotal=subtotal,
        total_fodec=total_fodec,
        base_tva=base_tva,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        stamp=stamp,
        total=base_tva + tax_amount - discount_amount + stamp,
    )


def quantize_line(out: LineOutput) -> LineOutput:
    ht = _q2(out.ht)
    fodec_amount = _q2(out.fodec_amount)
    vat_amount = _q2(out.vat_amount)
    return LineOutput(
        ht=ht,
        fodec_amount=fodec_amount,
        vat_amount=vat_amount,
        total_line_ttc=ht + fodec_amount + vat_amount,
    )


def quantize_totals(totals: DocumentTotals) -> DocumentTotals:
    """
    2dp snapshot. The total is re-added from the rounded parts so the stored
    columns always satisfy total == base_tva + tax_amount - discount + stamp.
    """
    subtotal = _q2(totals.subtotal)
    total_fodec = _q2(totals.total_fodec)
    base_tva = subtotal + total_fodec
    tax_amount = _q2(totals.tax_amount)
    discount_amount = _q2(totals.discount_amount)
    stamp = _q2(totals.stamp)

    return DocumentTotals(
        subtotal=subtotal,
        total_fodec=total_fodec,
        base_tva=base_tva,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        stamp=stamp,
        total=base_tva + tax_amount - discount_amount + stamp,
    )


def compute_snapshot(
    line_inputs,
    *,
    stamp_included: bool = False,
    stamp_amount=ZERO,
    discount: DiscountConfig | None = None,
) -> tuple[list[LineOutput], DocumentTotals]:
    """
    What gets persisted: rounded lines, and totals derived from those rounded
    lines, so the snapshot can always be re-derived from the stored rows.
    """
    outputs = [quantize_line(compute_line(li)) for li in line_inputs]
    totals = quantize_totals(
        compute_totals(
            outputs,
            stamp_included=stamp_included,
            stamp_amount=stamp_amount,
            discount=discount,
        )
    )
    return outputs, totals
