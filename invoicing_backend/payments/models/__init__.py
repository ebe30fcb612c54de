# payments/models/__init__.py

from payments.models.payment import Payment

__all__ = [
    "Payment",
]
