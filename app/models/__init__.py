from app.models.account import Account, User, UserRole
from app.models.billing import (
    Bill,
    Customer,
    IncomingBill,
    IncomingStock,
    Patient,
    PaymentStatus,
    Provider,
    SellingLog,
)
from app.models.catalog import Content, Medicine, medicine_contents
from app.models.inventory import Batch

__all__ = [
    "Account",
    "Batch",
    "Bill",
    "Content",
    "Customer",
    "IncomingBill",
    "IncomingStock",
    "Medicine",
    "Patient",
    "PaymentStatus",
    "Provider",
    "SellingLog",
    "User",
    "UserRole",
    "medicine_contents",
]
