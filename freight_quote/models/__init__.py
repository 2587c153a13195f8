from freight_quote.models.customer import Customer
from freight_quote.models.transporter import (
    Transporter,
    TransporterServiceability,
    TransporterPrice,
    TransporterRating,
)
from freight_quote.models.tied_up import TiedUpTransporter, TemporaryTransporter

__all__ = [
    "Customer",
    "Transporter",
    "TransporterServiceability",
    "TransporterPrice",
    "TransporterRating",
    "TiedUpTransporter",
    "TemporaryTransporter",
]
