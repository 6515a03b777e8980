"""Entidades del dominio de rentas."""

from rentwear.domain.entities.listing import Listing, RentalType
from rentwear.domain.entities.rental import ListingSummary, Rental, RentalStatus, RentalSummary

__all__ = [
    # Listing
    "Listing",
    "RentalType",
    # Rental
    "Rental",
    "RentalStatus",
    "RentalSummary",
    "ListingSummary",
]
