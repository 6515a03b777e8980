from typing import Sequence

from rentwear.domain.entities.listing import Listing


class ListingRepo:
    async def create(self, listing: Listing) -> Listing:
        """Persiste la publicación y la regresa con id y created_at asignados."""
        raise NotImplementedError

    async def get(self, listing_id: int) -> Listing | None:
        raise NotImplementedError

    async def search(self, query: str) -> Sequence[Listing]:
        """
        Búsqueda por subcadena, sin distinguir mayúsculas, sobre
        title, size, item_type y condition. Query vacío regresa todo.
        """
        raise NotImplementedError
