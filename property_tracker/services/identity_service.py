"""Identity resolution of normalized listings against tracked properties."""

from sqlalchemy.ext.asyncio import AsyncSession

from property_tracker.config import Settings, get_settings
from property_tracker.db.repositories import (
    find_property_by_address,
    find_property_by_address_key,
    find_property_by_source,
)
from property_tracker.domain.listing import NormalizedListing
from property_tracker.models.tracked_property import TrackedProperty


class IdentityResolver:
    """Find the tracked property a listing refers to, if any.

    With the ``address`` strategy the natural key (address line, city, postal
    code) is the only join. With ``source_listing`` the stored source link is
    tried first and the address rule is the fallback. ``normalize_addresses``
    swaps the exact address match for the canonical address key.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()

    async def resolve(self, listing: NormalizedListing) -> TrackedProperty | None:
        if self._settings.identity_strategy == "source_listing":
            linked = await find_property_by_source(
                self._session,
                source_name=listing.source_name,
                source_listing_id=listing.source_listing_id,
            )
            if linked is not None:
                return linked

        return await self._resolve_by_address(listing)

    async def _resolve_by_address(
        self, listing: NormalizedListing
    ) -> TrackedProperty | None:
        if self._settings.normalize_addresses:
            return await find_property_by_address_key(
                self._session, listing.address_key
            )
        return await find_property_by_address(
            self._session,
            address_line=listing.address_line,
            city=listing.city,
            postal_code=listing.postal_code,
        )
