"""
Identity resolution for a booking attempt.

Decides whether the person booking is an authenticated user or a guest
and produces the canonical contact tuple used for the booking request.
Fetch failures never reach the caller; they degrade to guest mode.
"""

import logging
from typing import Optional

from homehub.api.client import HomeHubClient
from homehub.api.errors import ApiError
from homehub.schemas.customer_schema import ContactDetails, ResolvedIdentity, UserProfile
from homehub.session import SessionStore

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Token → cached profile → /user/me → /auth/me → guest."""

    def __init__(self, client: HomeHubClient, store: SessionStore) -> None:
        self.client = client
        self.store = store

    async def resolve(self, guest: Optional[ContactDetails] = None) -> ResolvedIdentity:
        """
        Resolve who is booking.

        Args:
            guest: Contact details typed in by the caller. Used only when
                no valid session exists.

        Returns:
            The resolved identity; never raises.
        """
        if self.store.get_token():
            profile = self.store.get_profile()
            if profile is None:
                profile = await self._fetch_profile()
                if profile is not None:
                    self.store.set_profile(profile)
            if profile is not None:
                logger.debug("Booking as authenticated user %s", profile.id or profile.email)
                return ResolvedIdentity(
                    contact=profile.to_contact(), is_authenticated=True, user=profile
                )
            logger.warning("Stored token rejected by both profile endpoints; continuing as guest")
            self.store.clear_token()

        return ResolvedIdentity(contact=guest or ContactDetails(), is_authenticated=False)

    async def _fetch_profile(self) -> Optional[UserProfile]:
        for fetch in (self.client.get_user_me, self.client.get_auth_me):
            try:
                return await fetch()
            except ApiError as exc:
                logger.info("Profile lookup via %s failed: %s", fetch.__name__, exc.user_message)
        return None
