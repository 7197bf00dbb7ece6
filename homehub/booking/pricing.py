"""Special-offer pricing: which price a booking is actually charged."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from homehub.schemas.service_schema import DiscountType, Service, SpecialOffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """Authoritative ``amount`` plus the list price kept for strikethrough display."""

    amount: float
    original_amount: float
    offer: Optional[SpecialOffer] = None

    @property
    def is_discounted(self) -> bool:
        return self.amount < self.original_amount


def discounted_price(price: float, offer: SpecialOffer) -> float:
    """Apply an offer to ``price``; rounded to cents and never below zero."""
    if offer.discount_type == DiscountType.PERCENTAGE:
        result = price * (1 - offer.discount_value / 100)
    else:
        result = price - offer.discount_value
    return max(round(result, 2), 0.0)


def _applies(service: Service, offer: SpecialOffer, now: datetime) -> bool:
    if offer.service_id is not None and offer.service_id != service.id:
        return False
    return offer.can_be_used(now)


def quote_price(service: Service, offer: Optional[SpecialOffer], now: datetime) -> PriceQuote:
    """Price for ``service``, discounted when ``offer`` is usable right now."""
    if offer is None or not _applies(service, offer, now):
        if offer is not None:
            logger.info("Offer %s not applicable to service %s", offer.id, service.id)
        return PriceQuote(amount=service.price, original_amount=service.price)
    return PriceQuote(
        amount=discounted_price(service.price, offer),
        original_amount=service.price,
        offer=offer,
    )


def best_offer(
    service: Service, offers: Iterable[SpecialOffer], now: datetime
) -> Optional[SpecialOffer]:
    """The usable offer yielding the lowest price, if any."""
    usable = [o for o in offers if _applies(service, o, now)]
    if not usable:
        return None
    return min(usable, key=lambda o: discounted_price(service.price, o))
