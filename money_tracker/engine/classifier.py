"""
Night Tier Classifier

Maps a night's net to a named tier through an ordered range table.

| Range (inclusive) | Tier                     |
|-------------------|--------------------------|
| 0 - 150           | Dead / Maintenance Night |
| 151 - 249         | Below Minimum            |
| 250 - 399         | Minimum Secured          |
| 400 - 699         | Good Money               |
| 700 and up        | Great Night (Bossed Up)  |

DESIGN DECISION: A negative net matches no band and comes back as
NightTier.UNCLASSIFIED. It is NOT clamped into the lowest tier.
"""

from decimal import Decimal
from typing import Any

from money_tracker.models.records import Entry
from money_tracker.models.views import EntryView, NightTier, TierBand
from money_tracker.validation.normalize import safe_decimal

# Amounts are whole currency units, so each band's upper edge is the next
# band's lower edge minus one. Matching on ``lower <= net < next_lower``
# keeps those boundaries exact for whole amounts and leaves no gaps for
# fractional ones.
TIERS: tuple[TierBand, ...] = (
    TierBand(lower=Decimal("0"), upper=Decimal("150"), tier=NightTier.DEAD),
    TierBand(lower=Decimal("151"), upper=Decimal("249"), tier=NightTier.BELOW_MINIMUM),
    TierBand(lower=Decimal("250"), upper=Decimal("399"), tier=NightTier.MINIMUM_SECURED),
    TierBand(lower=Decimal("400"), upper=Decimal("699"), tier=NightTier.GOOD_MONEY),
    TierBand(lower=Decimal("700"), upper=None, tier=NightTier.GREAT_NIGHT),
)


def tier_table() -> tuple[TierBand, ...]:
    """The tier bands in lookup order, for display."""
    return TIERS


def classify(net: Any) -> NightTier:
    """Return the first tier whose band contains ``net``."""
    value = safe_decimal(net)
    for index, band in enumerate(TIERS):
        next_lower = TIERS[index + 1].lower if index + 1 < len(TIERS) else None
        if value >= band.lower and (next_lower is None or value < next_lower):
            return band.tier
    return NightTier.UNCLASSIFIED


def evaluate_entry(entry: Entry, min_net: Decimal) -> EntryView:
    """Net, tier and minimum-hit for one logged night."""
    entry_net = entry.net
    return EntryView(
        entry_id=entry.id,
        date=entry.date,
        net=entry_net,
        tier=classify(entry_net),
        hit_min=entry_net >= min_net,
    )
