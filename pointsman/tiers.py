"""
Tier resolver: pure mapping from a points balance to a loyalty tier.

The threshold table is data: an ordered tuple of ``Tier`` entries, each
owning the half-open range ``[min_points, next.min_points)``. The last tier
has no ceiling. One generic resolver serves any table, so adding a tier is
a settings change only.

Nothing here touches the database. Every function is total over ``int``.
"""

from dataclasses import dataclass

from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class Tier:
    """A loyalty tier and its floor."""

    name: str
    min_points: int
    label: str = ""
    perks: tuple[str, ...] = ()

    def __str__(self):
        return self.label or self.name.title()


@dataclass(frozen=True)
class TierStatus:
    """Result of resolving a balance."""

    tier: Tier
    points_to_next: int
    next_tier: Tier | None = None

    @property
    def is_top(self) -> bool:
        return self.next_tier is None


def build_table(entries) -> tuple[Tier, ...]:
    """
    Build and validate a tier table from settings entries.

    Accepts dicts (``{"name", "min_points", "label", "perks"}``),
    ``(name, min_points)`` pairs, or ``Tier`` instances.

    Raises:
        ImproperlyConfigured: If the table is empty, does not start at 0,
            has non-increasing floors, or repeats a name.
    """
    tiers = []
    for entry in entries:
        if isinstance(entry, Tier):
            tiers.append(entry)
        elif isinstance(entry, dict):
            tiers.append(
                Tier(
                    name=entry["name"],
                    min_points=entry["min_points"],
                    label=entry.get("label", ""),
                    perks=tuple(entry.get("perks", ())),
                )
            )
        else:
            name, min_points = entry
            tiers.append(Tier(name=name, min_points=min_points))

    if not tiers:
        raise ImproperlyConfigured("POINTSMAN['TIERS'] must define at least one tier.")

    if tiers[0].min_points != 0:
        raise ImproperlyConfigured(
            f"The first tier must start at 0 points (got {tiers[0].min_points})."
        )

    names = set()
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.min_points <= prev.min_points:
            raise ImproperlyConfigured(
                f"Tier floors must strictly increase: "
                f"{prev.name}={prev.min_points}, {cur.name}={cur.min_points}."
            )
    for tier in tiers:
        if tier.name in names:
            raise ImproperlyConfigured(f"Duplicate tier name: {tier.name!r}.")
        names.add(tier.name)

    return tuple(tiers)


def get_tier_table() -> tuple[Tier, ...]:
    """Tier table from settings (re-read on every call)."""
    from pointsman.conf import pointsman_settings

    return build_table(pointsman_settings.TIERS)


def resolve_tier(balance: int, table: tuple[Tier, ...] | None = None) -> TierStatus:
    """
    Map a balance to its tier and the points needed for the next one.

    Walks the table from the highest floor down; the first floor ``<=
    balance`` wins. Balances below the lowest floor (negative balances)
    resolve to the lowest tier, so ``points_to_next`` grows by the deficit.
    The top tier reports ``points_to_next == 0``.
    """
    if table is None:
        table = get_tier_table()

    index = 0
    for i in range(len(table) - 1, -1, -1):
        if table[i].min_points <= balance:
            index = i
            break

    tier = table[index]
    if index + 1 < len(table):
        next_tier = table[index + 1]
        return TierStatus(tier, next_tier.min_points - balance, next_tier)
    return TierStatus(tier, 0, None)


def tier_rank(name: str, table: tuple[Tier, ...] | None = None) -> int:
    """Position of a tier in the table (0 = lowest)."""
    if table is None:
        table = get_tier_table()
    for i, tier in enumerate(table):
        if tier.name == name:
            return i
    raise KeyError(name)


def progress_percent(
    balance: int,
    table: tuple[Tier, ...] | None = None,
    top_span: int | None = None,
) -> int:
    """
    Progress through the current tier, as an integer percentage in [0, 100].

    ``(balance - tier.min) / (tier.max - tier.min)``, rounded half-up.
    The top tier has no ceiling; ``top_span`` gives its nominal width.
    """
    if table is None:
        table = get_tier_table()
    if top_span is None:
        from pointsman.conf import pointsman_settings

        top_span = pointsman_settings.TOP_TIER_PROGRESS_SPAN

    status = resolve_tier(balance, table)
    low = status.tier.min_points
    high = status.next_tier.min_points if status.next_tier else low + top_span
    width = high - low
    if width <= 0:
        return 100

    pct = (200 * (balance - low) + width) // (2 * width)
    return max(0, min(100, pct))
