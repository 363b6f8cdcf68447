"""Greedy shard transfer: moves shard ids from donors to recipients.

The engine runs in two phases:

1. **Fill deficits.**  Primary donors (above ``ceiling``) give down to
   ``ceiling`` to recipients (below ``floor``).  If recipients are still
   short, secondary donors give down to ``floor``.  Afterwards no group
   owns fewer than ``floor`` shards.
2. **Drain surpluses.**  Primary donors still above ``ceiling`` give to
   groups sitting exactly at ``floor`` until each reaches ``ceiling``.

Shards are only ever taken from a group above its final count and given
to a group below it, so the number of moves is the smallest possible.

Each group owns a private shard buffer.  Standings are never stored;
they are derived from the buffer sizes whenever a phase picks its
donors and recipients.  Unassigned shards act as a donor that keeps
nothing and always gives first.
"""

from __future__ import annotations

import logging

from ..models import GroupStanding, ShardQuota
from .group_classifier import classify_group

logger = logging.getLogger(__name__)

# Donor key for the pool of unassigned shards.
_UNASSIGNED = None


class ShardTransferEngine:
    """Rebalances a group-form assignment in place on owned buffers.

    Parameters:
        shards_by_gid: Group form of the current assignment.  Copied.
        quota: Bounds computed for the same shard and group counts.
        unassigned: Shard ids no group owns yet.
    """

    def __init__(
        self,
        shards_by_gid: dict[int, list[int]],
        quota: ShardQuota,
        unassigned: list[int] | None = None,
    ) -> None:
        self._quota = quota
        self._holdings: dict[int, list[int]] = {
            gid: list(owned) for gid, owned in shards_by_gid.items()
        }
        self._unassigned: list[int] = list(unassigned or [])
        self._moves = 0

    # ── Properties ────────────────────────────────────────────────

    @property
    def moves(self) -> int:
        """Number of shards moved so far."""
        return self._moves

    # ── Query ─────────────────────────────────────────────────────

    def holdings(self) -> dict[int, list[int]]:
        """Return a copy of the current group form."""
        return {gid: list(owned) for gid, owned in self._holdings.items()}

    def standing(self, gid: int) -> GroupStanding:
        return classify_group(len(self._holdings[gid]), self._quota)

    def members(self, standing: GroupStanding) -> list[int]:
        """Return the gids currently in ``standing``, ascending."""
        return [gid for gid in sorted(self._holdings) if self.standing(gid) is standing]

    # ── Transfer ──────────────────────────────────────────────────

    def run(self) -> dict[int, list[int]]:
        """Run both phases and return the balanced group form."""
        self.fill_deficits()
        self.drain_surpluses()
        return self.holdings()

    def fill_deficits(self) -> None:
        """Phase 1: raise every group to at least ``floor`` shards."""
        floor, ceiling = self._quota.floor, self._quota.ceiling
        self._transfer(
            self._with_unassigned(self.members(GroupStanding.PRIMARY_DONOR)),
            self.members(GroupStanding.RECIPIENT),
            keep=ceiling,
            fill_to=floor,
        )
        # Drained primary donors now count as secondary donors.
        self._transfer(
            self.members(GroupStanding.SECONDARY_DONOR),
            self.members(GroupStanding.RECIPIENT),
            keep=floor,
            fill_to=floor,
        )

    def drain_surpluses(self) -> None:
        """Phase 2: lower every group to at most ``ceiling`` shards."""
        ceiling = self._quota.ceiling
        self._transfer(
            self._with_unassigned(self.members(GroupStanding.PRIMARY_DONOR)),
            self.members(GroupStanding.AT_TARGET),
            keep=ceiling,
            fill_to=ceiling,
        )

    def _with_unassigned(self, donors: list[int]) -> list[int | None]:
        if self._unassigned:
            return [_UNASSIGNED, *donors]
        return list(donors)

    def _buffer(self, donor: int | None) -> list[int]:
        if donor is _UNASSIGNED:
            return self._unassigned
        return self._holdings[donor]

    def _transfer(
        self,
        donors: list[int | None],
        recipients: list[int],
        keep: int,
        fill_to: int,
    ) -> None:
        """Greedily pair donors with recipients.

        Each donor gives down to ``keep`` shards (unassigned: down to 0),
        each recipient takes up to ``fill_to`` shards.
        """
        d = r = 0
        while d < len(donors) and r < len(recipients):
            donor, recipient = donors[d], recipients[r]
            excess = len(self._buffer(donor)) - (0 if donor is _UNASSIGNED else keep)
            needed = fill_to - len(self._holdings[recipient])
            self._move(donor, recipient, min(excess, needed))
            if excess > needed:
                r += 1
            else:
                d += 1

    def _move(self, donor: int | None, recipient: int, count: int) -> None:
        if count <= 0:
            return
        source = self._buffer(donor)
        moved = source[-count:]
        del source[-count:]
        self._holdings[recipient].extend(moved)
        self._moves += count
        logger.debug(
            "Moved %d shards %s from %s to group %d",
            count,
            moved,
            "unassigned" if donor is _UNASSIGNED else f"group {donor}",
            recipient,
        )
