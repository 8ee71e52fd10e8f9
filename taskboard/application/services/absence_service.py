"""Absence providers.

Absence data (vacations, sick leave) is an optional integration behind
IAbsenceProvider. The default provider reports nobody as absent.
"""

from __future__ import annotations

import logging

from taskboard.application.interfaces import AbsenceInfo

logger = logging.getLogger(__name__)


class NullAbsenceProvider:
    """IAbsenceProvider that returns an empty map."""

    async def get_absences(self, user_ids: list[str]) -> dict[str, AbsenceInfo]:
        logger.debug("Absence lookup disabled; skipping %s users", len(user_ids))
        return {}
