"""
Release cooldown: hold back tags that were published too recently.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from .models import CooldownOptions, PublicationRecord
from .tag import Tag
from .time_utils import utc_now, within_window


logger = logging.getLogger(__name__)


class CooldownEngine:
    """Pick the newest candidate that has been published long enough."""

    def __init__(
        self,
        options: Optional[CooldownOptions],
        dependency_name: str,
        lookup: Callable[[Tag], Optional[PublicationRecord]],
        clock: Callable[[], datetime] = utc_now,
        enabled: bool = True,
    ) -> None:
        self.options = options
        self.dependency_name = dependency_name
        self.lookup = lookup
        self.clock = clock
        self.enabled = enabled

    @property
    def skipped(self) -> bool:
        return self.options is None or not self.enabled or not self.options.included(self.dependency_name)

    @property
    def cooldown_days(self) -> int:
        # Semver-level windows are not applied yet; see CooldownOptions.
        return self.options.default_days if self.options else 0

    def in_cooldown(self, released_at: datetime) -> bool:
        return within_window(released_at, self.cooldown_days, self.clock())

    def apply(self, candidate_tags: Sequence[Tag]) -> List[Tag]:
        """Reduce sorted candidates to the newest cooled-down tag, or nothing.

        Tags without a known publication date cannot be held back by the
        window and are passed over in favour of older, dated tags.
        """
        if self.skipped:
            return list(candidate_tags)

        for tag in reversed(candidate_tags):
            record = self.lookup(tag)
            if record is None or record.released_at is None:
                continue

            if not self.in_cooldown(record.released_at):
                return [tag]

            logger.info("Skipping tag %s due to cooldown period", tag.name)

        return []
