"""
Precision tie-break between the newest tag and the newest tag that keeps
the current precision.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .filters import remove_precision_changes
from .tag import Tag


logger = logging.getLogger(__name__)


def reconcile_precision(
    candidate_tags: Sequence[Tag],
    latest_tag: Tag,
    current: Tag,
    digest_of: Callable[[str], Optional[str]],
) -> Tag:
    """Prefer a less precise tag when it is the same image as ``latest_tag``.

    Going from ``1.2`` to ``1.2.3`` is only worth proposing when ``1.2`` has
    not moved along with it. Some registries do not expose digests; without
    both digests the two tags cannot be shown to match, so the newest tag
    wins.
    """
    if latest_tag.same_precision(current):
        return latest_tag

    same_precision = remove_precision_changes(candidate_tags, current)
    if not same_precision:
        return latest_tag
    latest_same_precision_tag = same_precision[-1]

    latest_same_precision_digest = digest_of(latest_same_precision_tag.name)
    latest_digest = digest_of(latest_tag.name)

    if (
        latest_digest is not None
        and latest_same_precision_digest == latest_digest
        and latest_same_precision_tag.same_but_less_precise(latest_tag)
    ):
        logger.info(
            "%s is the same image as %s, keeping the current precision",
            latest_same_precision_tag.name,
            latest_tag.name,
        )
        return latest_same_precision_tag

    return latest_tag
