"""Sequential per-item execution with per-item outcomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from .errors import SafeError, describe_error

logger = logging.getLogger(__name__)

UNEXPECTED_ITEM_ERROR = "Internal error"


@dataclass(frozen=True, slots=True)
class BulkItemResult:
    """Outcome of one item in a bulk operation."""

    item_id: str
    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"item_id": self.item_id, "success": self.success}
        if self.error is not None:
            out["error"] = self.error
        return out


async def run_bulk(
    item_ids: Iterable[str],
    operation: Callable[[str], Awaitable[Any]],
) -> list[BulkItemResult]:
    """Run ``operation`` once per item id, strictly in order.

    Any failing item is recorded and processing continues with the next one.
    Nothing is rolled back. The result has one entry per input id, in input
    order, whatever the failure was.
    """
    results: list[BulkItemResult] = []
    for item_id in item_ids:
        try:
            await operation(item_id)
        except SafeError as err:
            logger.info("Bulk item %s failed: %s", item_id, err.code)
            results.append(BulkItemResult(item_id=item_id, success=False, error=describe_error(err)))
            continue
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Bulk item %s raised an unexpected error", item_id)
            results.append(BulkItemResult(item_id=item_id, success=False, error=UNEXPECTED_ITEM_ERROR))
            continue
        results.append(BulkItemResult(item_id=item_id, success=True))
    return results
