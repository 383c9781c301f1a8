"""Shared plumbing for services: store access through the upstream wrapper."""

from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import ClaimTrackerError, ValidationFailed
from claim_tracker.utils.retry import UpstreamCaller

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


def parse_input(model: type[M], data: Any) -> M:
    """Validate data into model, converting pydantic errors to ValidationFailed."""
    if isinstance(data, model):
        return data
    if data is None:
        data = {}
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e) from None


class BaseService:
    """Holds the record store and the upstream caller used for every store call."""

    def __init__(self, store: RecordStore, upstream: UpstreamCaller):
        self._store = store
        self._upstream = upstream

    def _call(
        self,
        operation: str,
        func: Callable[..., T],
        *args: Any,
        timeout: Optional[float] = None,
        on_conflict: Optional[ClaimTrackerError] = None,
        **kwargs: Any,
    ) -> T:
        return self._upstream.call(
            operation, func, *args, timeout=timeout, on_conflict=on_conflict, **kwargs
        )

    def _find(self, collection: str, timeout: Optional[float] = None, **predicate: Any):
        return self._call(f"find:{collection}", self._store.find, collection, timeout=timeout, **predicate)

    def _list(self, collection: str, timeout: Optional[float] = None, **predicate: Any):
        return self._call(f"list:{collection}", self._store.list, collection, timeout=timeout, **predicate)

    def _count(self, collection: str, timeout: Optional[float] = None, **predicate: Any) -> int:
        return self._call(f"count:{collection}", self._store.count, collection, timeout=timeout, **predicate)
