"""
Shared helpers for API routes.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Sequence, TypeVar

from fastapi import HTTPException, status

from noirkit.services.data_service import (
    ConstraintViolationError,
    DataServiceError,
    UnauthenticatedError,
    WriteRejectedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate store and data-service failures into HTTP errors."""
    try:
        yield
    except UnauthenticatedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except WriteRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from exc
    except ConstraintViolationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Conflicts with existing data") from exc
    except DataServiceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Data service error") from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def order_by_ids(items: Sequence[T], ids: Sequence[str]) -> List[T]:
    """Items rearranged to follow `ids`, which must name each item exactly once."""
    by_id = {item.id: item for item in items}
    if len(ids) != len(by_id) or set(ids) != set(by_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ids must list every item of the collection exactly once",
        )
    return [by_id[i] for i in ids]
