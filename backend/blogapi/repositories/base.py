"""Generic repository base and query utilities for SQLAlchemy 2.x.

Persistence-only concerns shared by all repositories:

- Pagination value objects and a counting paginator.
- Safe sorting through a per-repository whitelist (no raw column names from
  clients ever reach ``ORDER BY``).
- Soft-delete awareness: models carrying ``deleted_at`` are filtered out of
  every read and are marked instead of removed on delete.
- Update helpers restricted to an explicit updatable-field whitelist.

Repositories never commit or roll back; the Unit of Work owns transactions.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from blogapi.core.extensions import db
from blogapi.models.base import utcnow

E = TypeVar("E")  # SQLAlchemy mapped entity type


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number.
    :param page_size: Items per page.
    :param sort: Public sort tokens (e.g., ``["-created_at", "title"]``).
    """

    page: int
    page_size: int
    sort: list[str]

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.page_size, 1)


@dataclass(slots=True)
class Page(Generic[E]):
    """Result page with metadata."""

    items: Sequence[E]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total / self.page_size)


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples."""
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        name = (token[1:] if is_desc else token).strip()
        if name:
            parsed.append((name, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    default: Sequence[Any] = (),
    pk_attr: InstrumentedAttribute[Any] | None = None,
) -> Select[Any]:
    """Apply whitelisted ``ORDER BY`` clauses.

    Unknown tokens are ignored. ``default`` orders are used when no token
    matched, and the primary key is appended as a final tiebreaker so pages
    are stable.
    """
    orders: list[Any] = []
    for name, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(name)
        if col is not None:
            orders.append(col.desc() if is_desc else col.asc())
    if not orders:
        orders.extend(default)
    if pk_attr is not None:
        orders.append(pk_attr.asc())
    return stmt.order_by(*orders) if orders else stmt


def paginate_select(
    session: Session,
    stmt: Select[Any],
    pagination: Pagination,
) -> tuple[list[Any], int]:
    """Execute ``stmt`` for one page and return ``(items, total)``.

    The ``COUNT`` runs on the statement with its ``ORDER BY`` stripped.
    """
    page_size = max(int(pagination.page_size), 1)
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())
    sliced = stmt.limit(page_size).offset(pagination.offset)
    items = list(session.execute(sliced).unique().scalars().all())
    return items, total


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses set ``model`` and may override the ``_sortable_fields``,
    ``_default_order``, ``_default_eagerload`` and ``_updatable_fields``
    hooks.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Bind to ``session``, or to the Flask-scoped session when omitted."""
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Hooks ------------------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _default_order(self) -> Sequence[Any]:
        created = getattr(self.model, "created_at", None)
        return (created.desc(),) if created is not None else ()

    def _updatable_fields(self) -> set[str]:
        return set()

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        return cast(InstrumentedAttribute[Any], getattr(self.model, "id"))

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    # ----------------------------- Internals ---------------------------------

    def _live(self) -> list[ColumnElement[bool]]:
        """Criteria excluding soft-deleted rows (empty for hard-delete models)."""
        if not self.soft_deletes:
            return []
        return [getattr(self.model, "deleted_at").is_(None)]

    def _select(self, *criteria: ColumnElement[bool]) -> Select[Any]:
        stmt = select(self.model).where(*self._live(), *criteria)
        return self._default_eagerload(stmt)

    def _first(self, stmt: Select[Any]) -> E | None:
        return cast(E | None, self.session.execute(stmt).unique().scalars().first())

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so defaults and the PK materialize."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Return the live entity with primary key ``entity_id`` or ``None``."""
        return self._first(self._select(self._pk_attr() == entity_id))

    def delete(self, instance: E) -> None:
        """Soft-delete when the model supports it, hard-delete otherwise."""
        if self.soft_deletes:
            setattr(instance, "deleted_at", utcnow())
        else:
            self.session.delete(instance)
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any]) -> E:
        """Assign whitelisted keys and flush.

        ``setattr`` keeps SQLAlchemy ``@validates`` hooks in the loop.

        :raises ValueError: On keys outside ``_updatable_fields()``.
        """
        allowed = self._updatable_fields()
        unknown = sorted(k for k in fields if k not in allowed)
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.session.flush()
        return instance

    def paginate(
        self,
        pagination: Pagination,
        *criteria: ColumnElement[bool],
    ) -> Page[E]:
        """Return one page of live entities matching ``criteria``."""
        stmt = apply_sorting(
            self._select(*criteria),
            self._sortable_fields(),
            pagination.sort,
            default=self._default_order(),
            pk_attr=self._pk_attr(),
        )
        items, total = paginate_select(self.session, stmt, pagination)
        return Page(
            items=cast(list[E], items),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
