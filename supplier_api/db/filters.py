from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, with_loader_criteria

from supplier_api.db.base import SoftDeleteMixin


@event.listens_for(Session, "do_orm_execute")
def _hide_soft_deleted_rows(execute_state) -> None:
    """
    Transparent soft-delete filtering.

    Every ORM select (including joins and relationship loads) skips rows whose
    ``deleted_at`` is set. Opt out per statement with
    ``.execution_options(include_deleted=True)``.
    """

    if (
        not execute_state.is_select
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get("include_deleted", False)
    ):
        return

    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            SoftDeleteMixin,
            lambda cls: cls.deleted_at.is_(None),
            include_aliases=True,
        )
    )
