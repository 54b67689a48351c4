from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from supplier_api.abac import AccessControlResult, SubjectAttributes


@dataclass(frozen=True)
class AuthorizedRequest:
    """
    What a route handler receives once ``require_permission`` has granted access.

    ``resource`` is the loaded record (ORM instance) when the check was
    resource-scoped, else None.
    """

    subject: SubjectAttributes
    result: AccessControlResult
    resource: Any = None
