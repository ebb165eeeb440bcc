"""
Branch access rules.

Admins may act on any branch; restricted roles only on the branch they are
assigned to.
"""
from typing import Optional

from backoffice.core.exceptions import AccessDeniedError
from backoffice.models.user import User


def can_access_branch(actor: User, branch_id: Optional[int]) -> bool:
    if actor.is_admin:
        return True
    return actor.branch_id is not None and actor.branch_id == branch_id


def ensure_branch_access(actor: User, branch_id: Optional[int]) -> None:
    if not can_access_branch(actor, branch_id):
        raise AccessDeniedError("You do not have access to this branch.")
