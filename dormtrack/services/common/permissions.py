"""
Authorization policies.

Each operation declares one ``AccessPolicy``: the roles allowed to call
it and, optionally, the relation the caller must have to the report.
Checks happen here and nowhere else, so endpoints never compare role
strings themselves.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from dormtrack.core.exceptions import ForbiddenError
from dormtrack.core.security import Identity
from dormtrack.models.enums import UserRole
from dormtrack.models.report import Report


class Relation(str, Enum):
    """Required relation between the caller and the report."""
    ANY = "any"
    OWNER = "owner"
    ASSIGNEE = "assignee"
    OWNER_OR_ASSIGNEE = "owner_or_assignee"


def relation_holds(relation: Relation, identity: Identity, report: Report) -> bool:
    if relation is Relation.ANY:
        return True
    if relation is Relation.OWNER:
        return report.is_owned_by(identity.id)
    if relation is Relation.ASSIGNEE:
        return report.is_assigned_to(identity.id)
    return report.is_owned_by(identity.id) or report.is_assigned_to(identity.id)


@dataclass(frozen=True)
class AccessPolicy:
    """
    Roles allowed to perform an operation, plus an ownership predicate.

    Attributes:
        name: Operation name used in error messages and logs
        roles: Roles allowed at all
        relation: Relation required between caller and report
        unscoped_roles: Roles exempt from the relation requirement
    """
    name: str
    roles: FrozenSet[UserRole]
    relation: Relation = Relation.ANY
    unscoped_roles: FrozenSet[UserRole] = field(default_factory=frozenset)

    def allows_role(self, identity: Identity) -> bool:
        return identity.has_any_role(self.roles)

    def require_role(self, identity: Identity) -> None:
        """
        Raises:
            ForbiddenError: If the caller's role is not allowed
        """
        if not self.allows_role(identity):
            raise ForbiddenError(
                f"Role {identity.role.value} may not {self.name}",
                details={"operation": self.name, "role": identity.role.value},
            )

    def relation_for(self, identity: Identity) -> Relation:
        """Relation that applies to this caller."""
        if identity.role in self.unscoped_roles:
            return Relation.ANY
        return self.relation

    def enforce(self, identity: Identity, report: Report) -> None:
        """
        Raises:
            ForbiddenError: If the caller lacks the role or the relation
        """
        self.require_role(identity)
        if not relation_holds(self.relation_for(identity), identity, report):
            raise ForbiddenError(
                f"Not allowed to {self.name} this report",
                details={"operation": self.name, "report_id": report.id},
            )


def policy(
    name: str,
    roles: Iterable[UserRole],
    relation: Relation = Relation.ANY,
    unscoped_roles: Optional[Iterable[UserRole]] = None,
) -> AccessPolicy:
    return AccessPolicy(
        name=name,
        roles=frozenset(roles),
        relation=relation,
        unscoped_roles=frozenset(unscoped_roles or ()),
    )


ADMIN = UserRole.ADMIN
USER = UserRole.USER
TEKNISI = UserRole.TEKNISI

# Transitions
CREATE_REPORT = policy("create reports", [USER])
RECEIVE_REPORT = policy("receive reports", [ADMIN])
ASSIGN_REPORT = policy("assign reports", [ADMIN])
START_REPORT = policy("start reports", [TEKNISI], Relation.ASSIGNEE)
RESOLVE_REPORT = policy("resolve reports", [TEKNISI], Relation.ASSIGNEE)
REJECT_REPORT = policy("reject reports", [ADMIN])
EDIT_REPORT = policy("edit reports", [USER], Relation.OWNER)
DELETE_REPORT = policy("delete reports", [USER, ADMIN], Relation.OWNER, unscoped_roles=[ADMIN])

# Reads
VIEW_REPORT = policy("view reports", [USER, ADMIN, TEKNISI], Relation.OWNER_OR_ASSIGNEE, unscoped_roles=[ADMIN])
LIST_REPORTS = policy("list reports", [USER, ADMIN], Relation.OWNER, unscoped_roles=[ADMIN])
VIEW_STATS = policy("view statistics", [ADMIN])
LIST_TECHNICIANS = policy("list technicians", [ADMIN])
VIEW_OWN_TASKS = policy("view technician tasks", [TEKNISI])
