from dormtrack.services.common.permissions import AccessPolicy, Relation, relation_holds
from dormtrack.services.common.unit_of_work import UnitOfWork

__all__ = ["AccessPolicy", "Relation", "UnitOfWork", "relation_holds"]
