from polyclinic.core.persistence.cascade import CascadeAction, CascadeCoordinator, CascadeRule
from polyclinic.core.persistence.merge import MergeUpdater, merge
from polyclinic.core.persistence.store import STORE_EXCLUDED_EXCEPTIONS, StoreGuard

__all__ = [
    "CascadeAction",
    "CascadeCoordinator",
    "CascadeRule",
    "MergeUpdater",
    "STORE_EXCLUDED_EXCEPTIONS",
    "StoreGuard",
    "merge",
]
