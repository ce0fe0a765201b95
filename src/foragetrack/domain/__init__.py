"""Domain layer for foragetrack application.

Services are resolved lazily: the database layer imports
foragetrack.domain.entities, and importing the services here eagerly would
import the database layer back before it has finished loading.
"""

import importlib

_SERVICES = {
    "UserService": "foragetrack.domain.users",
    "PriceService": "foragetrack.domain.prices",
    "LedgerService": "foragetrack.domain.ledger",
    "InventoryService": "foragetrack.domain.inventory",
    "AggregationService": "foragetrack.domain.aggregation",
    "IntegrityAuditor": "foragetrack.domain.audit",
    "LegacyImportService": "foragetrack.domain.legacy",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
