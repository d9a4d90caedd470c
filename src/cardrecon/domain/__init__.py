"""Domain layer for cardrecon application."""

# Services import the database interface, which itself imports domain
# entities, so services are resolved lazily.
_SERVICES = {
    "BillingCycleService": "cardrecon.domain.billing_cycle",
    "CandidateFinder": "cardrecon.domain.candidates",
    "ReconciliationService": "cardrecon.domain.reconciliation",
    "ManualLinkService": "cardrecon.domain.manual_link",
    "AutoTriggerHook": "cardrecon.domain.auto_trigger",
    "TransactionService": "cardrecon.domain.transaction",
    "CreditCardImportService": "cardrecon.domain.cc_import",
    "UserService": "cardrecon.domain.user",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
