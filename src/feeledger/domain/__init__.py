"""Domain layer for feeledger application."""

# Services are imported lazily: feeledger.config and the database layer
# import feeledger.domain.errors and feeledger.domain.entities directly.
_SERVICES = {
    "AttachmentLinker": "feeledger.domain.attachment",
    "AuditRecorder": "feeledger.domain.audit",
    "CategoryRegistry": "feeledger.domain.category",
    "MembershipService": "feeledger.domain.membership",
    "PaymentStatusService": "feeledger.domain.status",
    "StatusPropagator": "feeledger.domain.propagation",
    "SummaryService": "feeledger.domain.summary",
    "TransactionNumberGenerator": "feeledger.domain.numbering",
    "TransactionRecorder": "feeledger.domain.recorder",
}

__all__ = sorted(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
