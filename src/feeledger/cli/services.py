"""Construction of domain services from the CLI context."""

import click

from feeledger.domain.attachment import AttachmentLinker
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.membership import MembershipService
from feeledger.domain.recorder import TransactionRecorder


def audit_recorder(ctx: click.Context) -> AuditRecorder:
    return AuditRecorder(ctx.obj["db"])


def membership_service(ctx: click.Context) -> MembershipService:
    return MembershipService(ctx.obj["db"], audit_recorder(ctx))


def transaction_recorder(ctx: click.Context) -> TransactionRecorder:
    return TransactionRecorder(ctx.obj["db"], audit=audit_recorder(ctx), settings=ctx.obj["settings"])


def attachment_linker(ctx: click.Context) -> AttachmentLinker:
    return AttachmentLinker(ctx.obj["db"], audit_recorder(ctx))
