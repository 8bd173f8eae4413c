"""
Capability checks over an AuthContext.

Each rule is a plain function of the context and the data it guards; the
routes call `ensure` with the result to raise the right error.
"""

from polyclinic.core.domain import AccessDeniedException, Authority, AuthenticationRequiredException
from polyclinic.core.security.context import AuthContext


def ensure(allowed: bool, ctx: AuthContext, action: str) -> None:
    """
    Raise when a capability check failed.

    Anonymous callers get AuthenticationRequired (401), authenticated ones
    AccessDenied (403).
    """
    if allowed:
        return
    if not ctx.is_authenticated:
        raise AuthenticationRequiredException()
    raise AccessDeniedException(f"Not allowed to {action}", action=action)


def require_authenticated(ctx: AuthContext) -> None:
    if not ctx.is_authenticated:
        raise AuthenticationRequiredException()


def require_any_authority(ctx: AuthContext, *authorities: Authority, action: str = "perform this action") -> None:
    ensure(ctx.is_authenticated and ctx.has_authority(*authorities), ctx, action)


def can_modify_client(ctx: AuthContext, client_email: str | None) -> bool:
    """Top managers and the client themselves."""
    if not ctx.is_authenticated:
        return False
    return ctx.has_authority(Authority.TOP_MANAGER) or ctx.is_owner(client_email)


def can_modify_employee(ctx: AuthContext, employee_email: str | None) -> bool:
    """Top managers, team managers and the employee themselves."""
    if not ctx.is_authenticated:
        return False
    if ctx.has_authority(Authority.TOP_MANAGER, Authority.TEAM_MANAGER):
        return True
    return ctx.is_owner(employee_email)


def can_view_record(ctx: AuthContext, client_email: str | None, doctor_email: str | None) -> bool:
    """
    Registrations and results are visible to their client, their doctor and
    top managers. An unresolved person never grants access.
    """
    if not ctx.is_authenticated:
        return False
    if ctx.has_authority(Authority.USER):
        return ctx.is_owner(client_email)
    if ctx.has_authority(Authority.DOCTOR):
        return ctx.is_owner(doctor_email)
    return ctx.has_authority(Authority.TOP_MANAGER)


def can_modify_record(ctx: AuthContext, client_email: str | None, doctor_email: str | None) -> bool:
    """
    Writes to a registration or result follow its visibility: its client,
    its doctor or a top manager.

    With both emails None only a top manager passes, so callers can skip
    resolving the people for one.
    """
    return can_view_record(ctx, client_email, doctor_email)
