"""
Authority gate for rate updates.

A `Permission` record binds an authority to one pool. The host looks it up
(account storage is outside this package) and checks it before any rate
update reaches the validator:

- `can_update_parameters` allows `process_rate_update`;
- `is_super_admin` allows the separate `max_ssr` administrative path.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import UnauthorizedUpdateError


@dataclass(frozen=True)
class Permission:
    """Permission of `authority` over the pool identified by `pool_id`."""

    pool_id: str
    authority: str
    is_super_admin: bool = False
    can_update_parameters: bool = False


def require_authority(permission: Permission, *, pool_id: str, signer: str) -> None:
    """The permission must belong to this pool and to the signing authority."""
    if permission.pool_id != pool_id:
        raise UnauthorizedUpdateError("permission_pool_mismatch", None, f"{permission.pool_id} != {pool_id}")
    if permission.authority != signer:
        raise UnauthorizedUpdateError("permission_authority_mismatch", None, f"{permission.authority} != {signer}")


def validate_update_params_permission(permission: Permission) -> None:
    if not permission.can_update_parameters:
        raise UnauthorizedUpdateError("missing_update_parameters_permission")


def validate_super_admin_permission(permission: Permission) -> None:
    if not permission.is_super_admin:
        raise UnauthorizedUpdateError("missing_super_admin_permission")
