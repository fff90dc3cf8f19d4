"""Authorization checks performed before privileged account operations."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class AccessPolicy:
    """Decide what a session holder may do to an account.

    Administrators may act on any account; everyone else only on their own.
    """

    admin_role = "admin"

    def is_admin(self, actor: Optional[Mapping[str, Any]]) -> bool:
        return bool(actor) and actor.get("role") == self.admin_role

    def is_owner(self, actor: Optional[Mapping[str, Any]], account_id: Any) -> bool:
        if not actor or actor.get("sub") is None:
            return False
        return str(actor["sub"]) == str(account_id)

    def can_delete(self, actor: Optional[Mapping[str, Any]], account_id: Any) -> bool:
        return self.is_admin(actor) or self.is_owner(actor, account_id)
