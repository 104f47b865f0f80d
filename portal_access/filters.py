"""
Query scoping filters derived from a CapabilitySet.
"""

from typing import Dict, Union

from portal_access.models import CapabilitySet

Scalar = Union[str, int]


class ScopeFilters(dict):
    """Query parameters restricting a listing to what the actor may see.

    An empty unrestricted filter means "everything"; a restricted filter
    that cannot name any scope means "nothing", and callers should skip the
    request instead of sending it without parameters.
    """

    def __init__(self, params: Dict[str, Scalar] = None, restricted: bool = True):
        super().__init__(params or {})
        self.restricted = restricted

    @property
    def matches_nothing(self) -> bool:
        if not self.restricted:
            return False
        return not any(value not in ("", None) for value in self.values())

    def query_params(self) -> Dict[str, Scalar]:
        return dict(self)

    def __repr__(self):
        return f"ScopeFilters({dict.__repr__(self)}, restricted={self.restricted})"


def build_filters(capabilities: CapabilitySet) -> ScopeFilters:
    """Build the scoping filter map to attach to outbound queries."""
    if capabilities.has_full_access:
        return ScopeFilters(restricted=False)

    if capabilities.is_partner:
        if capabilities.partner_id is None:
            return ScopeFilters()
        return ScopeFilters({"partner_id": capabilities.partner_id})

    if capabilities.is_operator:
        ids = capabilities.assigned_service_point_ids or ()
        # Explicit empty value: an operator without assignments sees nothing.
        return ScopeFilters({"service_point_ids": ",".join(str(i) for i in ids)})

    if capabilities.is_client:
        if capabilities.client_id is None:
            return ScopeFilters()
        return ScopeFilters({"client_id": capabilities.client_id})

    return ScopeFilters()
