"""Account and workgroup aggregation.

IdentityNow exposes roles on the account detail but workgroup membership only
on each workgroup's roster, and some accounts appear only as workgroup
members. The three helpers below rebuild a complete per-account view:

    WorkgroupAggregator            -> workgroup index (workgroups + rosters)
    AccountEnumerationReconciler   -> every account id to list
    AccountAssembler               -> one Account with roles + workgroups

The workgroup index is a snapshot owned by a single handler invocation. Build
it once per logical operation and pass it to every assemble() call.
"""
from __future__ import annotations
import logging
from typing import Iterable, List

from .models import Account, Workgroup, WorkgroupMember

logger = logging.getLogger(__name__)


class WorkgroupAggregator:
    """Enumerate workgroups and attach each one's membership roster."""

    def __init__(self, gateway):
        self.gateway = gateway

    def list_workgroups_with_members(self) -> List[Workgroup]:
        """Fetch every workgroup, then its members (one call each, sequentially).

        Any failing roster fetch aborts the whole aggregation; a partial index
        would silently under-report entitlements.
        """
        index: List[Workgroup] = []
        for raw in self.gateway.workgroups.list_workgroups():
            workgroup = Workgroup.from_raw(raw)
            roster = self.gateway.workgroups.get_workgroup_members(workgroup.id)
            workgroup.members = [WorkgroupMember.from_raw(m) for m in roster]
            index.append(workgroup)
        logger.debug("Aggregated %d workgroup(s)", len(index))
        return index


class AccountAssembler:
    """Combine an account's native roles with the workgroups listing it."""

    def __init__(self, gateway):
        self.gateway = gateway

    def assemble(self, account_id: str, workgroup_index: Iterable[Workgroup]) -> Account:
        """Fetch account detail and compute its effective entitlements.

        ``groups`` is the native roles followed by matching workgroup ids, in
        index order. Entries are concatenated, not de-duplicated.
        """
        account = Account.from_detail(self.gateway.accounts.get_account(account_id))
        assigned: List[str] = []
        if account.external_id:
            assigned = [w.id for w in workgroup_index if w.has_member(account.external_id)]
        account.groups = account.groups + assigned
        return account


class AccountEnumerationReconciler:
    """Compute the universe of account identifiers to list."""

    def __init__(self, gateway):
        self.gateway = gateway

    def enumerate_account_ids(self, workgroup_index: Iterable[Workgroup]) -> List[str]:
        """Union of listed account names and every workgroup member alias.

        Duplicates collapse to one entry. Order is listing first, then roster
        order, but callers should treat the result as a set.
        """
        seen: dict[str, None] = {}
        for raw in self.gateway.accounts.list_accounts():
            name = raw.get("name")
            if name:
                seen.setdefault(name, None)
        for workgroup in workgroup_index:
            for member in workgroup.members:
                if member.alias:
                    seen.setdefault(member.alias, None)
        return list(seen)
