"""Single-default invariant maintenance for "owner has many, one is default".

For every owner with at least one member, exactly one member is flagged
default.  DefaultMemberService restores that invariant within the same
save as the mutation that could break it:

    create   requested default → clear every existing default first
             requested non-default on an owner with no members → forced default
    update   setting default → clear every other member's default first
    delete   no default left among the remaining members → promote the
             earliest-created remaining member (ties broken by id)

Clearing writes are staged before the write that sets the new default, and
the unit of work replays staged operations in order, so a store-level
"one default per owner" unique index is never tripped by our own batch.
A save rejected as a conflict (typically a concurrent request winning the
race on that index) is retried from a fresh read, backing off
exponentially between attempts.

Update does not repair an owner left without a default when a caller clears
the flag on the only default member; the next delete or make_default will.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.domain.models.base import AUDIT_FIELDS, DefaultMember, Entity
from src.domain.models.enums import FailureKind
from src.domain.models.results import Result
from src.domain.models.specification import Specification
from src.domain.repositories.base import Repository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=DefaultMember)
T = TypeVar("T")

# Fields a caller's update never overwrites on the stored member.
_PROTECTED_FIELDS = AUDIT_FIELDS | {"id", "entity_id", "row_version", "parent"}

# Back-off between attempts after a conflicting save.
DEFAULT_RETRY_WAIT = wait_exponential(multiplier=0.05, max=1)


def _is_conflict(result: Result) -> bool:
    return result.failed and result.kind is FailureKind.CONFLICT


def _last_result(state: RetryCallState) -> Result:
    return state.outcome.result()


def owner_spec(owner_id: UUID) -> Specification:
    """Every member of one owner, earliest-created first."""
    return Specification(
        criteria=lambda c: c.entity_id == owner_id,
        order_by=lambda c: (c.created_at, c.id),
    )


class DefaultMemberService(Generic[M]):
    """Create/update/delete members of one type while preserving the invariant.

    label is the human-readable member name used in messages
    ("contact number", "email address", ...).
    """

    def __init__(
        self,
        repository: Repository[M, UUID],
        *,
        label: str,
        owners: Repository[Entity, UUID] | None = None,
        retry_attempts: int = 3,
        retry_wait: wait_base = DEFAULT_RETRY_WAIT,
    ) -> None:
        if retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {retry_attempts}")
        self._repository = repository
        self._owners = owners
        self._label = label
        self._retry_attempts = retry_attempts
        self._retry_wait = retry_wait

    @property
    def label(self) -> str:
        return self._label

    def _not_found(self, member_id: UUID) -> Result:
        return Result.fail(
            f"No {self._label} with id matching '{member_id}' was found in the database",
            kind=FailureKind.NOT_FOUND,
        )

    def _abandon(self, failure: Result) -> Result:
        self._repository.discard()
        return Result.propagate(failure)

    async def _with_retry(self, attempt: Callable[[], Awaitable[Result[T]]]) -> Result[T]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=self._retry_wait,
            retry=retry_if_result(_is_conflict),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=_last_result,
        )
        result = await retrying(attempt)
        if _is_conflict(result):
            logger.warning(
                "Giving up saving %s after %d attempts: %s",
                self._label,
                self._retry_attempts,
                "; ".join(result.messages),
            )
        return result

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def list_for_owner(self, owner_id: UUID) -> Result[list[M]]:
        return await self._repository.list(owner_spec(owner_id))

    async def get(self, member_id: UUID) -> Result[M]:
        found = await self._repository.find_by_id(member_id)
        if found.failed:
            return found
        if found.data is None:
            return self._not_found(member_id)
        return found

    async def default_for_owner(self, owner_id: UUID) -> Result[M]:
        """The owner's default member; success with None when the owner has none."""
        spec = owner_spec(owner_id).where(lambda c: c.default.is_(True))
        return await self._repository.first_or_default(spec)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def create(self, member: M) -> Result[M]:
        if self._owners is not None:
            owner_exists = await self._owners.exists_by_id(member.entity_id)
            if owner_exists.failed:
                return Result.propagate(owner_exists)
            if not owner_exists.data:
                return Result.fail(
                    f"No owner with id matching '{member.entity_id}' was found in the database",
                    kind=FailureKind.NOT_FOUND,
                )
        requested_default = member.default
        return await self._with_retry(lambda: self._create_once(member, requested_default))

    async def _create_once(self, member: M, requested_default: bool) -> Result[M]:
        existing = await self._repository.list(owner_spec(member.entity_id), track_changes=True)
        if existing.failed:
            return self._abandon(existing)

        member.default = requested_default
        if requested_default:
            for current in existing.data:
                if current.default:
                    current.default = False
                    staged = await self._repository.update(current)
                    if staged.failed:
                        return self._abandon(staged)
        elif not existing.data:
            logger.debug("First %s for owner %s becomes the default", self._label, member.entity_id)
            member.default = True

        created = await self._repository.create(member)
        if created.failed:
            return self._abandon(created)
        saved = await self._repository.save()
        if saved.failed:
            return Result.propagate(saved)
        return Result.success(member, f"{self._label.capitalize()} was successfully created")

    async def update(self, member: M) -> Result[M]:
        return await self._with_retry(lambda: self._update_once(member))

    async def _update_once(self, member: M) -> Result[M]:
        found = await self._repository.find_by_id(member.id, track_changes=True)
        if found.failed:
            return self._abandon(found)
        current = found.data
        if current is None:
            return self._not_found(member.id)
        if member.entity_id != current.entity_id:
            return Result.fail(
                f"A {self._label} cannot be moved to another owner",
                kind=FailureKind.VALIDATION,
            )

        if member.default:
            siblings = await self._repository.list(owner_spec(current.entity_id), track_changes=True)
            if siblings.failed:
                return self._abandon(siblings)
            for sibling in siblings.data:
                if sibling.id != current.id and sibling.default:
                    sibling.default = False
                    staged = await self._repository.update(sibling)
                    if staged.failed:
                        return self._abandon(staged)

        for name in type(member).model_fields:
            if name not in _PROTECTED_FIELDS:
                setattr(current, name, getattr(member, name))
        updated = await self._repository.update(current)
        if updated.failed:
            return self._abandon(updated)
        saved = await self._repository.save()
        if saved.failed:
            return Result.propagate(saved)
        return Result.success(current, f"{self._label.capitalize()} was successfully updated")

    async def make_default(self, member_id: UUID) -> Result[M]:
        found = await self.get(member_id)
        if found.failed:
            return found
        return await self.update(found.data.model_copy(update={"default": True}))

    async def delete(self, member_id: UUID) -> Result[None]:
        return await self._with_retry(lambda: self._delete_once(member_id))

    async def _delete_once(self, member_id: UUID) -> Result[None]:
        found = await self._repository.find_by_id(member_id, track_changes=True)
        if found.failed:
            return self._abandon(found)
        target = found.data
        if target is None:
            return self._not_found(member_id)

        siblings = await self._repository.list(owner_spec(target.entity_id), track_changes=True)
        if siblings.failed:
            return self._abandon(siblings)
        remaining = [m for m in siblings.data if m.id != target.id]

        deleted = await self._repository.delete(target)
        if deleted.failed:
            return self._abandon(deleted)
        if remaining and not any(m.default for m in remaining):
            successor = remaining[0]
            if not target.default:
                logger.warning(
                    "Owner %s had no default %s; promoting %s",
                    target.entity_id,
                    self._label,
                    successor.id,
                )
            successor.default = True
            staged = await self._repository.update(successor)
            if staged.failed:
                return self._abandon(staged)

        saved = await self._repository.save()
        if saved.failed:
            return Result.propagate(saved)
        return Result.success(None, f"{self._label.capitalize()} was successfully removed")
