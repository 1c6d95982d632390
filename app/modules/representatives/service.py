import uuid
import logging
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.dates import is_underage
from app.core.errors import NotFound, InvalidOperation, Conflict
from app.modules.events.outbox import OutboxService, REPRESENTATIVE_STATUS_CHANGED
from app.modules.orders.service import OrderService
from app.modules.pending_actions.models import PendingActionType, PendingActionStatus
from app.modules.pending_actions.repository import PendingActionRepository
from app.modules.pending_actions.schemas import GeneratePendingActions
from app.modules.pending_actions.service import PendingActionService
from app.modules.representatives.models import PatientRepresentative, RepresentativeStatus
from app.modules.representatives.repository import RepresentativeRepository
from app.modules.representatives.schemas import RepresentativeOut
from app.modules.users.repository import UserRepository

log = logging.getLogger(__name__)

def _resolves(profile) -> bool:
    # logically deleted counter-parties no longer resolve
    if profile is None or profile.deleted_at is not None:
        return False
    return profile.user is None or profile.user.deleted_at is None

class RepresentativeService:
    """Invites, lists and removes patient representatives.

    A record ``(patient_profile_id, representative_profile_id)`` reads
    "patient is represented by representative". Status moves
    requested -> approved -> removed, and a removed (soft-deleted) record is
    restored to requested on re-invite instead of being duplicated.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        repo: RepresentativeRepository,
        users: UserRepository,
        orders: OrderService,
        pending_actions: PendingActionService,
        pending_action_repo: PendingActionRepository,
        outbox: OutboxService,
    ):
        self.session = session
        self.repo = repo
        self.users = users
        self.orders = orders
        self.pending_actions = pending_actions
        self.pending_action_repo = pending_action_repo
        self.outbox = outbox

    @classmethod
    def from_session(cls, session: AsyncSession) -> "RepresentativeService":
        pending_action_repo = PendingActionRepository(session)
        return cls(
            session,
            repo=RepresentativeRepository(session),
            users=UserRepository(session),
            orders=OrderService(session),
            pending_actions=PendingActionService(session, repo=pending_action_repo),
            pending_action_repo=pending_action_repo,
            outbox=OutboxService(session),
        )

    # ---- Queries ----
    async def get_represented(self, patient_profile_id: uuid.UUID) -> list[RepresentativeOut]:
        """Approved records in which ``patient_profile_id`` is the representative."""
        rows = await self.repo.list_for_representative(patient_profile_id, status=RepresentativeStatus.approved.value)
        return [RepresentativeOut.model_validate(r) for r in rows if _resolves(r.patient_profile)]

    async def get_representatives(self, patient_profile_id: uuid.UUID) -> list[RepresentativeOut]:
        """Every live record in which ``patient_profile_id`` is the represented party."""
        rows = await self.repo.list_for_patient(patient_profile_id)
        return [RepresentativeOut.model_validate(r) for r in rows if _resolves(r.representative_profile)]

    # ---- Commands ----
    async def create_representative(self, patient_profile_id: uuid.UUID, identity: str) -> list[RepresentativeOut]:
        user = await self.users.get_by_identity(identity)
        if not user or not user.patient_profile_id:
            raise NotFound("We could not find any existing user with that identity number.", {"identity": identity})
        if is_underage(user.birthdate):
            raise InvalidOperation("The user is underage and cannot be added as your representative.")
        if user.patient_profile_id == patient_profile_id:
            raise InvalidOperation("You cannot add yourself as a representative.")

        invite = await self.repo.find_pair(patient_profile_id, user.patient_profile_id)
        if invite:
            self._check_representative_status(invite)
            previous = invite.status
            invite.status = RepresentativeStatus.requested.value
            await self.repo.save(invite)
            await self.repo.restore(invite.id)
            await self._status_changed(invite, previous)
            log.info("Representative request %s restored to requested", invite.id)
        else:
            invite = await self.repo.create(
                user.org_id,
                patient_profile_id=patient_profile_id,
                representative_profile_id=user.patient_profile_id,
                status=RepresentativeStatus.requested.value,
            )
            await self._status_changed(invite, None)
            log.info("Representative request %s created", invite.id)

        pending = await self.pending_action_repo.find_open(
            patient_profile_id, invite.representative_profile_id, PendingActionType.approveRepresented.value
        )
        if pending:
            await self.pending_actions.resend_pending_actions(pending)
        else:
            me = await self.users.get_by_patient_profile(patient_profile_id)
            if not me:
                raise NotFound("No user is linked to your patient profile.", {"patient_profile_id": str(patient_profile_id)})
            await self.pending_actions.generate_users_pending_actions(
                GeneratePendingActions(user=me, action_type=PendingActionType.approveRepresented, invite=invite)
            )

        await self.session.commit()
        return await self.get_representatives(patient_profile_id)

    async def approve(self, patient_profile_id: uuid.UUID, relationship_id: uuid.UUID) -> list[RepresentativeOut]:
        """The invited representative accepts a pending request."""
        invite = await self.repo.get(relationship_id)
        if not invite or invite.representative_profile_id != patient_profile_id:
            raise NotFound("Representative request not found.", {"relationship_id": str(relationship_id)})
        if invite.status != RepresentativeStatus.requested.value:
            raise InvalidOperation("Only pending requests can be approved.")
        invite.status = RepresentativeStatus.approved.value
        await self.repo.save(invite)
        await self._status_changed(invite, RepresentativeStatus.requested.value)
        await self.pending_actions.complete(invite.patient_profile_id, patient_profile_id, PendingActionType.approveRepresented)
        log.info("Representative request %s approved", invite.id)
        await self.session.commit()
        return await self.get_represented(patient_profile_id)

    async def remove_representative(self, patient_profile_id: uuid.UUID, relationship_id: uuid.UUID) -> list[RepresentativeOut]:
        """The represented patient drops one of their representatives."""
        invite = await self.repo.get(relationship_id)
        # runs even when the record is missing
        await self.orders.update_orders_by_patient_representative(invite.representative_profile_id if invite else None)
        if invite:
            await self._mark_removed(invite)
        else:
            log.info("Representative record %s not found; nothing to remove", relationship_id)

        user = await self.users.get_by_patient_profile(patient_profile_id)
        representatives = await self.get_representatives(patient_profile_id)
        await self.handle_underage_user(user, representatives)
        await self.session.commit()
        return representatives

    async def remove_represented(self, patient_profile_id: uuid.UUID, relationship_id: uuid.UUID) -> list[RepresentativeOut]:
        """A representative stops representing one of their patients."""
        invite = await self.repo.get(relationship_id)
        await self.orders.update_orders_by_patient_representative(patient_profile_id)
        if invite:
            await self._mark_removed(invite)
            await self.repo.save(invite)
        else:
            log.info("Represented record %s not found; nothing to remove", relationship_id)

        represented_profile_id = invite.patient_profile_id if invite else patient_profile_id
        user = await self.users.get_by_patient_profile(represented_profile_id)
        representatives = await self.get_representatives(patient_profile_id)
        await self.handle_underage_user(user, representatives)
        await self.session.commit()
        return representatives

    async def delete_one(self, relationship_id: uuid.UUID, soft_delete: bool = False) -> bool:
        """Generic delete entry point. Physical deletes are rewritten as soft deletes."""
        soft_delete = True
        ok = await self.repo.delete(relationship_id, soft=soft_delete)
        if ok:
            await self.session.commit()
        return ok

    # ---- Safeguards ----
    async def handle_underage_user(self, user, representatives: Sequence) -> None:
        """A minor left without representatives is asked to add one."""
        if user is None:
            log.warning("Underage check skipped: acting user not found")
            return
        if is_underage(user.birthdate) and not representatives:
            log.info("Underage user %s has no representatives; requesting one", user.id)
            await self.pending_actions.generate_users_pending_actions(
                GeneratePendingActions(user=user, action_type=PendingActionType.addUnderageRepresentative)
            )

    async def _mark_removed(self, invite: PatientRepresentative) -> None:
        previous = invite.status
        invite.status = RepresentativeStatus.removed.value
        await self.repo.save(invite)
        await self.repo.soft_delete(invite.id)
        await self._status_changed(invite, previous)
        if previous == RepresentativeStatus.requested.value:
            # the invite can no longer be approved
            await self.pending_actions.complete(
                invite.patient_profile_id, invite.representative_profile_id,
                PendingActionType.approveRepresented, PendingActionStatus.dismissed,
            )
        log.info("Representative record %s removed", invite.id)

    async def _status_changed(self, invite: PatientRepresentative, previous: str | None) -> None:
        await self.outbox.enqueue(
            invite.org_id, REPRESENTATIVE_STATUS_CHANGED, "patient_representative", invite.id,
            {"from": previous, "to": invite.status,
             "patient_profile_id": str(invite.patient_profile_id),
             "representative_profile_id": str(invite.representative_profile_id)},
        )

    @staticmethod
    def _check_representative_status(invite: PatientRepresentative) -> None:
        if invite.status == RepresentativeStatus.requested.value:
            raise Conflict(
                "You already asked this person to be your representative. The request is awaiting confirmation.",
                {"relationship_id": str(invite.id)},
            )
        if invite.status == RepresentativeStatus.approved.value:
            raise Conflict("This representative is already registered.", {"relationship_id": str(invite.id)})
