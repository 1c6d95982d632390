import uuid
import logging
from datetime import datetime, timezone
from typing import Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, InvalidOperation
from app.modules.events.outbox import OutboxService, PENDING_ACTION_CREATED, PENDING_ACTION_RESENT
from app.modules.pending_actions.models import PendingAction, PendingActionType, PendingActionStatus
from app.modules.pending_actions.repository import PendingActionRepository
from app.modules.pending_actions.schemas import GeneratePendingActions

log = logging.getLogger(__name__)

def _now() -> datetime:
    return datetime.now(timezone.utc)

class PendingActionService:
    """Creates, resends and closes pending actions.

    Writes are flushed, never committed: the calling service owns the
    transaction. Delivery happens through the outbox relay.
    """

    def __init__(self, session: AsyncSession, repo: PendingActionRepository | None = None, outbox: OutboxService | None = None):
        self.session = session
        self.repo = repo or PendingActionRepository(session)
        self.outbox = outbox or OutboxService(session)

    async def generate_users_pending_actions(self, data: GeneratePendingActions) -> list[PendingAction]:
        user = data.user
        action_type = PendingActionType(data.action_type)
        if action_type == PendingActionType.approveRepresented:
            if data.invite is None:
                raise ValueError("approveRepresented requires an invite")
            sender = user.patient_profile_id
            target = data.invite.representative_profile_id
            payload = {"invite_id": str(data.invite.id)}
        else:
            # the user must act on their own account
            sender = None
            target = user.patient_profile_id
            payload = {"user_id": str(user.id)}
        if target is None:
            raise InvalidOperation("The user has no patient profile to notify.")

        action = await self.repo.create(
            user.org_id,
            sender_profile_id=sender,
            patient_profile_id=target,
            action_type=action_type.value,
            status=PendingActionStatus.pending.value,
            payload=payload,
            sent_count=1,
            last_sent_at=_now(),
        )
        await self.outbox.enqueue(
            action.org_id, PENDING_ACTION_CREATED, "pending_action", action.id,
            {"action_type": action.action_type, "patient_profile_id": str(target),
             "sender_profile_id": str(sender) if sender else None, **payload},
        )
        log.info("Pending action %s created for profile %s", action.action_type, target)
        return [action]

    async def resend_pending_actions(self, actions: Iterable[PendingAction]) -> list[PendingAction]:
        resent = []
        for action in actions:
            action.sent_count = (action.sent_count or 0) + 1
            action.last_sent_at = _now()
            await self.repo.save(action)
            await self.outbox.enqueue(
                action.org_id, PENDING_ACTION_RESENT, "pending_action", action.id,
                {"action_type": action.action_type, "patient_profile_id": str(action.patient_profile_id),
                 "sent_count": action.sent_count},
            )
            resent.append(action)
        log.info("Resent %d pending action(s)", len(resent))
        return resent

    async def complete(self, sender_profile_id: uuid.UUID | None, patient_profile_id: uuid.UUID, action_type: PendingActionType,
                       status: PendingActionStatus = PendingActionStatus.done) -> int:
        """Close every open action matching sender, target and type with ``status``."""
        actions = await self.repo.find_open(sender_profile_id, patient_profile_id, action_type.value)
        for action in actions:
            action.status = status.value
            await self.repo.save(action)
        return len(actions)

    async def list_for_profile(self, patient_profile_id: uuid.UUID):
        return await self.repo.list_for_profile(patient_profile_id)

    async def dismiss(self, patient_profile_id: uuid.UUID, action_id: uuid.UUID) -> PendingAction:
        action = await self.repo.get(action_id)
        if not action or action.patient_profile_id != patient_profile_id:
            raise NotFound("Pending action not found", {"pending_action_id": str(action_id)})
        if action.status != PendingActionStatus.pending.value:
            raise InvalidOperation("The pending action is already closed.")
        action.status = PendingActionStatus.dismissed.value
        await self.repo.save(action)
        await self.session.commit()
        return action
