"""Pytest configuration and in-memory collaborators.

Service tests run against fake repositories that mirror the method names of
the SQLAlchemy repositories, so no database is needed.
"""

import uuid
from datetime import date, datetime, timezone

import pytest

from app.core.errors import Conflict
from app.modules.pending_actions.models import PendingActionStatus


class Obj:
    """Attribute bag standing in for an ORM row."""

    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


def years_ago(years: int, extra_days: int = 0) -> date:
    today = date.today()
    try:
        d = today.replace(year=today.year - years)
    except ValueError:
        d = today.replace(year=today.year - years, day=28)
    return date.fromordinal(d.toordinal() - extra_days)


ORG = uuid.UUID(int=1)


class FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class World:
    """Profiles and users known to the fake user directory."""

    def __init__(self):
        self.profiles: dict[uuid.UUID, Obj] = {}
        self.users: list[Obj] = []

    def person(self, identity: str, birthdate: date, *, with_profile: bool = True, first_name: str = "Test") -> Obj:
        profile = None
        if with_profile:
            profile = Obj(id=uuid.uuid4(), first_name=first_name, last_name=identity, user=None, deleted_at=None)
            self.profiles[profile.id] = profile
        user = Obj(
            id=uuid.uuid4(),
            org_id=ORG,
            identity=identity,
            email=f"{identity}@example.org",
            birthdate=birthdate,
            password_hash="$2b$12$not-a-real-hash",
            patient_profile_id=profile.id if profile else None,
            patient_profile=profile,
            deleted_at=None,
        )
        if profile:
            profile.user = user
        self.users.append(user)
        return user


class FakeUserRepository:
    def __init__(self, world: World):
        self.world = world

    async def get_by_identity(self, identity):
        return next((u for u in self.world.users if u.identity == identity and u.deleted_at is None), None)

    async def get_by_patient_profile(self, patient_profile_id):
        return next(
            (u for u in self.world.users if u.patient_profile_id == patient_profile_id and u.deleted_at is None),
            None,
        )


class FakeRepresentativeRepository:
    def __init__(self, world: World):
        self.world = world
        self.records: dict[uuid.UUID, Obj] = {}
        self.saves = 0
        self.calls: list[str] = []

    def _attach(self, r):
        r.patient_profile = self.world.profiles.get(r.patient_profile_id)
        r.representative_profile = self.world.profiles.get(r.representative_profile_id)
        return r

    def add(self, patient_profile_id, representative_profile_id, status, deleted=False):
        now = datetime.now(timezone.utc)
        r = Obj(
            id=uuid.uuid4(),
            org_id=ORG,
            patient_profile_id=patient_profile_id,
            representative_profile_id=representative_profile_id,
            status=status,
            created_at=now,
            updated_at=now,
            deleted_at=now if deleted else None,
        )
        self.records[r.id] = self._attach(r)
        return r

    def live(self):
        return [r for r in self.records.values() if r.deleted_at is None]

    async def list_for_representative(self, representative_profile_id, status=None):
        return [
            self._attach(r) for r in self.live()
            if r.representative_profile_id == representative_profile_id and (status is None or r.status == status)
        ]

    async def list_for_patient(self, patient_profile_id):
        return [self._attach(r) for r in self.live() if r.patient_profile_id == patient_profile_id]

    async def get(self, relationship_id):
        r = self.records.get(relationship_id)
        return r if r is not None and r.deleted_at is None else None

    async def find_pair(self, patient_profile_id, representative_profile_id):
        matches = [
            r for r in self.records.values()
            if r.patient_profile_id == patient_profile_id and r.representative_profile_id == representative_profile_id
        ]
        matches.sort(key=lambda r: (r.deleted_at is not None, -r.updated_at.timestamp()))
        return matches[0] if matches else None

    async def create(self, org_id, **data):
        self.calls.append("create")
        for r in self.live():
            if (r.patient_profile_id, r.representative_profile_id) == (data["patient_profile_id"], data["representative_profile_id"]) \
                    and r.status in ("requested", "approved"):
                raise Conflict("A representative request for this person already exists.")
        r = self.add(data["patient_profile_id"], data["representative_profile_id"], data["status"])
        r.org_id = org_id
        return r

    async def save(self, obj):
        self.calls.append("save")
        self.saves += 1
        obj.updated_at = datetime.now(timezone.utc)
        self.records[obj.id] = obj
        return obj

    async def soft_delete(self, relationship_id):
        self.calls.append("soft_delete")
        r = self.records.get(relationship_id)
        if not r or r.deleted_at is not None:
            return False
        r.deleted_at = datetime.now(timezone.utc)
        return True

    async def restore(self, relationship_id):
        self.calls.append("restore")
        r = self.records.get(relationship_id)
        if not r:
            return False
        r.deleted_at = None
        return True

    async def delete(self, relationship_id, soft=True):
        self.calls.append(f"delete(soft={soft})")
        if soft:
            return await self.soft_delete(relationship_id)
        return self.records.pop(relationship_id, None) is not None


class FakeOrderService:
    def __init__(self):
        self.updated: list = []

    async def update_orders_by_patient_representative(self, representative_profile_id):
        self.updated.append(representative_profile_id)
        return 0


class FakePendingActionService:
    def __init__(self):
        self.generated: list = []
        self.resent: list = []
        self.completed: list = []

    async def generate_users_pending_actions(self, data):
        self.generated.append(data)
        return []

    async def resend_pending_actions(self, actions):
        self.resent.append(list(actions))
        return list(actions)

    async def complete(self, sender_profile_id, patient_profile_id, action_type, status=PendingActionStatus.done):
        self.completed.append((sender_profile_id, patient_profile_id, action_type, status))
        return 1


class FakePendingActionRepository:
    def __init__(self):
        self.actions: list[Obj] = []

    async def create(self, org_id, **data):
        obj = Obj(id=uuid.uuid4(), org_id=org_id, created_at=datetime.now(timezone.utc), **data)
        self.actions.append(obj)
        return obj

    async def get(self, action_id):
        return next((a for a in self.actions if a.id == action_id), None)

    async def find_open(self, sender_profile_id, patient_profile_id, action_type=None):
        return [
            a for a in self.actions
            if a.sender_profile_id == sender_profile_id
            and a.patient_profile_id == patient_profile_id
            and a.status == "pending"
            and (action_type is None or a.action_type == action_type)
        ]

    async def list_for_profile(self, patient_profile_id):
        return [a for a in self.actions if a.patient_profile_id == patient_profile_id and a.status == "pending"]

    async def save(self, obj):
        return obj


class FakeOutbox:
    def __init__(self):
        self.events: list[tuple] = []

    async def enqueue(self, org_id, event_type, subject_type, subject_id, payload, occurred_at=None):
        self.events.append((event_type, subject_type, subject_id, payload))


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def fakes(world: World):
    """A RepresentativeService wired to in-memory collaborators."""
    from app.modules.representatives.service import RepresentativeService

    session = FakeSession()
    repo = FakeRepresentativeRepository(world)
    orders = FakeOrderService()
    pending = FakePendingActionService()
    pending_repo = FakePendingActionRepository()
    outbox = FakeOutbox()
    service = RepresentativeService(
        session,
        repo=repo,
        users=FakeUserRepository(world),
        orders=orders,
        pending_actions=pending,
        pending_action_repo=pending_repo,
        outbox=outbox,
    )
    return Obj(
        service=service,
        session=session,
        repo=repo,
        orders=orders,
        pending=pending,
        pending_repo=pending_repo,
        outbox=outbox,
        world=world,
    )
