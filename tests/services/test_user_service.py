from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from identity_service.core.config import DEFAULT_EMAIL_REGEX
from identity_service.core.exceptions import BadRequestError, ConflictError, InternalError
from identity_service.repositories.interfaces import DuplicateEmailError, UserRow
from identity_service.services.users import EMAIL_TAKEN, UserService
from identity_service.services.validation import UserValidator, ValidationErrors


class StubUnitOfWork:
    def __init__(self, user_repo):
        self.users = user_repo
        self.commits = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:  # pragma: no cover - not used
        return None


class FakeUserRepository:
    """In-memory store enforcing case-insensitive email uniqueness on insert."""

    def __init__(self) -> None:
        self.rows: list[UserRow] = []
        self.calls: list[str] = []

    async def list_all(self):
        self.calls.append("list_all")
        return sorted(self.rows, key=lambda r: r.id)

    async def email_exists(self, email):
        self.calls.append("email_exists")
        return any(r.email.lower() == email.lower() for r in self.rows)

    async def insert(self, *, name, email):
        self.calls.append("insert")
        if any(r.email.lower() == email.lower() for r in self.rows):
            raise DuplicateEmailError(email)
        row = UserRow(id=len(self.rows) + 1, name=name, email=email)
        self.rows.append(row)
        return row


def _service(repo) -> UserService:
    validator = UserValidator(
        max_name_length=100, max_email_length=100, email_pattern=DEFAULT_EMAIL_REGEX
    )
    return UserService(lambda: StubUnitOfWork(repo), validator)


@pytest.mark.asyncio
async def test_create_then_list_returns_the_user():
    repo = FakeUserRepository()
    service = _service(repo)

    created = await service.create_user("Alice", "a@x.com")
    users = await service.list_users()

    assert created.id == 1
    assert [(u.id, u.name, u.email) for u in users] == [(1, "Alice", "a@x.com")]


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_storage():
    repo = FakeUserRepository()
    service = _service(repo)

    with pytest.raises(BadRequestError) as exc:
        await service.create_user("", "")

    assert str(exc.value) == "validation failed"
    assert isinstance(exc.value.cause, ValidationErrors)
    assert exc.value.cause.as_items() == [{"name": "is required"}, {"email": "is required"}]
    assert repo.calls == []


@pytest.mark.asyncio
async def test_duplicate_email_with_different_case_conflicts_without_insert():
    repo = FakeUserRepository()
    service = _service(repo)
    await service.create_user("Alice", "a@x.com")
    repo.calls.clear()

    with pytest.raises(ConflictError) as exc:
        await service.create_user("Bob", "A@X.com")

    assert str(exc.value) == EMAIL_TAKEN
    assert repo.calls == ["email_exists"]
    assert len(repo.rows) == 1


@pytest.mark.asyncio
async def test_repeated_listing_is_stable():
    repo = FakeUserRepository()
    service = _service(repo)
    await service.create_user("Alice", "a@x.com")
    await service.create_user("Bob", "b@x.com")

    first = await service.list_users()
    second = await service.list_users()

    assert first == second
    assert [u.id for u in first] == [1, 2]


@pytest.mark.asyncio
async def test_insert_time_unique_violation_is_a_conflict():
    class RacingRepository(FakeUserRepository):
        async def email_exists(self, email):
            return False

        async def insert(self, *, name, email):
            raise DuplicateEmailError(email)

    service = _service(RacingRepository())

    with pytest.raises(ConflictError) as exc:
        await service.create_user("Bob", "a@x.com")

    assert str(exc.value) == EMAIL_TAKEN
    assert isinstance(exc.value.cause, DuplicateEmailError)


@pytest.mark.asyncio
async def test_concurrent_creates_for_one_email_yield_one_success():
    class GatedRepository(FakeUserRepository):
        """Holds every existence check until both requests have made one."""

        def __init__(self) -> None:
            super().__init__()
            self.checked = 0
            self.both_checked = asyncio.Event()

        async def email_exists(self, email):
            found = await super().email_exists(email)
            self.checked += 1
            if self.checked == 2:
                self.both_checked.set()
            await self.both_checked.wait()
            return found

    repo = GatedRepository()
    service = _service(repo)

    results = await asyncio.gather(
        service.create_user("Alice", "a@x.com"),
        service.create_user("Alicia", "A@x.com"),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, BaseException)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == 1
    assert len(repo.rows) == 1


class FailingRepository:
    def __init__(self, failing: str) -> None:
        self._failing = failing

    async def _maybe_fail(self, op: str):
        if op == self._failing:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def list_all(self):
        await self._maybe_fail("list_all")
        return []

    async def email_exists(self, email):
        await self._maybe_fail("email_exists")
        return False

    async def insert(self, *, name, email):
        await self._maybe_fail("insert")
        return UserRow(id=1, name=name, email=email)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("failing", "message"),
    [
        ("email_exists", "failed to check email existence"),
        ("insert", "failed to create user"),
    ],
)
async def test_storage_failures_during_create_are_internal(failing, message):
    service = _service(FailingRepository(failing))

    with pytest.raises(InternalError) as exc:
        await service.create_user("Alice", "a@x.com")

    assert str(exc.value) == message
    assert isinstance(exc.value.cause, SQLAlchemyError)


@pytest.mark.asyncio
async def test_storage_failure_during_list_is_internal():
    service = _service(FailingRepository("list_all"))

    with pytest.raises(InternalError) as exc:
        await service.list_users()

    assert str(exc.value) == "failed to retrieve users"
    assert exc.value.__cause__ is exc.value.cause


@pytest.mark.asyncio
async def test_slow_storage_is_aborted_by_timeout():
    class SlowRepository(FakeUserRepository):
        async def list_all(self):
            await asyncio.sleep(5)
            return []

    service = _service(SlowRepository())

    with pytest.raises(InternalError) as exc:
        await service.list_users(timeout=0.05)

    assert str(exc.value) == "request timed out"
    assert isinstance(exc.value.cause, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_cancellation_propagates_unchanged():
    class BlockingRepository(FakeUserRepository):
        def __init__(self) -> None:
            super().__init__()
            self.started = asyncio.Event()

        async def list_all(self):
            self.started.set()
            await asyncio.sleep(5)
            return []

    repo = BlockingRepository()
    service = _service(repo)

    task = asyncio.create_task(service.list_users(timeout=5))
    await repo.started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
