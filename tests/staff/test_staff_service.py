import pytest

from application.services.staff_service import StaffApplicationService
from domain.common.exceptions import (
    DomainValidationException,
    StaffMemberAlreadyExistsException,
    StaffMemberIdEmptyException,
    StaffMemberNilException,
    StaffMemberNotFoundException,
)
from domain.staff.entity import StaffMember


def _member(staff_id: str = "s1", **overrides) -> StaffMember:
    fields = dict(
        first_name="John",
        last_name="Doe",
        email=f"{staff_id}@example.edu",
        phone_number=f"+1-{staff_id}",
    )
    fields.update(overrides)
    return StaffMember(staff_id=staff_id, **fields)


def _untouchable_uow(*args, **kwargs):
    raise AssertionError("backend must not be touched")


@pytest.mark.asyncio
async def test_add_returns_backend_timestamps(staff_service):
    stored = await staff_service.add_staff_member(_member(title="Lecturer"))
    assert stored.staff_id == "s1"
    assert stored.title == "Lecturer"
    assert stored.created_at is not None
    assert stored.updated_at is not None
    assert stored.created_at <= stored.updated_at


@pytest.mark.asyncio
async def test_add_then_get_round_trip(staff_service):
    record = _member(title="Dean", office="A-1")
    await staff_service.add_staff_member(record)

    got = await staff_service.get_staff_member("s1")
    for field in ("staff_id", "first_name", "last_name", "email", "phone_number", "title", "office"):
        assert getattr(got, field) == getattr(record, field)


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["staff_id", "email", "phone_number"])
async def test_add_conflict_reports_field(staff_service, field):
    original = _member("s1")
    await staff_service.add_staff_member(original)

    clash = _member("s2", first_name="Other")
    setattr(clash, field, getattr(original, field))
    with pytest.raises(StaffMemberAlreadyExistsException) as ei:
        await staff_service.add_staff_member(clash)
    assert ei.value.field == field

    # The failed insert left the first record intact
    got = await staff_service.get_staff_member("s1")
    assert got.first_name == "John"


@pytest.mark.asyncio
async def test_add_requires_mandatory_fields(staff_service):
    with pytest.raises(DomainValidationException) as ei:
        await staff_service.add_staff_member(_member(email=""))
    assert ei.value.field == "email"


@pytest.mark.asyncio
async def test_update_partial_merge(staff_service):
    created = await staff_service.add_staff_member(_member(first_name="A", title="t1"))

    updated = await staff_service.update_staff_member(StaffMember(staff_id="s1", first_name="B", title=""))
    assert updated.first_name == "B"
    assert updated.title == "t1"
    assert updated.last_name == "Doe"
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at

    got = await staff_service.get_staff_member("s1")
    assert got.first_name == "B"
    assert got.title == "t1"


@pytest.mark.asyncio
async def test_update_conflict_keeps_prior_state(staff_service):
    await staff_service.add_staff_member(_member("s1"))
    await staff_service.add_staff_member(_member("s2"))

    with pytest.raises(StaffMemberAlreadyExistsException) as ei:
        await staff_service.update_staff_member(
            StaffMember(staff_id="s2", first_name="Changed", phone_number="+1-s1")
        )
    assert ei.value.field == "phone_number"

    got = await staff_service.get_staff_member("s2")
    assert got.first_name == "John"
    assert got.phone_number == "+1-s2"


@pytest.mark.asyncio
async def test_update_missing_is_not_found(staff_service):
    with pytest.raises(StaffMemberNotFoundException):
        await staff_service.update_staff_member(StaffMember(staff_id="ghost", first_name="X"))


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(staff_service):
    await staff_service.add_staff_member(_member())
    await staff_service.delete_staff_member("s1")

    with pytest.raises(StaffMemberNotFoundException):
        await staff_service.get_staff_member("s1")
    with pytest.raises(StaffMemberNotFoundException):
        await staff_service.delete_staff_member("s1")


@pytest.mark.asyncio
async def test_argument_errors_do_not_touch_backend():
    svc = StaffApplicationService(_untouchable_uow)

    with pytest.raises(StaffMemberNilException):
        await svc.add_staff_member(None)
    with pytest.raises(StaffMemberNilException):
        await svc.update_staff_member(None)
    with pytest.raises(StaffMemberIdEmptyException):
        await svc.add_staff_member(_member(""))
    with pytest.raises(StaffMemberIdEmptyException):
        await svc.get_staff_member("")
    with pytest.raises(StaffMemberIdEmptyException):
        await svc.update_staff_member(StaffMember(staff_id="", first_name="X"))
    with pytest.raises(StaffMemberIdEmptyException):
        await svc.delete_staff_member("")
