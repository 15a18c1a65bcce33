"""Жизненный цикл определения: отправка, отклонение, правка, одобрение."""
import uuid
from datetime import date

import pytest

from curated.core.errors import (
    AlreadyApprovedError, DefinitionNotFoundError, InvalidInputError, NotEnoughPermissionsError,
    OwnershipError, RejectionNotAnsweredYetError, SourceNotFoundError
)
from curated.domains.definitions.entities import UNSET, SetTo, DefinitionChanges
from curated.domains.definitions.schemas import DefinitionSubmit
from curated.domains.definitions.services import DefinitionService, DefinitionQueryService

pytestmark = pytest.mark.anyio


def submit_data(source_id, **overrides):
    values = dict(
        title="Idempotence",
        content="An operation is idempotent if applying it twice equals applying it once.",
        source_id=source_id,
        publishing_date=date(2001, 5, 17),
        tags=["math", "cs"],
    )
    values.update(overrides)
    return DefinitionSubmit(**values)


@pytest.fixture
def service(session, clock):
    return DefinitionService(session, clock=clock)


@pytest.fixture
def queries(session):
    return DefinitionQueryService(session)


@pytest.fixture
async def definition(service, source, member):
    return await service.submit_definition(submit_data(source.uuid), member.to_identity())


class TestSubmit:

    async def test_submit_stores_pending_definition(self, definition, member, source, queries):
        stored = await queries.get_by_id(definition.uuid)

        assert stored.approved is False
        assert stored.approved_by is None
        assert stored.submitted_by == member.uuid
        assert stored.source_id == source.uuid
        assert stored.source.authors[0].last_name == "Lovelace"
        assert stored.tags == ["math", "cs"]
        assert stored.rejection_log == []
        assert stored.last_submit_change_date == stored.submitted_date

    async def test_submit_with_unknown_source(self, service, member):
        with pytest.raises(SourceNotFoundError):
            await service.submit_definition(submit_data(uuid.uuid4()), member.to_identity())


class TestApprove:

    async def test_admin_approves(self, service, queries, definition, admin):
        await service.approve_definition(definition.uuid, admin.to_identity())

        stored = await queries.get_by_id(definition.uuid)
        assert stored.approved is True
        assert stored.approved_by == admin.uuid
        assert stored.approved_date is not None

    async def test_non_admin_cannot_approve(self, service, queries, definition, member):
        with pytest.raises(NotEnoughPermissionsError):
            await service.approve_definition(definition.uuid, member.to_identity())

        assert (await queries.get_by_id(definition.uuid)).approved is False

    async def test_approve_unknown_definition(self, service, admin):
        with pytest.raises(DefinitionNotFoundError):
            await service.approve_definition(uuid.uuid4(), admin.to_identity())

    async def test_approve_with_outstanding_rejection(self, service, queries, definition, admin):
        # одобрение не ждёт ответа на отклонение
        await service.reject_definition(definition.uuid, admin.to_identity(), "Cite the paper")
        await service.approve_definition(definition.uuid, admin.to_identity())

        assert (await queries.get_by_id(definition.uuid)).approved is True

    async def test_approved_definition_is_immutable(self, service, queries, definition, admin, member):
        await service.approve_definition(definition.uuid, admin.to_identity())
        approved = await queries.get_by_id(definition.uuid)

        with pytest.raises(AlreadyApprovedError):
            await service.approve_definition(definition.uuid, admin.to_identity())
        with pytest.raises(AlreadyApprovedError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Too late")
        with pytest.raises(AlreadyApprovedError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(title=SetTo("Changed")), member.to_identity()
            )

        stored = await queries.get_by_id(definition.uuid)
        assert stored.title == approved.title
        assert stored.approved_by == approved.approved_by
        assert stored.approved_date == approved.approved_date
        assert stored.rejection_log == []


class TestReject:

    async def test_admin_rejects(self, service, queries, definition, admin):
        await service.reject_definition(definition.uuid, admin.to_identity(), "Add an example")

        stored = await queries.get_by_id(definition.uuid)
        assert stored.approved is False
        assert len(stored.rejection_log) == 1
        assert stored.rejection_log[0].content == "Add an example"
        assert stored.rejection_log[0].rejected_by == admin.uuid
        assert stored.awaiting_author_response is True

    async def test_non_admin_cannot_reject(self, service, definition, member):
        with pytest.raises(NotEnoughPermissionsError):
            await service.reject_definition(definition.uuid, member.to_identity(), "No")

    async def test_blank_reason_is_invalid(self, service, queries, definition, admin):
        with pytest.raises(InvalidInputError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "   ")

        assert (await queries.get_by_id(definition.uuid)).rejection_log == []

    async def test_second_rejection_waits_for_author(self, service, queries, definition, admin, other_member):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")

        with pytest.raises(RejectionNotAnsweredYetError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Second")

        assert len((await queries.get_by_id(definition.uuid)).rejection_log) == 1

    async def test_rejection_is_stamped_after_checks(self, service, queries, definition, admin, clock):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        stamped = clock.current
        assert (await queries.get_by_id(definition.uuid)).rejection_log[0].rejected_date == stamped

        with pytest.raises(RejectionNotAnsweredYetError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Second")
        with pytest.raises(DefinitionNotFoundError):
            await service.reject_definition(uuid.uuid4(), admin.to_identity(), "Missing")

        assert clock.current == stamped

    async def test_edit_answers_rejection(self, service, queries, definition, admin, member):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        await service.edit_definition(
            definition.uuid, DefinitionChanges(content=SetTo("A clearer wording.")), member.to_identity()
        )
        await service.reject_definition(definition.uuid, admin.to_identity(), "Second")

        log = (await queries.get_by_id(definition.uuid)).rejection_log
        assert [rejection.content for rejection in log] == ["First", "Second"]

    async def test_log_only_grows(self, service, queries, definition, admin, member):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        before = (await queries.get_by_id(definition.uuid)).rejection_log

        await service.edit_definition(
            definition.uuid, DefinitionChanges(tags=SetTo(["logic"])), member.to_identity()
        )
        await service.reject_definition(definition.uuid, admin.to_identity(), "Second")
        after = (await queries.get_by_id(definition.uuid)).rejection_log

        assert len(after) == len(before) + 1
        assert after[0].uuid == before[0].uuid
        assert after[0].content == before[0].content
        assert after[0].rejected_date == before[0].rejected_date


class TestEdit:

    async def test_submitter_edits_fields(self, service, queries, definition, member):
        await service.edit_definition(
            definition.uuid,
            DefinitionChanges(title=SetTo("  Idempotency "), tags=SetTo(["cs", "cs", "http"])),
            member.to_identity()
        )

        stored = await queries.get_by_id(definition.uuid)
        assert stored.title == "Idempotency"
        assert stored.tags == ["cs", "http"]
        assert stored.content == definition.content
        assert stored.last_submit_change_date > definition.last_submit_change_date
        assert stored.submitted_date == definition.submitted_date

    async def test_tags_can_be_cleared(self, service, queries, definition, member):
        await service.edit_definition(definition.uuid, DefinitionChanges(tags=SetTo([])), member.to_identity())

        assert (await queries.get_by_id(definition.uuid)).tags == []

    async def test_other_user_cannot_edit(self, service, queries, definition, other_member):
        with pytest.raises(OwnershipError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(title=SetTo("Hijacked")), other_member.to_identity()
            )

        assert (await queries.get_by_id(definition.uuid)).title == definition.title

    async def test_admin_cannot_edit_foreign_definition(self, service, definition, admin):
        with pytest.raises(OwnershipError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(title=SetTo("Admin wording")), admin.to_identity()
            )

    async def test_edit_to_unknown_source(self, service, queries, definition, member):
        with pytest.raises(SourceNotFoundError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(source_id=SetTo(uuid.uuid4())), member.to_identity()
            )

        assert (await queries.get_by_id(definition.uuid)).source_id == definition.source_id

    async def test_blank_title_is_invalid(self, service, definition, member):
        with pytest.raises(InvalidInputError):
            await service.edit_definition(definition.uuid, DefinitionChanges(title=SetTo(" ")), member.to_identity())

    async def test_edit_unknown_definition(self, service, member):
        with pytest.raises(DefinitionNotFoundError):
            await service.edit_definition(uuid.uuid4(), DefinitionChanges(title=SetTo("x")), member.to_identity())

    async def test_empty_edit_changes_nothing(self, service, queries, definition, admin, member):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        before = await queries.get_by_id(definition.uuid)

        await service.edit_definition(definition.uuid, DefinitionChanges(), member.to_identity())

        after = await queries.get_by_id(definition.uuid)
        assert after.last_submit_change_date == before.last_submit_change_date
        assert after.title == before.title
        with pytest.raises(RejectionNotAnsweredYetError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Second")

    async def test_changes_default_to_unset(self):
        assert DefinitionChanges().title is UNSET


class TestRejectionHistory:

    async def test_submitter_and_admin_see_rejections(self, service, definition, admin, member):
        await service.reject_definition(definition.uuid, admin.to_identity(), "Needs work")

        for identity in (member.to_identity(), admin.to_identity()):
            rejections = await service.get_rejections(definition.uuid, identity)
            assert [rejection.content for rejection in rejections] == ["Needs work"]

    async def test_other_user_cannot_see_rejections(self, service, definition, other_member):
        with pytest.raises(NotEnoughPermissionsError):
            await service.get_rejections(definition.uuid, other_member.to_identity())


class TestScenarios:

    async def test_reject_edit_reject_approve(self, service, queries, source, admin, member):
        definition = await service.submit_definition(submit_data(source.uuid), member.to_identity())

        await service.reject_definition(definition.uuid, admin.to_identity(), "R1")
        await service.edit_definition(
            definition.uuid, DefinitionChanges(content=SetTo("Second draft.")), member.to_identity()
        )
        await service.reject_definition(definition.uuid, admin.to_identity(), "R2")
        await service.edit_definition(
            definition.uuid, DefinitionChanges(content=SetTo("Third draft.")), member.to_identity()
        )
        await service.approve_definition(definition.uuid, admin.to_identity())

        stored = await queries.get_by_id(definition.uuid)
        assert stored.approved is True
        assert stored.content == "Third draft."
        assert [rejection.content for rejection in stored.rejection_log] == ["R1", "R2"]
        assert stored.awaiting_author_response is False

    async def test_double_reject_is_blocked(self, service, queries, definition, admin):
        await service.reject_definition(definition.uuid, admin.to_identity(), "R1")

        with pytest.raises(RejectionNotAnsweredYetError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "R2")

        stored = await queries.get_by_id(definition.uuid)
        assert len(stored.rejection_log) == 1
        assert stored.approved is False

    async def test_foreign_edit_is_blocked(self, service, queries, definition, other_member):
        with pytest.raises(OwnershipError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(content=SetTo("Mine now")), other_member.to_identity()
            )

        assert (await queries.get_by_id(definition.uuid)).content == definition.content
