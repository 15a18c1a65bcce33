"""Условные записи: хранилище отказывает, сервис классифицирует отказ."""
import copy
import uuid
from datetime import date

import pytest
from sqlalchemy import select

from curated.core.errors import (
    AlreadyApprovedError, OwnershipError, RejectionNotAnsweredYetError, StoreError
)
from curated.db.repositories.definition_repository import (
    DefinitionGuard, DefinitionRepository, definitions_table
)
from curated.domains.definitions.entities import DefinitionChanges, Rejection, SetTo
from curated.domains.definitions.schemas import DefinitionSubmit
from curated.domains.definitions.services import DefinitionService

pytestmark = pytest.mark.anyio


@pytest.fixture
def service(session, clock):
    return DefinitionService(session, clock=clock)


@pytest.fixture
def repository(session):
    return DefinitionRepository(session)


@pytest.fixture
async def definition(service, source, member):
    return await service.submit_definition(
        DefinitionSubmit(
            title="Quorum",
            content="A majority of replicas that must agree.",
            source_id=source.uuid,
            publishing_date=date(1998, 5, 1),
            tags=["distributed"]
        ),
        member.to_identity()
    )


def stale_first_read(monkeypatch, service, stale):
    """Первое чтение определения сервисом возвращает устаревшую копию"""
    repository = service.definition_repository
    real_get_by_uuid = repository.get_by_uuid
    reads = []

    async def get_by_uuid(definition_uuid):
        reads.append(definition_uuid)
        if len(reads) == 1:
            return stale
        return await real_get_by_uuid(definition_uuid)

    monkeypatch.setattr(repository, "get_by_uuid", get_by_uuid)


async def last_rejected_date(session, definition_uuid):
    result = await session.execute(
        select(definitions_table.c.last_rejected_date).where(definitions_table.c.uuid == definition_uuid)
    )
    return result.scalar_one()


class TestRepositoryGuards:

    async def test_update_refused_on_approved_definition(self, service, repository, definition, admin, member):
        await service.approve_definition(definition.uuid, admin.to_identity())

        updated = await repository.update_if(
            definition.uuid,
            DefinitionGuard(pending=True, submitted_by=member.uuid),
            {"title": "Changed"},
            tags=["other"]
        )

        stored = await repository.get_by_uuid(definition.uuid)
        assert updated is False
        assert stored.title == "Quorum"
        assert stored.tags == ["distributed"]

    async def test_update_refused_for_other_submitter(self, repository, definition, other_member):
        updated = await repository.update_if(
            definition.uuid, DefinitionGuard(pending=True, submitted_by=other_member.uuid), {"title": "Mine"}
        )

        assert updated is False
        assert (await repository.get_by_uuid(definition.uuid)).title == "Quorum"

    async def test_update_of_unknown_definition(self, repository):
        assert await repository.update_if(uuid.uuid4(), DefinitionGuard(), {"title": "x"}) is False

    async def test_rejection_refused_on_approved_definition(self, service, repository, definition, admin, clock):
        await service.approve_definition(definition.uuid, admin.to_identity())
        rejection = Rejection.create_rejection(definition.uuid, admin.uuid, "Too late", clock())

        appended = await repository.append_rejection_if(
            definition.uuid, DefinitionGuard(pending=True, no_outstanding_rejection=True), rejection
        )

        assert appended is False
        assert await repository.get_rejections(definition.uuid) == []
        assert await last_rejected_date(repository.session, definition.uuid) is None

    async def test_rejection_refused_while_previous_is_outstanding(
        self, service, repository, definition, admin, clock
    ):
        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        first_date = await last_rejected_date(repository.session, definition.uuid)
        rejection = Rejection.create_rejection(definition.uuid, admin.uuid, "Second", clock())

        appended = await repository.append_rejection_if(
            definition.uuid, DefinitionGuard(pending=True, no_outstanding_rejection=True), rejection
        )

        assert appended is False
        assert [r.content for r in await repository.get_rejections(definition.uuid)] == ["First"]
        assert await last_rejected_date(repository.session, definition.uuid) == first_date

    async def test_rejection_stamps_definition_row(self, service, repository, definition, admin, member):
        assert await last_rejected_date(repository.session, definition.uuid) is None

        await service.reject_definition(definition.uuid, admin.to_identity(), "First")
        stored = await repository.get_by_uuid(definition.uuid)
        assert await last_rejected_date(repository.session, definition.uuid) == stored.rejection_log[0].rejected_date

        await service.edit_definition(
            definition.uuid, DefinitionChanges(content=SetTo("Any majority.")), member.to_identity()
        )
        await service.reject_definition(definition.uuid, admin.to_identity(), "Second")
        stored = await repository.get_by_uuid(definition.uuid)
        assert await last_rejected_date(repository.session, definition.uuid) == stored.rejection_log[-1].rejected_date

    async def test_rejection_accepted_when_answered_at_same_instant(self, repository, session, definition, admin):
        # отклонение, датированное моментом правки, считается отвеченным
        await session.execute(
            definitions_table.update()
            .where(definitions_table.c.uuid == definition.uuid)
            .values(last_rejected_date=definition.last_submit_change_date)
        )
        await session.commit()
        rejection = Rejection.create_rejection(
            definition.uuid, admin.uuid, "Same instant", definition.last_submit_change_date
        )

        appended = await repository.append_rejection_if(
            definition.uuid, DefinitionGuard(pending=True, no_outstanding_rejection=True), rejection
        )

        assert appended is True


class TestRefusedWriteClassification:

    async def test_reject_after_concurrent_approval(self, service, session, clock, definition, admin, monkeypatch):
        await DefinitionService(session, clock=clock).approve_definition(definition.uuid, admin.to_identity())
        stale_first_read(monkeypatch, service, definition)

        with pytest.raises(AlreadyApprovedError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Too late")

        assert await service.definition_repository.get_rejections(definition.uuid) == []

    async def test_approve_after_concurrent_approval(self, service, session, clock, definition, admin, monkeypatch):
        await DefinitionService(session, clock=clock).approve_definition(definition.uuid, admin.to_identity())
        first_approval = await service.definition_repository.get_by_uuid(definition.uuid)
        stale_first_read(monkeypatch, service, definition)

        with pytest.raises(AlreadyApprovedError):
            await service.approve_definition(definition.uuid, admin.to_identity())

        stored = await service.definition_repository.get_by_uuid(definition.uuid)
        assert stored.approved_date == first_approval.approved_date

    async def test_edit_refused_for_other_submitter(
        self, service, definition, other_member, monkeypatch
    ):
        stale = copy.copy(definition)
        stale.submitted_by = other_member.uuid
        stale_first_read(monkeypatch, service, stale)

        with pytest.raises(OwnershipError):
            await service.edit_definition(
                definition.uuid, DefinitionChanges(title=SetTo("Mine")), other_member.to_identity()
            )

        assert (await service.definition_repository.get_by_uuid(definition.uuid)).title == "Quorum"

    async def test_reject_after_concurrent_rejection(self, service, session, clock, definition, admin, monkeypatch):
        await DefinitionService(session, clock=clock).reject_definition(
            definition.uuid, admin.to_identity(), "First"
        )
        stale_first_read(monkeypatch, service, definition)

        with pytest.raises(RejectionNotAnsweredYetError):
            await service.reject_definition(definition.uuid, admin.to_identity(), "Second")

        rejections = await service.definition_repository.get_rejections(definition.uuid)
        assert [rejection.content for rejection in rejections] == ["First"]

    async def test_unexplained_refusal_is_store_error(self, service, definition, admin, monkeypatch):
        async def refuse(*args, **kwargs):
            return False

        monkeypatch.setattr(service.definition_repository, "update_if", refuse)

        with pytest.raises(StoreError):
            await service.approve_definition(definition.uuid, admin.to_identity())

        assert (await service.definition_repository.get_by_uuid(definition.uuid)).approved is False
