"""
Gestor de Expedientes Backend: Repository Tests
================================================

What:  Tests for SqlAlchemyCaseStore / SqlAlchemyUserDirectory queries.
How:   Real AsyncSession on in-memory SQLite (sqlite_session fixture);
       error translation tests use the mocked session.

What we test:
    ✅ Case-insensitive prefix search, with LIKE wildcards matched literally
    ✅ Case-insensitive number + username lookup, both sides lowered in SQL
    ✅ The unique index rejects a second case number for the same creator
    ✅ delete_by_id on a missing id is a no-op
    ✅ CaseService turns an index rejection on update into the rejection message
    ✅ SQLAlchemy failures surface as DatabaseError
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from gestor_expedientes.exceptions import DatabaseError, DuplicateCaseNumberError
from gestor_expedientes.models.case_record import CaseRecord
from gestor_expedientes.models.user import User
from gestor_expedientes.repositories import SqlAlchemyCaseStore, SqlAlchemyUserDirectory
from gestor_expedientes.schemas.case import CaseInput
from gestor_expedientes.services.case_service import DUPLICATE_ON_UPDATE_MESSAGE, CaseService


async def add_user(session, username: str, role: str = "USER") -> User:
    user = User(username=username, role=role)
    session.add(user)
    await session.flush()
    return user


def new_case(number: str, creator, case_date: date = date(2024, 1, 1)) -> CaseRecord:
    return CaseRecord(
        number=number,
        description="Descripción",
        date=case_date,
        physical_location="Archivo",
        storage_bin="B-1",
        observations="",
        creator=creator,
    )


class TestUserDirectory:

    @pytest.mark.asyncio
    async def test_find_by_username(self, sqlite_session):
        await add_user(sqlite_session, "ana", role="ADMIN")
        directory = SqlAlchemyUserDirectory(sqlite_session)

        user = await directory.find_by_username("ana")

        assert user is not None
        assert user.is_admin

    @pytest.mark.asyncio
    async def test_unknown_username_returns_none(self, sqlite_session):
        directory = SqlAlchemyUserDirectory(sqlite_session)

        assert await directory.find_by_username("nadie") is None

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        directory = SqlAlchemyUserDirectory(mock_db_session)

        with pytest.raises(DatabaseError):
            await directory.find_by_username("ana")


class TestCaseStoreQueries:

    @pytest.mark.asyncio
    async def test_save_assigns_id_and_creator(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)

        saved = await store.save(new_case("C-1", ana))

        assert saved.id is not None
        assert saved.creator_id == ana.id
        fetched = await store.find_by_id(saved.id)
        assert fetched is saved

    @pytest.mark.asyncio
    async def test_find_all_in_id_order(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        luis = await add_user(sqlite_session, "luis")
        store = SqlAlchemyCaseStore(sqlite_session)
        for number, creator in [("B", ana), ("A", luis), ("C", None)]:
            await store.save(new_case(number, creator))

        result = await store.find_all()

        assert [r.number for r in result] == ["B", "A", "C"]

    @pytest.mark.asyncio
    async def test_find_by_creator(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        luis = await add_user(sqlite_session, "luis")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("A-1", ana))
        await store.save(new_case("L-1", luis))
        await store.save(new_case("A-2", ana))

        result = await store.find_by_creator(ana)

        assert [r.number for r in result] == ["A-1", "A-2"]
        assert all(r.creator.username == "ana" for r in result)

    @pytest.mark.asyncio
    async def test_prefix_search_ignores_case(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("EXP-1", ana))
        await store.save(new_case("exp-2", ana))
        await store.save(new_case("PEN-1", ana))

        result = await store.find_by_number_prefix("eXp")

        assert [r.number for r in result] == ["EXP-1", "exp-2"]

    @pytest.mark.asyncio
    async def test_prefix_wildcards_are_literal(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("10%-A", ana))
        await store.save(new_case("100-B", ana))
        await store.save(new_case("1_2", ana))
        await store.save(new_case("132", ana))

        assert [r.number for r in await store.find_by_number_prefix("10%")] == ["10%-A"]
        assert [r.number for r in await store.find_by_number_prefix("1_")] == ["1_2"]

    @pytest.mark.asyncio
    async def test_prefix_escape_character_is_literal(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("2024/15", ana))
        await store.save(new_case("2024-15", ana))

        result = await store.find_by_number_prefix("2024/")

        assert [r.number for r in result] == ["2024/15"]

    @pytest.mark.asyncio
    async def test_non_ascii_number_matches_itself(self, sqlite_session):
        """Both sides are lowered by the same SQL function."""
        ana = await add_user(sqlite_session, "Ñusta")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("ÑANDÚ-7", ana))

        by_prefix = await store.find_by_number_prefix("ÑAN")
        by_number = await store.find_by_number_and_creator_username("ÑANDÚ-7", "Ñusta")

        assert [r.number for r in by_prefix] == ["ÑANDÚ-7"]
        assert [r.number for r in by_number] == ["ÑANDÚ-7"]

    @pytest.mark.asyncio
    async def test_number_and_username_lookup_ignores_case(self, sqlite_session):
        ana = await add_user(sqlite_session, "Ana")
        luis = await add_user(sqlite_session, "luis")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("C-1", ana))
        await store.save(new_case("C-1", luis))

        result = await store.find_by_number_and_creator_username("c-1", "ANA")

        assert len(result) == 1
        assert result[0].creator.username == "Ana"

    @pytest.mark.asyncio
    async def test_update_in_place(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        record = await store.save(new_case("C-1", ana))

        record.observations = "Revisado"
        await store.save(record)

        fetched = await store.find_by_id(record.id)
        assert fetched.observations == "Revisado"

    @pytest.mark.asyncio
    async def test_delete_by_id(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        record = await store.save(new_case("C-1", ana))
        case_id = record.id

        await store.delete_by_id(case_id)
        await store.delete_by_id(case_id)  # second time: no-op

        sqlite_session.expunge_all()
        assert await store.find_by_id(case_id) is None


class TestCaseStoreUniqueness:

    @pytest.mark.asyncio
    async def test_unique_index_rejects_same_creator_number(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("C-1", ana))

        with pytest.raises(DuplicateCaseNumberError) as exc_info:
            await store.save(new_case("c-1", ana))

        assert exc_info.value.number == "c-1"

    @pytest.mark.asyncio
    async def test_same_number_allowed_for_different_creators(self, sqlite_session):
        ana = await add_user(sqlite_session, "ana")
        luis = await add_user(sqlite_session, "luis")
        store = SqlAlchemyCaseStore(sqlite_session)

        await store.save(new_case("C-1", ana))
        await store.save(new_case("C-1", luis))

        assert len(await store.find_all()) == 2

    @pytest.mark.asyncio
    async def test_query_failure_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        store = SqlAlchemyCaseStore(mock_db_session)

        with pytest.raises(DatabaseError):
            await store.find_all()


class TestCaseServiceOnDatabase:
    """CaseService over the SQLAlchemy store, where the unique index has the last word."""

    @pytest.mark.asyncio
    async def test_update_clash_caught_by_unique_index(self, sqlite_session):
        """
        An admin renames ana's C-2 to c-1. The pre-check looks at the admin's
        own cases and passes; the index on ana's numbers rejects the write.
        """
        await add_user(sqlite_session, "jefa", role="ADMIN")
        ana = await add_user(sqlite_session, "ana")
        store = SqlAlchemyCaseStore(sqlite_session)
        await store.save(new_case("C-1", ana))
        second = await store.save(new_case("C-2", ana))
        second_id = second.id
        await sqlite_session.commit()
        service = CaseService(store, SqlAlchemyUserDirectory(sqlite_session))

        result = await service.update(
            second_id,
            CaseInput(
                number="c-1",
                description="Renombrado",
                date=date(2024, 5, 1),
                physical_location="Archivo",
                storage_bin="B-1",
            ),
            "jefa",
        )

        assert result == DUPLICATE_ON_UPDATE_MESSAGE
        unchanged = await store.find_by_id(second_id)
        assert unchanged.number == "C-2"
        assert unchanged.description == "Descripción"
        assert [s.number for s in await service.list_for_actor("ana")] == ["C-1", "C-2"]
