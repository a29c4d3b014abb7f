# =============================================================================
# tests/test_db.py - Database helpers
# =============================================================================
# Sessions and the Mongo database are mocked; nothing here needs a server.
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from studentpath.db import mongodb, postgres
from studentpath.services import chat_service


class TestExecuteRawSql:

    def test_rows_come_back_as_dicts(self, fake_db):
        fake_db.db.execute.return_value.fetchall.return_value = [
            SimpleNamespace(_mapping={"id": 1, "title": "Interview prep"}),
            SimpleNamespace(_mapping={"id": 2, "title": "New Chat"}),
        ]

        with patch.object(postgres, "get_db_session", fake_db.session):
            rows = postgres.execute_raw_sql("SELECT id, title FROM chat_conversations WHERE user_id = :u", {"u": 3})

        assert rows == [{"id": 1, "title": "Interview prep"}, {"id": 2, "title": "New Chat"}]
        statement, params = fake_db.db.execute.call_args[0]
        assert "chat_conversations" in str(statement)
        assert params == {"u": 3}

    def test_missing_params_sent_as_empty_dict(self, fake_db):
        fake_db.db.execute.return_value.fetchall.return_value = []

        with patch.object(postgres, "get_db_session", fake_db.session):
            assert postgres.execute_raw_sql("SELECT 1") == []

        assert fake_db.db.execute.call_args[0][1] == {}

    def test_conversation_listing_runs_through_raw_sql(self):
        with patch.object(chat_service, "execute_raw_sql", return_value=[]) as raw:
            chat_service.list_conversations(7, "student")
            chat_service.list_conversations(7, "student", include_archived=True)

        active_sql = raw.call_args_list[0][0][0]
        all_sql = raw.call_args_list[1][0][0]
        assert "is_archived = FALSE" in active_sql
        assert "is_archived = FALSE" not in all_sql
        assert raw.call_args_list[0][0][1] == {"user_id": 7, "user_type": "student"}


class TestReachability:

    def test_postgres_failure_reported_as_false(self, fake_db):
        fake_db.db.execute.side_effect = RuntimeError("connection refused")

        with patch.object(postgres, "get_db_session", fake_db.session):
            assert postgres.postgres_is_reachable() is False

    def test_postgres_select_one(self, fake_db):
        fake_db.db.execute.return_value.scalar.return_value = 1

        with patch.object(postgres, "get_db_session", fake_db.session):
            assert postgres.postgres_is_reachable() is True

    def test_mongo_ping_failure_reported_as_false(self):
        client = MagicMock()
        client.admin.command.side_effect = RuntimeError("timeout")

        with patch.object(mongodb, "get_mongo_client", return_value=client):
            assert mongodb.mongo_is_reachable() is False


class TestMongoIndexes:

    def test_every_collection_gets_its_indexes(self):
        db = MagicMock()

        with patch.object(mongodb, "get_mongo_db", return_value=db):
            mongodb.init_mongo_indexes()

        db[mongodb.RAW_RESUMES].create_index.assert_any_call([("resume_id", 1)], unique=True)
        db[mongodb.GENERATED_PLANS].create_index.assert_any_call([("target_id", 1), ("created_at", -1)])
        total = sum(len(indexes) for indexes in mongodb.INDEXES.values())
        assert db.__getitem__.return_value.create_index.call_count == total
