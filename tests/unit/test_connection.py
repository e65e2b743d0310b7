from unittest.mock import patch

import pytest
from psycopg.conninfo import conninfo_to_dict

from simplymedi.config.settings import Settings
from simplymedi.database import connection


@pytest.fixture(autouse=True)
def _reset_pool():
    yield
    connection._pool = None


class TestBuildConninfo:
    def test_password_with_spaces_survives_quoting(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None, db_host="db", db_port=5432, db_password="s3cret pass'word"
        )

        params = conninfo_to_dict(connection.build_conninfo(settings))

        assert params["host"] == "db"
        assert params["port"] == "5432"
        assert params["password"] == "s3cret pass'word"
        assert params["application_name"] == "simplymedi"


class TestPool:
    def test_pool_is_sized_for_concurrent_jobs(self) -> None:
        settings = Settings(_env_file=None, max_concurrent_jobs=6)  # type: ignore[call-arg]

        with patch("simplymedi.database.connection.ConnectionPool") as mock_pool:
            connection.init_pool(settings)

        assert mock_pool.call_args.kwargs["max_size"] == 8

    def test_close_pool_closes_and_forgets(self) -> None:
        with patch("simplymedi.database.connection.ConnectionPool") as mock_pool:
            connection.init_pool(Settings(_env_file=None))  # type: ignore[call-arg]
            connection.close_pool()

        mock_pool.return_value.close.assert_called_once()
        assert connection._pool is None

    def test_get_connection_requires_pool(self) -> None:
        with pytest.raises(RuntimeError, match="init_pool"):
            with connection.get_connection():
                pass
