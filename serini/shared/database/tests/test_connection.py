"""Tests for database connection manager."""
import pytest
from unittest.mock import MagicMock, patch

from serini.shared.database.connection import DatabaseConfig, ConnectionManager


class TestDatabaseConfig:
    """Tests for DatabaseConfig dataclass."""

    def test_default_values(self):
        config = DatabaseConfig(host="localhost")

        assert config.host == "localhost"
        assert config.port == 5432
        assert config.database == "serini"
        assert config.min_connections == 1
        assert config.max_connections == 10
        assert config.ssl_mode == "require"

    def test_from_env(self):
        with patch.dict("os.environ", {
            "DB_HOST": "env-host",
            "DB_PORT": "5434",
            "DB_NAME": "kb",
            "DB_USER": "reader",
            "DB_PASSWORD": "secret",
        }):
            config = DatabaseConfig.from_env()

            assert config.host == "env-host"
            assert config.port == 5434
            assert config.database == "kb"
            assert config.username == "reader"
            assert config.password == "secret"

    def test_from_env_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = DatabaseConfig.from_env()

            assert config.host == "localhost"
            assert config.port == 5432
            assert config.database == "serini"


class TestConnectionManager:
    """Tests for ConnectionManager class."""

    def test_not_initialized_on_creation(self):
        manager = ConnectionManager(DatabaseConfig(host="localhost"))

        assert manager.initialized is False

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_initialize_creates_pool_once(self, mock_pool_cls):
        manager = ConnectionManager(DatabaseConfig(host="db", database="kb"))

        manager.initialize()
        manager.initialize()

        mock_pool_cls.assert_called_once()
        kwargs = mock_pool_cls.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["database"] == "kb"
        assert manager.initialized is True

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_initialize_failure_propagates(self, mock_pool_cls):
        mock_pool_cls.side_effect = RuntimeError("connection refused")
        manager = ConnectionManager(DatabaseConfig(host="db"))

        with pytest.raises(RuntimeError):
            manager.initialize()
        assert manager.initialized is False

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_get_connection_returns_connection_to_pool(self, mock_pool_cls):
        mock_pool = mock_pool_cls.return_value
        conn = MagicMock()
        mock_pool.getconn.return_value = conn
        manager = ConnectionManager(DatabaseConfig(host="db"))

        with manager.get_connection() as got:
            assert got is conn

        mock_pool.putconn.assert_called_once_with(conn)
        conn.rollback.assert_not_called()

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_connection_returned_even_on_error(self, mock_pool_cls):
        mock_pool = mock_pool_cls.return_value
        conn = MagicMock()
        mock_pool.getconn.return_value = conn
        manager = ConnectionManager(DatabaseConfig(host="db"))

        with pytest.raises(ValueError):
            with manager.get_connection():
                raise ValueError("query failed")

        conn.rollback.assert_called_once()
        mock_pool.putconn.assert_called_once_with(conn)

    def test_health_check_not_initialized(self):
        manager = ConnectionManager(DatabaseConfig(host="localhost"))

        health = manager.health_check()

        assert health["status"] == "not_initialized"
        assert health["healthy"] is False

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_health_check_connected(self, mock_pool_cls):
        manager = ConnectionManager(DatabaseConfig(host="db"))
        manager.initialize()

        health = manager.health_check()

        assert health["status"] == "connected"
        assert health["healthy"] is True

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_health_check_error(self, mock_pool_cls):
        mock_pool_cls.return_value.getconn.side_effect = RuntimeError("down")
        manager = ConnectionManager(DatabaseConfig(host="db"))
        manager.initialize()

        health = manager.health_check()

        assert health["status"] == "error"
        assert health["healthy"] is False

    @patch("serini.shared.database.connection.pool.ThreadedConnectionPool")
    def test_close(self, mock_pool_cls):
        manager = ConnectionManager(DatabaseConfig(host="db"))
        manager.initialize()

        manager.close()

        mock_pool_cls.return_value.closeall.assert_called_once()
        assert manager.initialized is False
