"""Unit tests for the command line entry point."""

import pytest
from pytest_mock import MockerFixture, MockType

import main
from pennyworth.core.config import Settings


@pytest.fixture
def mock_environment(mocker: MockerFixture) -> MockType:
    """Provide an environment with a database and development settings."""
    environment = mocker.Mock()
    environment.settings = Settings(environment="development")
    environment.close = mocker.AsyncMock()
    mocker.patch("main.create_default_environment", return_value=environment)
    return environment


@pytest.fixture
def mock_server(mocker: MockerFixture) -> MockType:
    """Mock the Server class to prevent serving."""
    return mocker.patch("main.Server")


@pytest.fixture
def mock_run_migrations(mocker: MockerFixture) -> MockType:
    """Mock alembic migrations."""
    return mocker.patch("main.run_migrations")


@pytest.mark.unit
class TestMain:
    """Tests for main()."""

    def test_server_in_development_skips_migrations(
        self,
        mock_environment: MockType,
        mock_server: MockType,
        mock_run_migrations: MockType,
    ) -> None:
        """Verify development serves without migrating."""
        main.main(["server"])

        mock_run_migrations.assert_not_called()
        mock_server.assert_called_once_with(mock_environment)
        mock_server.return_value.start.assert_called_once_with()
        mock_environment.close.assert_awaited_once()

    def test_default_command_is_server(
        self,
        mock_environment: MockType,
        mock_server: MockType,
        mock_run_migrations: MockType,
    ) -> None:
        """Verify running without a command serves."""
        main.main([])

        mock_server.return_value.start.assert_called_once_with()

    @pytest.mark.parametrize("environment", ["staging", "production"])
    def test_server_migrates_outside_development(
        self,
        mock_environment: MockType,
        mock_server: MockType,
        mock_run_migrations: MockType,
        environment: str,
    ) -> None:
        """Verify the schema is upgraded before serving."""
        mock_environment.settings = Settings(environment=environment)  # type: ignore[arg-type]

        main.main(["server"])

        mock_run_migrations.assert_called_once_with(
            mock_environment.settings, mock_environment.logger
        )
        mock_server.return_value.start.assert_called_once_with()

    def test_migrate(
        self,
        mock_environment: MockType,
        mock_server: MockType,
        mock_run_migrations: MockType,
    ) -> None:
        """Verify migrate only upgrades the schema."""
        main.main(["migrate"])

        mock_run_migrations.assert_called_once()
        mock_server.assert_not_called()
        mock_environment.close.assert_awaited_once()

    def test_environment_closed_on_failure(
        self,
        mock_environment: MockType,
        mock_server: MockType,
        mock_run_migrations: MockType,
    ) -> None:
        """Verify resources are released when serving fails."""
        mock_server.return_value.start.side_effect = RuntimeError("bind failed")

        with pytest.raises(RuntimeError, match="bind failed"):
            main.main(["server"])

        mock_environment.close.assert_awaited_once()

    def test_unknown_command(self, mock_environment: MockType) -> None:
        """Verify argparse rejects unknown commands."""
        with pytest.raises(SystemExit):
            main.main(["serve-forever"])


@pytest.mark.unit
class TestBuildServer:
    """Tests for build_server()."""

    def test_registers_handlers(
        self, mock_environment: MockType, mock_server: MockType
    ) -> None:
        """Verify the health and customer handlers are registered."""
        main.build_server(mock_environment)

        handlers = mock_server.return_value.register_handlers.call_args.args
        assert sorted(h.path for h in handlers) == ["/customers", "/health"]

    def test_requires_database(self, mock_environment: MockType) -> None:
        """Verify the server cannot run without storage."""
        mock_environment.database = None

        with pytest.raises(ValueError, match="requires a database"):
            main.build_server(mock_environment)
