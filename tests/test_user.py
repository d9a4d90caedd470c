"""Tests for users and user commands."""

import pytest
from cardrecon.cli.main import cli
from cardrecon.domain.errors import ConflictError, NotFoundError, ValidationError
from cardrecon.utils.user_resolver import resolve_user


def test_create_user_strips_name(user_service):
    """Test names are stored without surrounding whitespace."""
    user_id = user_service.create_user("  alice ")
    assert user_service.get_user(user_id).name == "alice"


def test_create_user_empty_name(user_service):
    """Test a blank name is rejected."""
    with pytest.raises(ValidationError):
        user_service.create_user("   ")


def test_create_user_duplicate(user_service, sample_user):
    """Test duplicate names are rejected."""
    with pytest.raises(ConflictError, match="already exists"):
        user_service.create_user("alice")


def test_resolve_user_by_name_and_id(user_service, sample_user):
    """Test resolving a user from a name, an int or a numeric string."""
    assert resolve_user(user_service, "alice") == sample_user.id
    assert resolve_user(user_service, sample_user.id) == sample_user.id
    assert resolve_user(user_service, str(sample_user.id)) == sample_user.id


def test_resolve_unknown_user(user_service, sample_user):
    """Test unknown names and IDs raise NotFoundError."""
    with pytest.raises(NotFoundError, match="User 'zed' not found"):
        resolve_user(user_service, "zed")
    with pytest.raises(NotFoundError):
        resolve_user(user_service, 999)


def test_user_create_command(cli_runner, temp_db):
    """Test creating a user from the CLI."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "user", "create", "alice"])

    assert result.exit_code == 0
    assert "Created user 'alice'" in result.output
    assert "ID:" in result.output


def test_user_create_duplicate_command(cli_runner, temp_db):
    """Test creating a duplicate user fails."""
    result1 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "user", "create", "alice"])
    assert result1.exit_code == 0

    result2 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "user", "create", "alice"])

    assert result2.exit_code == 1
    assert "already exists" in result2.output.lower()


def test_user_list_empty(cli_runner, temp_db):
    """Test listing users when none exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "user", "list"])

    assert result.exit_code == 0
    assert "No users found" in result.output


def test_user_list_with_data(cli_runner, temp_db, sample_user):
    """Test listing users with data."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "user", "list"])

    assert result.exit_code == 0
    assert "alice" in result.output
