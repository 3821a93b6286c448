"""
Tests for the CLI interface.
"""
import os
import tempfile
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from favourite_service.cli.main import app, EXIT_CODE_OK, EXIT_CODE_FAIL
from favourite_service.core.errors import FavouriteNotFoundError
from favourite_service.core.keys import FavouriteId
from favourite_service.storage.models import FavouriteAggregate, ProductDetail, UserDetail
from favourite_service.storage.repository import SQLiteFavouriteRepository

runner = CliRunner()

LIKE_DATE = datetime(2023, 1, 15, 10, 30, 0)
LIKE_DATE_TEXT = "15-01-2023__10:30:00:000000"


@pytest.fixture
def mock_aggregator():
    """Patch open_aggregator to yield a mock aggregator."""
    with patch('favourite_service.cli.main.open_aggregator') as mock_open:
        aggregator = MagicMock()
        mock_open.return_value.__enter__.return_value = aggregator
        yield aggregator


@pytest.fixture
def config_path():
    """Write a config whose database lives in a temp dir."""
    with tempfile.TemporaryDirectory() as temp_dir:
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump({
                "database": {"path": os.path.join(temp_dir, "favourites.db")},
                "sources": {
                    "user": {"base_url": "http://user-service.test/api/users"},
                    "product": {"base_url": "http://product-service.test/api/products"}
                }
            }, f)
        yield path


def hydrated(user=True, product=True) -> FavouriteAggregate:
    return FavouriteAggregate(
        user_id=1,
        product_id=101,
        like_date=LIKE_DATE,
        details={
            "user": UserDetail(user_id=1, first_name="John", last_name="Doe") if user else None,
            "product": ProductDetail(
                product_id=101, product_title="Smartphone", price_unit=599.99
            ) if product else None,
        }
    )


class TestShow:
    """Test the show command."""
    
    def test_show_hydrated(self, mock_aggregator):
        """All detail is printed."""
        mock_aggregator.find_by_id.return_value = hydrated()
        
        result = runner.invoke(app, ["show", "1", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_OK
        assert "John Doe" in result.output
        assert "Smartphone" in result.output
        assert "$599.99" in result.output
        assert LIKE_DATE_TEXT in result.output
        mock_aggregator.find_by_id.assert_called_once_with(FavouriteId(1, 101, LIKE_DATE))
    
    def test_show_partial(self, mock_aggregator):
        """Missing detail is reported, not fatal."""
        mock_aggregator.find_by_id.return_value = hydrated(product=False)
        
        result = runner.invoke(app, ["show", "1", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_OK
        assert "John Doe" in result.output
        assert "unavailable" in result.output
        assert "Detail unavailable from: product" in result.output
    
    def test_show_not_found(self, mock_aggregator):
        """A missing favourite exits with failure."""
        key = FavouriteId(1, 101, LIKE_DATE)
        mock_aggregator.find_by_id.side_effect = FavouriteNotFoundError(key)
        
        result = runner.invoke(app, ["show", "1", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_FAIL
        assert "not found" in result.output
    
    def test_show_bad_date(self, mock_aggregator):
        """Dates outside the fixed format are rejected before any lookup."""
        result = runner.invoke(app, ["show", "1", "101", "2023-01-15"])
        
        assert result.exit_code == EXIT_CODE_FAIL
        assert "does not match format" in result.output
        mock_aggregator.find_by_id.assert_not_called()


class TestList:
    """Test the list command."""
    
    def test_list_table(self, mock_aggregator):
        """Favourites are shown in a table."""
        mock_aggregator.find_all.return_value = [hydrated(), hydrated(user=False)]
        
        result = runner.invoke(app, ["list"])
        
        assert result.exit_code == EXIT_CODE_OK
        assert "Favourites" in result.output
        assert "Smartphone" in result.output
        assert "unavailable" in result.output
    
    def test_list_empty(self, mock_aggregator):
        """An empty store prints a hint."""
        mock_aggregator.find_all.return_value = []
        
        result = runner.invoke(app, ["list"])
        
        assert result.exit_code == EXIT_CODE_OK
        assert "No favourites found" in result.output
    
    def test_list_storage_error(self, mock_aggregator):
        """Storage failures exit with failure."""
        mock_aggregator.find_all.side_effect = RuntimeError("disk I/O error")
        
        result = runner.invoke(app, ["list"])
        
        assert result.exit_code == EXIT_CODE_FAIL
        assert "disk I/O error" in result.output


class TestWrites:
    """Test add, update and delete commands."""
    
    def test_add_with_like_date(self, mock_aggregator):
        """The given like date is used."""
        mock_aggregator.save.side_effect = lambda aggregate: aggregate
        
        result = runner.invoke(app, ["add", "1", "101", "--like-date", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_OK
        assert f"Saved favourite 1/101/{LIKE_DATE_TEXT}" in result.output
        saved = mock_aggregator.save.call_args[0][0]
        assert saved.like_date == LIKE_DATE
    
    def test_add_defaults_to_now(self, mock_aggregator):
        """Without a like date the current time is used."""
        mock_aggregator.save.side_effect = lambda aggregate: aggregate
        before = datetime.now()
        
        result = runner.invoke(app, ["add", "1", "101"])
        
        assert result.exit_code == EXIT_CODE_OK
        saved = mock_aggregator.save.call_args[0][0]
        assert saved.like_date >= before
    
    def test_update(self, mock_aggregator):
        """Update goes through the aggregator's update."""
        mock_aggregator.update.side_effect = lambda aggregate: aggregate
        
        result = runner.invoke(app, ["update", "1", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_OK
        assert "Updated favourite" in result.output
        mock_aggregator.save.assert_not_called()
    
    def test_delete(self, mock_aggregator):
        """Delete reports success."""
        mock_aggregator.delete_by_id.return_value = True
        
        result = runner.invoke(app, ["delete", "1", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_OK
        mock_aggregator.delete_by_id.assert_called_once_with(FavouriteId(1, 101, LIKE_DATE))
    
    def test_delete_bad_id(self, mock_aggregator):
        """Non-numeric ids are rejected."""
        result = runner.invoke(app, ["delete", "abc", "101", LIKE_DATE_TEXT])
        
        assert result.exit_code == EXIT_CODE_FAIL
        mock_aggregator.delete_by_id.assert_not_called()


class TestAgainstDatabase:
    """Run commands against a real SQLite database."""
    
    def test_init_add_delete(self, config_path):
        """Favourites written by the CLI land in the configured database."""
        result = runner.invoke(app, ["--config", config_path, "init"])
        assert result.exit_code == EXIT_CODE_OK
        assert "Database initialized successfully" in result.output
        
        result = runner.invoke(
            app, ["--config", config_path, "add", "1", "101", "-d", LIKE_DATE_TEXT]
        )
        assert result.exit_code == EXIT_CODE_OK
        
        with open(config_path, encoding='utf-8') as f:
            db_path = yaml.safe_load(f)["database"]["path"]
        repo = SQLiteFavouriteRepository(db_path)
        assert repo.get(FavouriteId(1, 101, LIKE_DATE)) is not None
        
        result = runner.invoke(app, ["--config", config_path, "delete", "1", "101", LIKE_DATE_TEXT])
        assert result.exit_code == EXIT_CODE_OK
        assert repo.get_all() == []
    
    def test_bad_config(self):
        """An unreadable config exits with failure."""
        result = runner.invoke(app, ["--config", "/nonexistent/config.yaml", "list"])
        
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Configuration error" in result.output
