"""
Unit tests for the database maintenance scripts and shared infrastructure.

The database is mocked; these tests cover exit codes and what each script asks
of the database writer.
"""

import logging
from unittest.mock import MagicMock, Mock, patch

import pandas as pd

from scripts.database import check_db, reset_database, set_featured


class TestResetDatabase:
    @patch("scripts.database.reset_database.setup_database_logging")
    @patch("scripts.database.reset_database.get_postgres_engine")
    @patch("scripts.database.reset_database.DatabaseWriter")
    def test_reset_success(self, mock_writer_cls, mock_get_engine, mock_logging):
        writer = mock_writer_cls.return_value
        writer.get_table_info.return_value = {
            "exists": True,
            "row_count": 0,
            "columns": ["id", "source", "source_id"],
            "primary_keys": ["id"],
        }

        assert reset_database.main() == 0
        writer.reset_database.assert_called_once()

    @patch("scripts.database.reset_database.setup_database_logging")
    @patch("scripts.database.reset_database.get_postgres_engine")
    def test_reset_without_credentials(self, mock_get_engine, mock_logging):
        mock_get_engine.side_effect = ValueError("POSTGRES_PASSWORD is required")
        assert reset_database.main() == 1


class TestSetFeatured:
    @patch("scripts.database.set_featured.setup_database_logging")
    @patch("scripts.database.set_featured.get_postgres_engine")
    @patch("scripts.database.set_featured.DatabaseWriter")
    def test_default_count(self, mock_writer_cls, mock_get_engine, mock_logging):
        mock_writer_cls.return_value.set_featured.return_value = 3

        assert set_featured.main([]) == 0
        mock_writer_cls.return_value.set_featured.assert_called_once_with(3)

    @patch("scripts.database.set_featured.setup_database_logging")
    @patch("scripts.database.set_featured.get_postgres_engine")
    @patch("scripts.database.set_featured.DatabaseWriter")
    def test_custom_count(self, mock_writer_cls, mock_get_engine, mock_logging):
        mock_writer_cls.return_value.set_featured.return_value = 6

        assert set_featured.main(["--count", "6"]) == 0
        mock_writer_cls.return_value.set_featured.assert_called_once_with(6)

    @patch("scripts.database.set_featured.setup_database_logging")
    def test_negative_count(self, mock_logging):
        assert set_featured.main(["--count", "-1"]) == 1


class TestCheckDb:
    @patch("scripts.database.check_db.pd.read_sql")
    def test_layer_summary(self, mock_read_sql):
        engine = MagicMock()
        expected = pd.DataFrame(
            {"source": ["maaamet_poi_wfs"], "typename": ["poi_matkarada_j"], "tracks": [4]}
        )
        mock_read_sql.return_value = expected

        result = check_db.layer_summary(engine)

        assert result is expected
        assert "raw_props->>'typename'" in str(mock_read_sql.call_args.args[0])

    @patch("scripts.database.check_db.setup_database_logging")
    @patch("scripts.database.check_db.featured_count", return_value=3)
    @patch("scripts.database.check_db.layer_summary")
    @patch("scripts.database.check_db.DatabaseWriter")
    @patch("scripts.database.check_db.get_postgres_engine")
    def test_report(
        self, mock_get_engine, mock_writer_cls, mock_summary, mock_featured, mock_logging
    ):
        mock_writer_cls.return_value.count_tracks.return_value = 15
        mock_summary.return_value = pd.DataFrame(
            {
                "source": ["maaamet_poi_wfs", "maaamet_poi_wfs"],
                "typename": ["poi_matkarada_j", "poi_rmk_matkarada_j"],
                "tracks": [10, 5],
                "with_geometry": [10, 4],
                "total_km": [31.2, 12.0],
                "min_km": [0.8, 1.1],
                "max_km": [7.5, 4.0],
            }
        )
        logger = mock_logging.return_value

        assert check_db.main() == 0

        messages = [str(c.args[0]) for c in logger.info.call_args_list]
        assert "Total tracks: 15" in messages
        assert "Featured tracks: 3" in messages
        logger.warning.assert_called_once()
        mock_writer_cls.return_value.count_tracks.assert_called_once_with()

    @patch("scripts.database.check_db.setup_database_logging")
    @patch("scripts.database.check_db.featured_count", return_value=0)
    @patch("scripts.database.check_db.layer_summary")
    @patch("scripts.database.check_db.DatabaseWriter")
    @patch("scripts.database.check_db.get_postgres_engine")
    def test_empty_table(
        self, mock_get_engine, mock_writer_cls, mock_summary, mock_featured, mock_logging
    ):
        mock_writer_cls.return_value.count_tracks.return_value = 0
        mock_summary.return_value = pd.DataFrame()
        logger = mock_logging.return_value

        assert check_db.main() == 0

        assert "is empty" in logger.warning.call_args.args[0]

    @patch("scripts.database.check_db.setup_database_logging")
    @patch("scripts.database.check_db.get_postgres_engine")
    def test_database_unavailable(self, mock_get_engine, mock_logging):
        mock_get_engine.side_effect = ValueError("POSTGRES_PASSWORD is required")
        assert check_db.main() == 1


class TestApiEngine:
    @patch("api.database.get_postgres_engine")
    def test_engine_is_created_once_and_disposed(self, mock_get_engine):
        from api import database

        database.dispose_db_engine()
        engine = Mock()
        mock_get_engine.return_value = engine

        assert database.get_db_engine() is engine
        assert database.get_db_engine() is engine
        mock_get_engine.assert_called_once()

        database.dispose_db_engine()
        engine.dispose.assert_called_once()
        assert database._engine is None


class TestSetupLogging:
    def test_named_logger_writes_to_file(self, tmp_path):
        from utils.logging import setup_logging

        log_file = tmp_path / "nested" / "importer.log"
        logger = setup_logging("DEBUG", str(log_file), "rajad_test_logger")

        logger.info("Importing poi_matkarada_j")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert "Importing poi_matkarada_j" in log_file.read_text(encoding="utf-8")

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        from utils.logging import setup_logging

        log_file = str(tmp_path / "api.log")
        setup_logging("INFO", log_file, "rajad_test_repeat")
        logger = setup_logging("INFO", log_file, "rajad_test_repeat")

        assert len(logger.handlers) == 2
