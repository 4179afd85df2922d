"""Tests for logging setup."""

import logging

import pytest

from ljmd.logging_config import LOG_FORMAT, setup_logging


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger("ljmd")
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


class TestSetupLogging:
    """Test setup_logging."""

    def test_level_and_handler(self, package_logger):
        """Test that a console handler is attached at the requested level."""
        logger = setup_logging(logging.DEBUG)

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT

    def test_level_by_name(self, package_logger):
        """Test string levels."""
        logger = setup_logging("warning")
        assert logger.level == logging.WARNING

    def test_unknown_level(self, package_logger):
        """Test that unknown level names are rejected."""
        with pytest.raises(ValueError):
            setup_logging("LOUD")

    def test_repeated_setup_does_not_duplicate(self, package_logger):
        """Test that calling setup twice keeps one handler."""
        setup_logging()
        setup_logging()
        assert len(package_logger.handlers) == 1

    def test_log_file(self, package_logger, tmp_path):
        """Test that messages from submodules reach the log file."""
        log_file = tmp_path / "ljmd.log"
        setup_logging(logging.DEBUG, log_file=str(log_file))

        logging.getLogger("ljmd.neighborlists.cell").debug("grid resized")

        assert len(package_logger.handlers) == 2
        content = log_file.read_text()
        assert "ljmd.neighborlists.cell - DEBUG - grid resized" in content

    def test_debug_messages_from_rebuilds(self, caplog):
        """Test that list rebuilds are logged at DEBUG."""
        from ljmd.forcefields import ForceField
        from ljmd.system import ParticleSystem

        system = ParticleSystem(32)
        system.place_fcc(2, 2.0)
        with caplog.at_level(logging.DEBUG, logger="ljmd"):
            ForceField(r_cut=1.0, strategy="neighbor", skin=0.2).compute(system)

        messages = [r.getMessage() for r in caplog.records]
        assert any("Rebuilding cell and neighbor lists" in m for m in messages)
        assert any("Neighbor list built" in m for m in messages)
