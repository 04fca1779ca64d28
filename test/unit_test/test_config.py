"""
Unit tests for configuration and logging setup
"""

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tranche_manager.config import (
    Config,
    LoggingConfig,
    ManagerConfig,
    PriceApiConfig,
    UniswapConfig,
    enable_file_logging,
    get_config,
    setup_logging,
)


class TestConfigFromEnvironment(unittest.TestCase):
    """Tests for environment-driven configuration"""

    @patch.dict(os.environ, {"MANAGER_REBALANCE_DELAY": "60", "MANAGER_MIN_THRESHOLD": "120"})
    def test_manager_config_reads_env(self):
        cfg = ManagerConfig()
        self.assertEqual(cfg.rebalance_delay, 60)
        self.assertEqual(cfg.min_threshold, 120)

    @patch.dict(os.environ, {"MANAGER_REBALANCE_DELAY": "soon"})
    def test_invalid_int_falls_back_to_default(self):
        cfg = ManagerConfig()
        self.assertEqual(cfg.rebalance_delay, 3600)

    @patch.dict(os.environ, {"UNISWAP_TWAP_SECONDS": "600", "UNISWAP_TIMEOUT": "2.5"})
    def test_uniswap_config(self):
        cfg = UniswapConfig()
        self.assertEqual(cfg.twap_seconds, 600)
        self.assertEqual(cfg.timeout, 2.5)
        self.assertEqual(cfg.eth_chain_id, 1)

    @patch.dict(os.environ, {"PRICE_API_URL": "https://prices.test/eth", "PRICE_API_FIELD": "data.price"})
    def test_price_api_config(self):
        cfg = PriceApiConfig()
        self.assertEqual(cfg.url, "https://prices.test/eth")
        self.assertEqual(cfg.price_field, "data.price")

    @patch.dict(os.environ, {"LOG_LEVEL": "debug", "LOG_CONSOLE": "false"})
    def test_logging_config(self):
        cfg = LoggingConfig()
        self.assertEqual(cfg.level, logging.DEBUG)
        self.assertFalse(cfg.console_output)

    def test_container(self):
        cfg = Config()
        self.assertIsInstance(cfg.manager, ManagerConfig)
        self.assertIsInstance(cfg.uniswap, UniswapConfig)
        self.assertIsInstance(get_config(), Config)

    @patch.dict(os.environ, {"MANAGER_REBALANCE_DELAY": "90"})
    def test_reload(self):
        self.assertEqual(Config.reload().manager.rebalance_delay, 90)


class TestSetupLogging(unittest.TestCase):
    """Tests for logging handler setup"""

    def test_file_and_console_handlers(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = str(Path(tmp) / "nested" / "manager.log")
            log_config = LoggingConfig(log_file=log_file, log_level="INFO", console_output=True)

            logger = setup_logging(log_config, logger_name="tranche_manager_test_setup")
            try:
                self.assertEqual(len(logger.handlers), 2)
                self.assertTrue(Path(log_file).exists())
                self.assertEqual(logger.level, logging.INFO)
            finally:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)

    def test_setup_replaces_handlers(self):
        log_config = LoggingConfig(log_file="", log_level="WARNING", console_output=True)
        logger = setup_logging(log_config, logger_name="tranche_manager_test_replace")
        logger = setup_logging(log_config, logger_name="tranche_manager_test_replace")
        try:
            self.assertEqual(len(logger.handlers), 1)
        finally:
            for handler in logger.handlers[:]:
                handler.close()
                logger.removeHandler(handler)

    def test_enable_file_logging(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = str(Path(tmp) / "quick.log")
            logger = enable_file_logging(log_file, level="DEBUG", console=False)
            try:
                self.assertEqual(logger.name, "tranche_manager")
                self.assertEqual(len(logger.handlers), 1)
                self.assertEqual(logger.level, logging.DEBUG)
            finally:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)


if __name__ == "__main__":
    unittest.main()
