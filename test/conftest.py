"""
Test Configuration and Fixtures

This module provides:
- Kvrocks isolation with worker-specific key prefixes (pytest-xdist)
- Test log directory
- No in-process Kafka consumer when the app is started under test
"""

# =============================================================================
# Environment setup MUST happen before any application import, since
# settings are read when src.platform.config.core_setting is first loaded
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['KVROCKS_KEY_PREFIX'] = 'test_'
    else:
        os.environ['KVROCKS_KEY_PREFIX'] = f'test_{worker_id}_'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['KAFKA_CONSUMER_ENABLED'] = 'false'


_early_setup_test_environment()
