"""
Register pytest plugins, fixtures, and hooks to be used during test execution.

All fixtures are organized in the fixtures/ directory. The environment is set up
here, before any application module is imported, because settings and the
database engine are created at import time.
"""

import os
import sys
import tempfile
from pathlib import Path

THIS_DIR = Path(__file__).parent
TESTS_DIR_PARENT = (THIS_DIR / "..").resolve()

# add the parent directory of tests/ to PYTHONPATH
sys.path.insert(0, str(TESTS_DIR_PARENT))

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="controle_impressao_tests_"))

os.environ["DB_URL"] = f"sqlite:///{_TEST_ROOT / 'app.db'}"
os.environ["FILES_BASE_PATH"] = str(_TEST_ROOT / "uploads")
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JWT_SECRET"] = "test-secret-with-more-than-32-bytes-for-hs256"
os.environ["CLEANUP_ENABLED"] = "false"
os.environ["ADMIN_REGISTRATIONS_RAW"] = "9000"
os.environ["MANAGER_REGISTRATIONS_RAW"] = "8000"
os.environ.pop("SMTP_HOST", None)

# Register all fixture modules
pytest_plugins = [
    # Database engine / session over SQLite
    "tests.fixtures.db_fixtures",
    # Users, clock, storage, notification sink and services
    "tests.fixtures.service_fixtures",
    # Flask app and test client
    "tests.fixtures.app_fixtures",
]
