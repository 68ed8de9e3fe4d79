"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - api/        : HTTP contract tests (ASGI app, mocked dependencies)
    - component/  : Component tests (service classes, mocked dependencies)
    - unit/       : Unit tests (pure functions, no I/O)
    - contracts/  : Shared test data factories
"""
import os
import sys

# Set testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("NATS_ENABLED", "false")
os.environ.setdefault("NOTIFICATION_DELIVERY_ENABLED", "false")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


def pytest_configure(config):
    """Register markers for every layer"""
    config.addinivalue_line("markers", "unit: pure logic tests")
    config.addinivalue_line("markers", "component: service tests with mocked dependencies")
    config.addinivalue_line("markers", "api: HTTP contract tests")
