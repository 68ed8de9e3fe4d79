"""
API Test Layer Configuration

HTTP contract tests. The FastAPI app is exercised in-process through
httpx's ASGI transport with the service wired onto in-memory mocks.

Usage:
    pytest tests/api -v
    pytest tests/api -v -k "decision"
"""
import os
import sys

# Add project root
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)
