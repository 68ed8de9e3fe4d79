"""
Component Test Layer Configuration

Structure:
    tests/component/
    └── campaign_workflow/   Service tests against in-memory mocks

Usage:
    pytest tests/component -v
    pytest tests/component/campaign_workflow -v
"""
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
