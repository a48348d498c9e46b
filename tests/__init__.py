"""
Test suite for the clinic backend.

Unit tests for credentials, the access policy, the status workflow and the
request pipeline, plus API tests for every router.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
