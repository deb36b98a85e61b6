"""Unit test configuration.

Unit tests never touch external services; see tests/conftest.py.
"""
