"""Integration tests for the mounter.

These tests run whole commands (read, push, write) against sample site
directories and the in-memory engine of tests.helpers, without network
access.
"""
