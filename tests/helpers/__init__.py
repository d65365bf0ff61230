"""Test helpers for the spanner test suite.

- fake_git: in-memory ``Transport`` that still creates install directories
- git_helpers: real git repositories for integration tests
- cache_utils: cache and logging resets for test isolation
- io_utils: writing declaration and config files
"""
