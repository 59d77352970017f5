"""Unit tests for core domain logic.

These tests exercise core reporting logic without external dependencies.
The transport port is replaced with the in-memory fake from tests/fakes/.
"""
