"""Pytest harness adapter.

Registered through the ``pytest11`` entry point; see plugin.py.
"""
