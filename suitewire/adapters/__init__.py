"""External adapters for the suitewire reporting system.

This package contains all external dependencies (httpx, pytest) and
provides implementations of the core port interfaces.

Adapter Organization:

- transport/: Adapters for delivering suite messages (HTTP collector)
- pytest_plugin/: Harness adapter turning a pytest session into suite events
"""
