"""Test suite for the suitewire reporting system.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - No network, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - HTTP transport against httpx.MockTransport
   - Pytest plugin against inline pytester sessions

3. fakes/: Port implementations for testing
   - In-memory ReportTransportPort and a controllable clock
"""
