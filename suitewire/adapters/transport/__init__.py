"""Transport adapters for delivering suite messages to a collector."""
