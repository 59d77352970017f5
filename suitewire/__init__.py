"""suitewire: incremental remote reporting of test suite runs."""

__version__ = "0.1.0"
