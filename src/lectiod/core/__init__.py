"""Core constants, exceptions, models and configuration loading."""
