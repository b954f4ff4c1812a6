"""
Exceptions raised while setting up a transport case.
"""


class ConfigurationError(ValueError):
    """Malformed or inconsistent case input (parameters, mesh or restart data)."""
