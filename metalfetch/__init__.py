"""
Terminal system-info display: host facts rendered beside an ASCII-art logo.
"""

__all__ = ["errors", "config", "probes", "system_state", "formatting", "cli"]
__version__ = "0.1.0"
