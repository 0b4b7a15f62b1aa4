"""
Top-level package for CUTBot, the Discord front-end of the CUT ladder.

This package hosts:
- the resilient HTTP client for the ladder backend (retries, error taxonomy)
- config loading and validation
- Discord slash commands, embeds, pagination views and error reporting
"""

__version__ = "1.0.0"
