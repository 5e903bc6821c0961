"""
Global configuration for curlstream.

This module contains environment-specific settings that apply across all modules.
"""

import os

_SELECT_TIMEOUT_ENV = "CURLSTREAM_SELECT_TIMEOUT"

try:
    SELECT_TIMEOUT_SECS = float(os.environ.get(_SELECT_TIMEOUT_ENV, "1.0"))
    """Default wait per multiplex pass, in seconds. Defaults to 1.0."""
except ValueError:
    raise ValueError(
        f"Invalid {_SELECT_TIMEOUT_ENV} environment variable: "
        f"'{os.environ[_SELECT_TIMEOUT_ENV]}'. Expected a number of seconds."
    ) from None

if SELECT_TIMEOUT_SECS <= 0:
    raise ValueError(
        f"Invalid {_SELECT_TIMEOUT_ENV} environment variable: '{SELECT_TIMEOUT_SECS}'. "
        "The select timeout must be positive."
    )
