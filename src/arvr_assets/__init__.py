"""Top-level package for the AR/VR asset catalog client.

The package bundles the desktop shell, the remote catalog client and the
format-aware preview machinery used to inspect uploaded assets.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
