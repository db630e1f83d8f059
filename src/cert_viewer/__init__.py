from __future__ import annotations

__version__ = "1.0.0"

BANNER = f"Certificate Viewer CLI v{__version__}"
