"""bulksign - Resilient bulk Authenticode signing for build pipelines.

Provisions a code-signing certificate, then signs and verifies every eligible
artifact under a directory tree with bounded retries.
"""

__version__ = "0.1.0"
__author__ = "bulksign Contributors"

from bulksign.config import Settings, SigningConfig, get_settings

__all__ = ["Settings", "SigningConfig", "get_settings", "__version__"]
