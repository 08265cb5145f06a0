"""Frontegg permission reconciliation package.

To reconcile permissions:
    from permsync.core.frontegg import PermissionService, FronteggClient

To load configuration:
    from permsync.config import load_settings
"""
__version__ = "0.1.0"
