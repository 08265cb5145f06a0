"""Core Reconciliation Logic Module

Module Structure:
    - frontegg/  : Frontegg API client, declared-state store and the
                   permission lifecycle service

Usage Pattern:
    from permsync.core.frontegg import PermissionService, ResourceData
"""
