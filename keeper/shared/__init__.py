"""
Keeper Shared Kernel
====================

Architecture:
- core: EventBus, configuration
- infrastructure: Key-value persistence adapters
- domain: Credentials, validation rules, verifier capability
"""

__version__ = "0.1.0"

__all__ = []
