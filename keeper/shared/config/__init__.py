"""
Shared Config Module
====================

Structure:
- settings/defaults.yaml: packaged defaults read by ConfigManager
"""
