"""
Shared Config Module
====================

Configuration settings used by both the widget and the application process.

Structure:
- settings/: YAML configuration files (defaults, project, user)
"""
