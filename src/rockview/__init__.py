"""RockView church administration package.

This package is organized by feature modules (hierarchy, users, reports, ...)
with a thin Flask controller layer and service/repository layers.
"""
