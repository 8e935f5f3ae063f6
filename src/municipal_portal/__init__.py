"""Citizen claims portal core.

Schema-driven claim forms, attachment upload, claim submission and
polling synchronization of claims, messages and notifications.
"""

__version__ = "0.1.0"
