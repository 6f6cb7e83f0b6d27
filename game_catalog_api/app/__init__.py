"""
Application package initializer.

The catalog is organised into configuration and storage plumbing
(``core``), request/response models (``schemas``), business logic
(``services``) and versioned HTTP routes (``api``).
"""

from .main import app  # noqa: F401
