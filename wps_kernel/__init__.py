"""
WPS Kernel

Shared foundation for wage protection file generation:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- Injectable clock for deterministic timestamps
- Workflow value objects for document lifecycles
- SQLAlchemy base classes and engine/session handling
"""

__version__ = "0.1.0"
