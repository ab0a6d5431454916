"""Service layer modules (file-system and external I/O).

Currently includes archive building and output persistence.
"""

__all__ = [
    "archive",
    "errors",
]
