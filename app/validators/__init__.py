"""
app/validators package marker.
"""

from app.validators.field_coercers import ProjectRowParser

__all__ = [
    "ProjectRowParser",
]
