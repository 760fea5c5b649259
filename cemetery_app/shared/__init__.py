"""
Shared models and helpers for burial records
"""

from .grave_calculations import compute_age, next_grave_number
from .models import Gender, GraveRecord


__all__ = ['Gender', 'GraveRecord', 'compute_age', 'next_grave_number']
