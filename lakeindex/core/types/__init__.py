from .type_enum import FieldType
from .predicate import Predicate

__all__ = [
    'FieldType',
    'Predicate',
]
