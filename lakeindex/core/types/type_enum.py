from enum import Enum


class FieldType(Enum):
    """
    Enum for column types.
    """
    INT = "int"
    STRING = "string"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DOUBLE = "double"

    def python_types(self) -> tuple:
        """Python types a value of this column type may have."""
        type_map = {
            FieldType.INT: (int,),
            FieldType.STRING: (str,),
            FieldType.BOOLEAN: (bool,),
            FieldType.FLOAT: (int, float),
            FieldType.DOUBLE: (int, float),
        }

        return type_map[self]

    def accepts(self, value) -> bool:
        """
        Check whether a value fits this column type.

        None is accepted for every type (missing value). Booleans are not
        accepted as integers even though ``bool`` subclasses ``int``.
        """
        if value is None:
            return True
        if isinstance(value, bool) and self != FieldType.BOOLEAN:
            return False
        return isinstance(value, self.python_types())

    def is_numeric(self) -> bool:
        return self in (FieldType.INT, FieldType.FLOAT, FieldType.DOUBLE)

    def comparable_with(self, other: 'FieldType') -> bool:
        """Whether values of the two types can be ordered against each other."""
        return self == other or (self.is_numeric() and other.is_numeric())
