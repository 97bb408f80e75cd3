from ..core.schema import Schema
from .index_info import IndexConfig


class IndexConfigValidator:
    """🔍 Validates index configs against a source schema and the catalog.

    🏷️ Checks the index name
    🔑 Validates indexed and included columns exist
    🚫 Rejects duplicate and overlapping columns
    """

    def __init__(self):
        """
        🎬 Initialize validator with empty error list.
        """
        self.validation_errors: list[str] = []

    def validate_config(self, config: IndexConfig, source_schema: Schema) -> bool:
        """
        🔍 Validate that an index can be built from this config.

        Args:
            config: The index definition
            source_schema: Schema of the dataset being indexed

        Returns:
            True if valid, False otherwise
        """
        self.validation_errors.clear()

        if not config.name or not config.name.strip():
            self.validation_errors.append("Index name must not be empty")
        elif any(ch in config.name for ch in "/\\") or config.name in (".", ".."):
            self.validation_errors.append(
                f"Index name '{config.name}' must not contain path separators")

        if not config.indexed_columns:
            self.validation_errors.append("Index must have at least one indexed column")

        for label, columns in (("indexed", config.indexed_columns),
                               ("included", config.included_columns)):
            if len(columns) != len(set(columns)):
                self.validation_errors.append(f"Duplicate {label} columns: {list(columns)}")

            missing = source_schema.missing(list(columns))
            if missing:
                self.validation_errors.append(
                    f"{label.capitalize()} columns not in source schema: {missing}")

        overlap = set(config.indexed_columns) & set(config.included_columns)
        if overlap:
            self.validation_errors.append(
                f"Columns both indexed and included: {sorted(overlap)}")

        return len(self.validation_errors) == 0

    def get_validation_errors(self) -> list[str]:
        """Get a list of validation errors from last validation."""
        return self.validation_errors.copy()
