"""Mapping between app field names and Supabase column names."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FieldMap:
    """Total, bidirectional mapping for one table."""

    table: str
    columns: dict[str, str]
    _fields: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        inverse = {column: name for name, column in self.columns.items()}
        if len(inverse) != len(self.columns):
            raise ValueError(f"Duplicate column in mapping for {self.table}")
        object.__setattr__(self, "_fields", inverse)

    def column(self, name: str) -> str:
        """Return the column for an app field name."""
        try:
            return self.columns[name]
        except KeyError:
            raise KeyError(f"Unknown {self.table} field: {name}") from None

    def to_remote(self, values: dict[str, object]) -> dict[str, object]:
        """Rename app fields to columns, keeping only the keys given."""
        return {self.column(name): value for name, value in values.items()}

    def from_remote(self, row: dict[str, object]) -> dict[str, object]:
        """Rename known columns to app fields, ignoring extra columns."""
        return {
            self._fields[column]: value
            for column, value in row.items()
            if column in self._fields
        }

    def select_clause(self) -> str:
        """Return a comma-separated column list for ``select``."""
        return ", ".join(self.columns.values())


PROFILE_FIELDS = FieldMap(
    table="user_profiles",
    columns={
        "id": "user_id",
        "name": "name",
        "weight": "weight",
        "height": "height",
        "weightUnit": "weight_unit",
        "heightUnit": "height_unit",
        "goal": "goal",
        "activityLevel": "activity_level",
        "dailyMacroLimit": "daily_macro_limit",
        "dailyCalorieLimit": "daily_calories_limit",
    },
)

MEAL_FIELDS = FieldMap(
    table="meals",
    columns={
        "id": "id",
        "name": "name",
        "foods": "foods",
        "date": "date",
        "time": "time",
        "type": "meal_type",
        "macros": "macros",
    },
)

WEIGHT_FIELDS = FieldMap(
    table="weight_history",
    columns={
        "id": "id",
        "date": "entry_date",
        "weight": "weight_kg",
    },
)
