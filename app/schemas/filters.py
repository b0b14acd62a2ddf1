from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class FilterItem(BaseModel):
    """One entry of the `filtersJson` array sent by the grid."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field: Optional[str] = Field(default=None, alias="filter", description="Record field name, e.g. 'Brand'")
    operator: Optional[str] = Field(default=None, description="One of contains, equals, starts, ends, empty")
    value: Optional[str] = Field(default=None, description="Operand; ignored for 'empty'")

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, value: Any) -> Any:
        # Numbers and booleans typed into the grid arrive unquoted
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


FilterItemList = TypeAdapter(List[FilterItem])
