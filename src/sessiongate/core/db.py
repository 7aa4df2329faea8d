from typing import Any

from pydantic import BaseModel, ConfigDict


class MongoModel(BaseModel):
    """Base for models persisted as MongoDB documents.

    Subclasses declare their own ``id`` field aliased to ``_id``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data
