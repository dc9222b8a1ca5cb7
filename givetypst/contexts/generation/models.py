"""Request schema for the generate endpoint."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from givetypst.exceptions import ValidationError


class GenerateRequest(BaseModel):
    """
    Body of POST /generate.

    Attributes:
        template_key: Key of the Typst template in the bucket (JSON: templateKey)
        data: Inline JSON object passed to the template
        data_key: Key of a JSON data file in the bucket (JSON: dataKey)

    ``data`` and ``data_key`` are mutually exclusive. ``data: null`` is the same
    as leaving it out; ``data: {}`` counts as inline data.
    """

    model_config = ConfigDict(frozen=True)

    template_key: Optional[str] = Field(default=None, alias="templateKey")
    data: Optional[Dict[str, Any]] = None
    data_key: Optional[str] = Field(default=None, alias="dataKey")

    @property
    def has_inline_data(self) -> bool:
        return self.data is not None

    @property
    def has_data_key(self) -> bool:
        return bool(self.data_key)


def parse_generate_request(body: bytes) -> GenerateRequest:
    """
    Parse a raw request body.

    Raises:
        ValidationError: If the body is not JSON or a field has the wrong type
    """
    try:
        return GenerateRequest.model_validate_json(body)
    except PydanticValidationError as e:
        raise ValidationError("invalid request", original_error=e) from e
