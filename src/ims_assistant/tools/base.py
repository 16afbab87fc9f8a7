"""Base tool class for all assistant tools."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, create_model

from ..errors import ToolArgumentsError
from ..models.tool_models import ToolCategory, ToolSchema

logger = logging.getLogger(__name__)

_PYTHON_TYPES: Dict[str, type] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
}


def to_snake_case(name: str) -> str:
    """Convert an advertised camelCase parameter name to a Python name."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def build_arguments_model(schema: ToolSchema) -> Type[BaseModel]:
    """
    Build a pydantic model validating a tool's arguments.

    Fields use snake_case names with the advertised names as aliases.
    Unknown arguments are rejected and values are never coerced: "5" is
    not an integer and 1 is not a boolean.

    Args:
        schema: Tool schema

    Returns:
        Pydantic model class
    """
    fields: Dict[str, Any] = {}

    for param in schema.parameters:
        if param.enum:
            annotation: Any = Literal[tuple(param.enum)]
        elif param.type in _PYTHON_TYPES:
            annotation = _PYTHON_TYPES[param.type]
        else:
            raise ValueError(
                f"Unsupported parameter type '{param.type}' for '{param.name}' "
                f"in tool '{schema.name}'"
            )

        if not param.required:
            annotation = Optional[annotation]

        fields[to_snake_case(param.name)] = (
            annotation,
            Field(
                default=... if param.required else None,
                alias=param.name,
                description=param.description,
                ge=param.minimum,
                le=param.maximum,
                min_length=param.min_length,
                max_length=param.max_length,
            ),
        )

    model_name = "".join(part.capitalize() for part in schema.name.split("_")) + "Arguments"
    return create_model(
        model_name,
        __config__=ConfigDict(extra="forbid", strict=True),
        **fields,
    )


def _describe_errors(error: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in e["loc"]) or None,
            "message": e["msg"],
        }
        for e in error.errors()
    ]


class BaseTool(ABC):
    """
    Abstract base class for all tools.

    PATTERN: Schema plus async executor, dispatched by name
    CRITICAL: execute() receives validated, snake_case arguments only
    CRITICAL: Results must be JSON-serializable and size-capped
    GOTCHA: A "no match" outcome returns {"error": ...} instead of raising
    """

    def __init__(self, name: str, category: ToolCategory):
        """
        Initialize base tool.

        Args:
            name: Tool name (must be unique)
            category: Tool category for organization
        """
        self.name = name
        self.category = category
        self.schema = self._build_schema()
        self.arguments_model = build_arguments_model(self.schema)
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    async def execute(self, **kwargs) -> Any:
        """
        Execute tool with validated parameters.

        Args:
            **kwargs: Tool-specific parameters (snake_case)

        Returns:
            JSON-serializable result
        """
        pass

    @abstractmethod
    def _build_schema(self) -> ToolSchema:
        """
        Build tool schema for discovery and validation.

        Returns:
            ToolSchema describing this tool
        """
        pass

    def validate_parameters(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate parameters against schema.

        Args:
            parameters: Arguments as sent by the model

        Returns:
            Validated snake_case keyword arguments, omitted optionals dropped

        Raises:
            ToolArgumentsError: If parameters are invalid
        """
        try:
            validated = self.arguments_model.model_validate(parameters or {})
        except PydanticValidationError as e:
            raise ToolArgumentsError(
                f"Invalid arguments for tool '{self.name}'",
                details=_describe_errors(e),
            ) from e

        return validated.model_dump(exclude_none=True)

    def get_schema(self) -> ToolSchema:
        """
        Get tool schema.

        Returns:
            Tool schema
        """
        return self.schema
