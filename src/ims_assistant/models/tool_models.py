"""Tool-related data models for the tool registry."""

from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List
from enum import Enum
from datetime import datetime
import json


class ToolCategory(str, Enum):
    """Tool categories for organization and discovery."""

    INVENTORY = "inventory"
    SALES = "sales"
    ANALYTICS = "analytics"


class ToolStatus(str, Enum):
    """Tool execution status."""

    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    INVALID_ARGUMENTS = "invalid_arguments"
    NOT_FOUND = "not_found"


class ToolParameter(BaseModel):
    """Tool parameter definition for schema."""

    name: str = Field(description="Parameter name as advertised to the model")
    type: str = Field(description="Parameter type (string, integer, number, boolean)")
    description: str = Field(description="Parameter description")
    required: bool = Field(default=False)
    default: Optional[Any] = Field(default=None)
    enum: Optional[List[Any]] = Field(default=None, description="Allowed values")
    minimum: Optional[float] = Field(default=None)
    maximum: Optional[float] = Field(default=None)
    min_length: Optional[int] = Field(default=None)
    max_length: Optional[int] = Field(default=None)

    def to_json_schema(self) -> Dict[str, Any]:
        """JSON-schema fragment for this parameter."""
        schema: Dict[str, Any] = {
            "type": self.type,
            "description": self.description,
        }
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        return schema


class ToolSchema(BaseModel):
    """Tool schema for function calling and validation."""

    name: str = Field(description="Tool name")
    description: str = Field(description="Tool description")
    category: ToolCategory
    parameters: List[ToolParameter] = Field(default_factory=list)
    returns: str = Field(description="Return type description")
    timeout_seconds: Optional[float] = Field(default=None)

    def to_json_schema(self) -> Dict[str, Any]:
        """
        JSON schema of the tool arguments object.

        Returns:
            Object schema with properties, required list and no extra keys
        """
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
            "additionalProperties": False,
        }

    def to_metadata(self) -> Dict[str, Any]:
        """Model-facing metadata: name, description and argument schema."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "parameters": self.to_json_schema(),
        }


class ToolRequest(BaseModel):
    """Request to execute a tool."""

    tool_name: str = Field(description="Name of tool to execute")
    parameters: Dict[str, Any] = Field(default_factory=dict)
    tool_call_id: Optional[str] = Field(default=None)
    thread_id: Optional[str] = Field(default=None, description="Conversation context")


class ToolResult(BaseModel):
    """Result from tool execution."""

    tool_name: str
    status: ToolStatus
    result: Optional[Any] = Field(default=None, description="Tool output")
    error: Optional[str] = Field(default=None)
    details: Optional[List[Dict[str, Any]]] = Field(default=None)
    execution_time_ms: int = Field(default=0, description="Execution duration")
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_content(self) -> str:
        """
        Render the tool-result message payload.

        Returns:
            JSON string of the tool output, or an error object
        """
        if self.status == ToolStatus.SUCCESS:
            return json.dumps(self.result, default=str)

        payload: Dict[str, Any] = {"error": self.error or self.status.value}
        if self.details:
            payload["details"] = self.details
        return json.dumps(payload, default=str)
