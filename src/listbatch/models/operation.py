"""
Module: operation.py
Description: Operation models for the batch engine.

Defines the unit of work queued against a remote list and the rules
that decide whether an operation carries everything its type needs.

Key Components:
- OperationType: Enum of supported list operations
- FormFieldValue: One (internal field name, value) pair for validated writes
- BatchOperation: Immutable queued operation
- require_operation_fields(): Per-type required field check

Dependencies: pydantic, enum, typing
Author: listbatch maintainers
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import OperationValidationError


class OperationType(str, Enum):
    """Supported operations against a remote list."""

    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    ADD_VALIDATE_UPDATE_ITEM_USING_PATH = "addValidateUpdateItemUsingPath"
    VALIDATE_UPDATE_LIST_ITEM = "validateUpdateListItem"


class FormFieldValue(BaseModel):
    """
    A single form value for server-side validated writes.

    Serialises with the remote aliases (FieldName/FieldValue) when dumped
    with by_alias=True.

    Attributes:
        field_name: Internal name of the list field
        field_value: Raw value the server validates and coerces
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True
    )

    field_name: str = Field(
        ...,
        min_length=1,
        alias="FieldName",
        description="Internal name of the list field"
    )
    field_value: str = Field(
        ...,
        alias="FieldValue",
        description="Field value as the server expects it"
    )


class BatchOperation(BaseModel):
    """
    A single queued list operation.

    Operations are normally created by ListOperationBuilder, which assigns
    operation_id at queue time. The per-type required fields are checked by
    require_operation_fields() rather than by the model itself so that the
    dispatcher can report a malformed operation without aborting its chunk.

    Attributes:
        list_name: Target list title
        operation_type: What to do with the item
        item_id: Target item ID (update, delete, validateUpdateListItem)
        data: Field name -> value mapping (add, update)
        form_values: Ordered form values (validation-flavoured operations)
        path: Server-relative folder path (addValidateUpdateItemUsingPath)
        etag: Optimistic concurrency token (update, delete)
        operation_id: Identifier correlating the operation with its result
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )

    list_name: str = Field(
        ...,
        min_length=1,
        description="Target list title"
    )
    operation_type: OperationType = Field(
        ...,
        description="Operation type"
    )
    item_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Target item ID"
    )
    data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Field values for add/update"
    )
    form_values: Optional[List[FormFieldValue]] = Field(
        default=None,
        description="Form values for validated writes"
    )
    path: Optional[str] = Field(
        default=None,
        description="Server-relative folder path for validated creation"
    )
    etag: Optional[str] = Field(
        default=None,
        description="Optimistic concurrency token"
    )
    operation_id: Optional[str] = Field(
        default=None,
        description="Identifier assigned at queue time"
    )

    @field_validator('form_values', mode='before')
    @classmethod
    def coerce_form_value_pairs(cls, v: Any) -> Any:
        """Accept (field_name, field_value) pairs alongside FormFieldValue items."""
        if v is None or not isinstance(v, (list, tuple)):
            return v

        coerced = []
        for item in v:
            if isinstance(item, (list, tuple)) and len(item) == 2:
                coerced.append({"field_name": item[0], "field_value": item[1]})
            else:
                coerced.append(item)
        return coerced


# Fields each operation type needs before it can be queued or registered
REQUIRED_FIELDS: Dict[OperationType, tuple] = {
    OperationType.ADD: ("data",),
    OperationType.UPDATE: ("item_id", "data"),
    OperationType.DELETE: ("item_id",),
    OperationType.ADD_VALIDATE_UPDATE_ITEM_USING_PATH: ("form_values", "path"),
    OperationType.VALIDATE_UPDATE_LIST_ITEM: ("item_id", "form_values"),
}


def missing_operation_fields(operation: BatchOperation) -> List[str]:
    """
    List the required fields an operation does not carry.

    Args:
        operation: Operation to inspect

    Returns:
        Names of missing fields, in declaration order (empty if complete)
    """
    required = REQUIRED_FIELDS.get(operation.operation_type, ())
    missing = []
    for name in required:
        value = getattr(operation, name)
        if value is None or (isinstance(value, str) and not value):
            missing.append(name)
    return missing


def require_operation_fields(operation: BatchOperation) -> BatchOperation:
    """
    Ensure an operation carries every field its type requires.

    Args:
        operation: Operation to check

    Returns:
        The same operation, for chaining

    Raises:
        OperationValidationError: If one or more required fields are missing
    """
    missing = missing_operation_fields(operation)
    if missing:
        raise OperationValidationError(
            f"{' and '.join(missing)} required for {operation.operation_type.value} operation"
        )
    return operation
