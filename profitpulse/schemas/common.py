from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class SuccessOut(BaseModel, Generic[T]):
    success: bool = True
    data: T


class MessageOut(BaseModel):
    message: str


class ValidationIssueOut(BaseModel):
    field: str
    message: str
    type: str | None = None


class ErrorDetailOut(BaseModel):
    message: str
    status: int
    details: list[ValidationIssueOut] | None = None


class ErrorOut(BaseModel):
    success: bool = False
    error: ErrorDetailOut

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": {
                    "message": "Item not found",
                    "status": 404,
                },
            }
        }
    )
