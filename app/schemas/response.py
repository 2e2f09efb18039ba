from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned on every path, success and error alike"""
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode")
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True


def ok(data: Any = None, message: str = "Success", status_code: int = 200) -> dict:
    return {"statusCode": status_code, "data": data, "message": message, "success": status_code < 400}


def error_body(status_code: int, message: str) -> dict:
    return {"statusCode": status_code, "data": None, "message": message, "success": False}
