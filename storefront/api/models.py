"""
Schémas pydantic des échanges avec l'API backend.
"""
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

BatchNumber = Union[int, str]


class CheckoutItem(BaseModel):
    name: str
    email: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    batch_number: Optional[BatchNumber] = None


class CheckoutSession(BaseModel):
    url: str


class CreateUserResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""
    data: Any = None


class VerifySessionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    valid: bool = False
    paid: bool = False
    session_id: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[Union[int, float]] = None
    currency: Optional[str] = None
    error: Optional[str] = None
    batch_number: Optional[BatchNumber] = None
    full_name: Optional[str] = None
    email: Optional[str] = None


class RegisterStudentRequest(BaseModel):
    batch_number: BatchNumber
    full_name: str
    email: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class RegisterStudentResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""
    error: Optional[str] = None
    details: Optional[str] = None
    warning: Optional[str] = None


class StudentOrder(BaseModel):
    model_config = ConfigDict(extra="allow")

    class_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: Optional[str] = None
    batch_num: Optional[int] = None


class Batch(BaseModel):
    model_config = ConfigDict(extra="allow")

    batch_num: int
    class_type: Literal["beginner", "intermediate", "advanced"]
    start_date: str
    end_date: str
    time: str = ""
    length: int = 0
    students: int = 0
    max_students: int = 0
    active: bool = True
    full: bool = False
    description: Optional[str] = None

    @property
    def remaining(self) -> int:
        """Places restantes, jamais négatives."""
        return max(self.max_students - self.students, 0)

    @property
    def available(self) -> bool:
        return self.active and not self.full and self.remaining > 0


class ContactFormRequest(BaseModel):
    email: str
    category: str
    message: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""


__all__: List[str] = [
    "CheckoutItem",
    "CheckoutSession",
    "CreateUserResponse",
    "VerifySessionResponse",
    "RegisterStudentRequest",
    "RegisterStudentResponse",
    "StudentOrder",
    "Batch",
    "ContactFormRequest",
    "MessageResponse",
]
