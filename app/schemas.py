from pydantic import BaseModel, Field
from typing import Any, Optional, List, Literal

class AuthIn(BaseModel):
    init_data: str  # Telegram WebApp initData

class AuthOut(BaseModel):
    permitted: bool
    user_id: Optional[int] = None

class RateRequestIn(AuthIn):
    client: str = Field(min_length=1)
    side: Literal["buy", "sell", "both"]

class ComsRequestIn(AuthIn):
    client: str = Field(min_length=1)
    side: Literal["buy", "sell"]
    currency: Optional[str] = None
    amount: float = Field(gt=0)
    rate: float = Field(gt=0)
    coms: Optional[float] = None

# Payloads forwarded to the pricing backend; user_id is None for verified but anonymous callers
class RateRequestOut(BaseModel):
    client: str
    side: Literal["buy", "sell", "both"]
    user_id: Optional[int]

class ComsRequestOut(BaseModel):
    client: str
    side: Literal["buy", "sell"]
    currency: Optional[str] = None
    amount: float
    rate: float
    coms: Optional[float] = None
    user_id: Optional[int]

class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None

class CustomerList(BaseModel):
    customers: List[str] = Field(default_factory=list)

class HealthOut(BaseModel):
    status: str
    pricing: Optional[str] = None  # pricing backend status
