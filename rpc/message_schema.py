# rpc/message_schema.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union

RequestId = Union[str, int, None]


class JSONRPCRequest(BaseModel):
    jsonrpc: str = "2.0"
    id: RequestId = None
    method: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)


class JSONRPCError(BaseModel):
    code: int
    message: str


class JSONRPCResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[JSONRPCError] = None

    def to_dict(self) -> Dict[str, Any]:
        # JSON-RPC: result 와 error 중 하나만 포함, id 는 null 이어도 포함
        exclude = {"result"} if self.error is not None else {"error"}
        return self.model_dump(exclude=exclude)


class ToolCallParams(BaseModel):
    name: Optional[str] = None
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ConvertArguments(BaseModel):
    """convert_currency 도구 인자. JSON 키는 amount / from / to."""
    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(..., allow_inf_nan=False, description="Amount to convert")
    from_currency: str = Field(..., alias="from", description="Source currency code")
    to_currency: str = Field(..., alias="to", description="Target currency code")


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]
