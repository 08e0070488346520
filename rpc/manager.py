# rpc/manager.py

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import ValidationError

from app.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from forex.conversion import UnsupportedCurrencyError, convert, format_conversion
from forex.rates import RateStore
from rpc.errors import InternalError, InvalidParams, InvalidRequest, MethodNotFound, RPCError
from rpc.message_schema import (
    ConvertArguments,
    JSONRPCRequest,
    JSONRPCResponse,
    TextContent,
    ToolCallParams,
    ToolResult,
)
from utils.logger import logger

CONVERT_TOOL = "convert_currency"
_CURRENCY_HINT = "USD, EUR, GBP, JPY, INR, CAD, AUD, CHF, CNY"

TOOLS: List[Dict[str, Any]] = [
    {
        "name": CONVERT_TOOL,
        "description": "Convert amount from one currency to another using live rates",
        "inputSchema": {
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Amount to convert"},
                "from": {"type": "string", "description": f"Source currency ({_CURRENCY_HINT})"},
                "to": {"type": "string", "description": f"Target currency ({_CURRENCY_HINT})"},
            },
            "required": ["amount", "from", "to"],
        },
    }
]


def _raw_id(payload: Any):
    request_id = payload.get("id") if isinstance(payload, dict) else None
    return request_id if isinstance(request_id, (str, int)) and not isinstance(request_id, bool) else None


def error_response(request_id, err: RPCError) -> Dict[str, Any]:
    return JSONRPCResponse(id=request_id, error=err.to_error()).to_dict()


class Manager:
    """
    JSON-RPC 요청을 method 별로 라우팅한다.
    - tools/list  → 도구 목록
    - tools/call  → convert_currency 실행
    - 그 외 (initialize 포함) → 서버 메타데이터
    """

    def __init__(self, store: RateStore = None):
        self.store = store or RateStore()

    def server_info(self) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    async def handle(self, payload: Any) -> Dict[str, Any]:
        request_id = _raw_id(payload)
        try:
            if not isinstance(payload, dict):
                raise InvalidRequest("Request must be a JSON object")
            try:
                request = JSONRPCRequest.model_validate(payload)
            except ValidationError as e:
                raise InvalidRequest(f"Invalid request: {e.errors()[0]['msg']}")

            logger.debug(f"[Manager] Handling {request.method} (id={request.id})")
            if request.method == "tools/list":
                result = {"tools": TOOLS}
            elif request.method == "tools/call":
                result = await self._call_tool(request.params)
            else:
                result = self.server_info()

        except RPCError as e:
            logger.warning(f"[Manager] {type(e).__name__} ({e.code}): {e.message}")
            return error_response(request_id, e)

        return JSONRPCResponse(id=request_id, result=result).to_dict()

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as e:
            raise InvalidParams(f"Invalid tool call: {e.errors()[0]['msg']}")

        if call.name != CONVERT_TOOL:
            raise MethodNotFound(f"Unknown tool: {call.name}")

        try:
            args = ConvertArguments.model_validate(call.arguments)
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(p) for p in err["loc"]) or "arguments"
            raise InvalidParams(f"Invalid argument '{field}': {err['msg']}")

        logger.info(f"[Manager] convert_currency {args.amount} {args.from_currency} -> {args.to_currency}")
        try:
            entry = await self.store.get_entry()
            result = convert(
                entry.rates,
                args.amount,
                args.from_currency,
                args.to_currency,
                timestamp=datetime.now(timezone.utc),
                base=self.store.base,
            )
            label = "Live" if entry.source == "live" else "Fallback"
            text = format_conversion(result, rate_label=label)
        except UnsupportedCurrencyError as e:
            raise InvalidParams(str(e))
        except Exception as e:
            logger.error("[Manager] Conversion failed", exc_info=True)
            raise InternalError(f"Conversion failed: {e}")

        return ToolResult(content=[TextContent(text=text)]).model_dump()
