# rpc/errors.py

"""JSON-RPC 2.0 error codes raised by the dispatcher and turned into error objects."""

from rpc.message_schema import JSONRPCError


class RPCError(Exception):
    code = -32603

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_error(self) -> JSONRPCError:
        return JSONRPCError(code=self.code, message=self.message)


class ParseError(RPCError):
    code = -32700


class InvalidRequest(RPCError):
    code = -32600


class MethodNotFound(RPCError):
    """Unknown tool name."""
    code = -32601


class InvalidParams(RPCError):
    """Unsupported currency or malformed tool arguments."""
    code = -32602


class InternalError(RPCError):
    code = -32603
