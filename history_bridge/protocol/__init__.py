from .dispatcher import CAPABILITIES, ProtocolDispatcher, ProtocolError, encode_response

__all__ = ["CAPABILITIES", "ProtocolDispatcher", "ProtocolError", "encode_response"]
