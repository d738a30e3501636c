"""
telexform error types
"""

from typing import List, Tuple, Optional


class TXException(Exception):
    """telexform specific exception with call trace support"""

    def __init__(self, msg: str, stack_trace: Optional[List[Tuple[str, str]]] = None):
        self.msg = msg
        self.stack_trace = stack_trace or []
        super().__init__(self.format_message())

    def format_message(self) -> str:
        if not self.stack_trace:
            return self.msg

        trace_str = ""
        for identifier, position in self.stack_trace:
            trace_str += f"\n{identifier} at {position}"

        return f"{self.msg}{trace_str}"


class UnknownFunctionError(TXException):
    """Raised when a function name does not resolve in the registry"""


class ArgumentBindingError(TXException):
    """Raised when a call's arguments do not fit the function's parameters"""


# Type alias for stack trace
Stack = List[Tuple[str, str]]

