from .converter import Converter, ConverterOpts, convert
from .errors import ParseError, StrictModeError

__all__ = [
    "Converter",
    "ConverterOpts",
    "ParseError",
    "StrictModeError",
    "convert",
]
