from typing import Any, Optional


class PixstackError(Exception):
    """Base class for all pipeline errors."""


class ExpressionError(PixstackError):
    """Expression could not be parsed or evaluated."""


class ExpressionParseError(ExpressionError):
    def __init__(self, message: str, position: int = -1) -> None:
        super().__init__(message if position < 0 else f"{message} (at {position})")
        self.position = position


class ExpressionEvalError(ExpressionError):
    pass


class ImageOperationError(PixstackError):
    """
    A whole-image operation failed. The input raster is left as it was.
    """

    def __init__(self, message: str, operation: Any = None) -> None:
        super().__init__(message)
        self.operation = operation


class ImageStackError(ImageOperationError):
    """
    Raised by the image stack runner. `raster` is the output of the last
    step that succeeded (the input raster if the first step failed).
    """

    def __init__(self, message: str, operation: Any, index: int, raster: Optional[Any]) -> None:
        super().__init__(message, operation)
        self.index = index
        self.raster = raster
