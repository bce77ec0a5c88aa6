class CellError(BaseException):
    pass


class CapacityExceeded(CellError):
    pass


class TooManyReferences(CellError):
    pass


class BufferUnderflow(CellError):
    pass


class RefUnderflow(CellError):
    pass


class UnexpectedData(CellError):
    pass


class MalformedBoc(CellError):
    pass
