class HexGameError(Exception):
    """Base class for every rejected request. Raised before any state is mutated."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class ConfigError(HexGameError):
    pass


class OutOfBounds(HexGameError):
    pass


class InvalidValue(HexGameError):
    pass


class MalformedRequest(HexGameError):
    pass


class CellOccupied(HexGameError):
    status_code = 409


class WrongTurn(HexGameError):
    status_code = 409


class SwapNotAllowed(HexGameError):
    status_code = 409


class GameAlreadyFinished(HexGameError):
    status_code = 409


class GameNotFound(HexGameError):
    status_code = 404


class UnauthorizedCaller(HexGameError):
    status_code = 403
