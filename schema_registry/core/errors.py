from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNSUPPORTED_TYPE = "unsupported_type"
    NOT_FOUND = "not_found"
    INTEGRITY = "integrity"
    CONFLICT = "conflict"


class RegistryError(Exception):

    kind: ErrorKind = ErrorKind.INVALID_INPUT
    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidInputError(RegistryError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class UnsupportedTypeError(RegistryError):
    kind = ErrorKind.UNSUPPORTED_TYPE
    status_code = 415


class NotFoundError(RegistryError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class BlobNotFoundError(NotFoundError):
    pass


class IntegrityError(RegistryError):
    kind = ErrorKind.INTEGRITY
    status_code = 500


class VersionConflictError(RegistryError):
    kind = ErrorKind.CONFLICT
    status_code = 409


class BlobExistsError(VersionConflictError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"blob already exists: {path}")
