class ScriptError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class NotFound(ScriptError):
    status_code = 404


class Conflict(ScriptError):
    status_code = 400


class InvalidName(ScriptError):
    status_code = 400


class InvalidInput(ScriptError):
    status_code = 400


class Unauthorized(ScriptError):
    status_code = 401


class Unmanaged(ScriptError):
    status_code = 400


class InvalidType(ScriptError):
    status_code = 400


class EmptyFolder(ScriptError):
    status_code = 404


class IOFailure(ScriptError):
    status_code = 500
