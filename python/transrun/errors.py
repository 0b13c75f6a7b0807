class TranspileError(Exception):
    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class LoadError(ImportError):
    pass
