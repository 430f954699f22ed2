class AppError(Exception):
    """Operational error carrying the HTTP status code to answer with."""

    def __init__(self, message, status_code=500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = "fail" if 400 <= status_code < 500 else "error"

    def to_dict(self):
        return {"status": self.status, "message": self.message}
