from fastapi import status

class BaseAppException(Exception):
    """Base exception for application"""
    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class ValidationError(BaseAppException):
    """Raised when input is malformed or missing"""
    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

class UnauthorizedError(BaseAppException):
    """Raised when the caller identity does not match the request"""
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)

class ForbiddenError(BaseAppException):
    """Raised when the caller lacks the required role on a list"""
    def __init__(self, message: str = "You do not have access to this list"):
        super().__init__(message, status.HTTP_403_FORBIDDEN)

class NotFoundError(BaseAppException):
    """Raised when a list, item, season or episode is absent"""
    def __init__(self, message: str = "List not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class ConflictError(BaseAppException):
    """Raised on duplicate invitations or duplicate items"""
    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status.HTTP_409_CONFLICT)
    
    def to_dict(self):
        """Return error response as dictionary with error code"""
        return {
            "error_code": "CONFLICT",
            "message": self.message,
            "status_code": self.status_code
        }

class StaleListError(ConflictError):
    """Raised when a list changed between read and write"""
    def __init__(self, message: str = "List was modified concurrently, please retry"):
        super().__init__(message)

class UpstreamError(BaseAppException):
    """Raised when the database fails"""
    def __init__(self, message: str = "Storage backend error"):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)
