from .base import Base
from .employee import Employee
from .error_category import ErrorCategory
from .error_type import ErrorType
from .error_log import ErrorLog

__all__ = ["Base", "Employee", "ErrorCategory", "ErrorType", "ErrorLog"]
