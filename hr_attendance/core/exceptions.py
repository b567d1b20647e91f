from typing import Any, Dict, List, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity} {entity_id} not found",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": str(entity_id)}
        )

class AttendanceConflictError(AppException):
    """Some employees in a submission already have a record for the date. Nothing was committed."""
    def __init__(self, employee_ids: List[Any], on_date: Any):
        self.employee_ids = list(employee_ids)
        super().__init__(
            message=f"Attendance already marked for {len(self.employee_ids)} employee(s) on {on_date}",
            status_code=409,
            error_code="ATTENDANCE_ALREADY_MARKED",
            details={"employee_ids": self.employee_ids, "date": str(on_date)}
        )

class InsufficientLeaveError(AppException):
    def __init__(self, violations: List[Dict[str, Any]]):
        self.violations = violations
        names = ", ".join(str(v["employee_id"]) for v in violations)
        super().__init__(
            message=f"Employee(s) have insufficient paid leaves: {names}",
            status_code=422,
            error_code="INSUFFICIENT_PAID_LEAVES",
            details={"violations": violations}
        )

class UnknownEmployeeError(AppException):
    def __init__(self, employee_ids: List[str], location: Optional[str] = None):
        super().__init__(
            message=f"Employee(s) not on the roster{f' for {location}' if location else ''}: {', '.join(employee_ids)}",
            status_code=422,
            error_code="UNKNOWN_EMPLOYEE",
            details={"employee_ids": list(employee_ids)}
        )

class EmptyRosterError(AppException):
    def __init__(self, location: str):
        super().__init__(
            message=f"No employees found for location {location}",
            status_code=400,
            error_code="EMPTY_ROSTER"
        )

class DuplicateAttendanceError(AppException):
    """Data-integrity violation: more than one record for the same employee and day."""
    def __init__(self, employee_id: str, on_date: Any):
        super().__init__(
            message=f"Multiple attendance records for employee {employee_id} on {on_date}",
            status_code=409,
            error_code="DUPLICATE_ATTENDANCE",
            details={"employee_id": employee_id, "date": str(on_date)}
        )

class ConfirmationRequiredError(AppException):
    def __init__(self, operation: str):
        super().__init__(
            message=f"{operation} is irreversible and must be explicitly confirmed",
            status_code=428,
            error_code="CONFIRMATION_REQUIRED"
        )

class InvalidPolicyError(AppException):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=422,
            error_code="INVALID_POLICY"
        )

class RequestAlreadyResolvedError(AppException):
    def __init__(self, request_id: int, status: str):
        super().__init__(
            message=f"Attendance request {request_id} is already {status}",
            status_code=409,
            error_code="REQUEST_ALREADY_RESOLVED"
        )
