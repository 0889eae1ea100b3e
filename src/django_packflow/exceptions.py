"""Custom exceptions for django-packflow."""


class PackFlowError(Exception):
    """Base exception for pack flow errors."""
    pass


class NotFound(PackFlowError):
    """Raised when a referenced pack, department, employee, product or company is missing."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found for ID: {identifier}")


# =============================================================================
# RECONCILIATION ERRORS
# =============================================================================

class ReconciliationError(PackFlowError):
    """Base exception for count validation failures."""
    pass


class NegativeOrNonIntegerCount(ReconciliationError):
    """Raised when a count is negative, not an integer, or zero where a positive value is required."""

    def __init__(self, field: str, value, reason: str = None):
        self.field = field
        self.value = value
        self.reason = reason or f"'{field}' must be a non-negative integer, got {value!r}"
        super().__init__(self.reason)


NegativeCount = NegativeOrNonIntegerCount


class CountOutOfRange(ReconciliationError):
    """Raised when a count does not fit in a 64-bit counter."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"'{field}' is out of range: {value}")


class InvalidCountExceedsTotal(ReconciliationError):
    """Raised when more units are marked invalid than the pack holds."""

    def __init__(self, invalid_count: int, total_count: int):
        self.invalid_count = invalid_count
        self.total_count = total_count
        super().__init__(
            f"Invalid count cannot exceed total count: invalid={invalid_count}, total={total_count}"
        )


class InsufficientAvailableUnits(ReconciliationError):
    """Raised when a send asks for more units than are still available."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot send more than available items: requested={requested}, available={available}"
        )


# =============================================================================
# TRANSITION ERRORS
# =============================================================================

class TransitionError(PackFlowError):
    """Base exception for rejected pack transitions."""
    pass


class NoPendingProcess(TransitionError):
    """Raised when accepting a pack that has no delivery waiting."""

    def __init__(self, pack_id):
        self.pack_id = pack_id
        super().__init__(f"Product pack '{pack_id}' does not have a pending status")


class PackAwaitingAcceptance(TransitionError):
    """Raised when sending from a pack whose own delivery is not yet accepted."""

    def __init__(self, pack_id):
        self.pack_id = pack_id
        super().__init__(f"Product pack '{pack_id}' must be accepted before it can be sent")


class PackAlreadyComplete(TransitionError):
    """Raised when sending from a pack whose flow is already over."""

    def __init__(self, pack_id):
        self.pack_id = pack_id
        super().__init__(f"Product pack '{pack_id}' has already completed its flow")


class ConcurrentModificationConflict(TransitionError):
    """Raised when a transition keeps losing to concurrent writers."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"'{operation}' conflicted with a concurrent modification after {attempts} attempt(s)"
        )


# =============================================================================
# TOPOLOGY ERRORS
# =============================================================================

class TopologyError(PackFlowError):
    """Base exception for department topology errors."""
    pass


class UnknownDepartmentRole(TopologyError):
    """Raised when a department name or role cannot be resolved to a canonical role."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown department role '{name}'")


class DepartmentNotReachable(TopologyError):
    """Raised when a send targets a department that is not a next step."""

    def __init__(self, from_role: str, to_role: str):
        self.from_role = from_role
        self.to_role = to_role
        super().__init__(f"Cannot send from '{from_role}' to '{to_role}'")


class TokenStoreLoadError(PackFlowError):
    """Raised when the configured refresh token store cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load token store '{path}': {reason}")
