# core/exceptions.py

"""
Domain errors for plans and the abono ledger.

All of them are Django ValidationErrors, so forms, model clean() and the
service layer can raise and catch them the same way. Each class carries a
stable wire code and the HTTP status json_view maps it to.
"""

from django.core.exceptions import ValidationError


class DomainError(ValidationError):
    """Base for errors that leave plan and ledger state untouched"""

    error_code = 'ValidationError'
    status_code = 400

    def __init__(self, message, code=None, params=None):
        super().__init__(message, code=code or self.error_code, params=params)
        if not hasattr(self, 'code'):
            # dict-style errors do not set a code of their own
            self.code = code or self.error_code

    @property
    def detail(self):
        """Single human-readable message"""
        if hasattr(self, 'error_dict'):
            return "; ".join(
                f"{field}: {message}"
                for field, messages in self.message_dict.items()
                for message in messages
            )
        return " ".join(self.messages)


class RequiredFieldError(DomainError):
    error_code = 'RequiredField'


class InvalidRangeError(DomainError):
    """Non-positive amount, cuota count out of range, overlong text"""
    error_code = 'InvalidRange'


class BalanceExceededError(DomainError):
    """Abono larger than the invoice's saldo pendiente"""
    error_code = 'BalanceExceeded'
    status_code = 409


class InvalidStateError(DomainError):
    """Operation not allowed in the record's current state"""
    error_code = 'InvalidState'
    status_code = 409


class NotFoundError(DomainError):
    error_code = 'NotFound'
    status_code = 404


class PlanValidationError(DomainError):
    """
    Field-keyed plan errors.

    Built from a dict of field -> ValidationError so every failing field is
    reported at once:

        raise PlanValidationError({
            'nombre': RequiredFieldError("Nombre is required"),
        })
    """
    error_code = 'ValidationError'
