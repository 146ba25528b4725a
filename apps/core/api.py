# core/api.py

"""
JSON endpoint helpers shared by the planes and pagos apps.

Every endpoint answers with the same envelope:

    {"success": true, "message": "...", "data": {...}}
    {"success": false, "message": "...", "code": "BalanceExceeded", "errors": {...}}

Amounts travel as decimal strings and keys are camelCase.
"""

from functools import wraps
from decimal import Decimal
import json
import logging

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import Http404, JsonResponse

from core.exceptions import DomainError, NotFoundError
from core.money import Money

logger = logging.getLogger(__name__)


class ApiJSONEncoder(DjangoJSONEncoder):
    """DjangoJSONEncoder that also writes Money as a decimal string"""

    def default(self, o):
        if isinstance(o, Money):
            return str(o)
        return super().default(o)


# =============================================================================
# RESPONSES
# =============================================================================

def success_response(data=None, message="", status=200):
    return JsonResponse(
        {"success": True, "message": message, "data": data},
        status=status,
        encoder=ApiJSONEncoder,
    )


def error_response(message, code="Error", status=400, errors=None):
    payload = {"success": False, "message": message, "code": code}
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=status, encoder=ApiJSONEncoder)


def money_str(value):
    """Model decimal/None -> '113.00'"""
    return str(Money.from_decimal(value))


# =============================================================================
# REQUEST PARSING
# =============================================================================

def parse_json_body(request):
    """
    Decode a JSON object body. Numbers are read as Decimal, never float.

    Raises:
        DomainError: body is not a JSON object
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise DomainError("Invalid JSON data.", code='InvalidRequest')
    if not isinstance(data, dict):
        raise DomainError("JSON body must be an object.", code='InvalidRequest')
    return data


def api_to_form_data(payload, field_map):
    """
    camelCase request body -> form field names. Unknown keys are dropped;
    Decimals are passed on as strings so form fields parse them exactly.
    """
    data = {}
    for api_key, field_name in field_map.items():
        if api_key in payload:
            value = payload[api_key]
            if isinstance(value, Decimal):
                value = str(value)
            data[field_name] = value
    return data


def validate_form(form, error_class=DomainError):
    """Return the form if valid, otherwise raise its errors keyed by field"""
    if not form.is_valid():
        raise error_class(form.errors.as_data())
    return form


def _error_messages(error):
    if hasattr(error, 'error_dict'):
        return error.message_dict
    return None


def _error_message(error):
    if isinstance(error, DomainError):
        return error.detail
    if hasattr(error, 'error_dict'):
        return "Invalid data."
    return " ".join(error.messages)


# =============================================================================
# VIEW DECORATOR
# =============================================================================

def json_view(view_func):
    """
    Translate domain errors into the JSON envelope.

    NotFoundError / DoesNotExist / Http404 -> 404
    BalanceExceededError / InvalidStateError -> 409
    other ValidationErrors -> 400
    anything else -> logged, 500
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)

        except (ObjectDoesNotExist, Http404) as e:
            message = str(e) or "Not found."
            logger.info(f"{request.method} {request.path}: not found ({message})")
            return error_response(message, code=NotFoundError.error_code, status=404)

        except DomainError as e:
            logger.warning(f"{request.method} {request.path} rejected [{e.code}]: {e.detail}")
            return error_response(
                _error_message(e),
                code=e.code,
                status=e.status_code,
                errors=_error_messages(e),
            )

        except ValidationError as e:
            logger.warning(f"{request.method} {request.path} rejected: {e}")
            return error_response(
                _error_message(e),
                code=DomainError.error_code,
                status=400,
                errors=_error_messages(e),
            )

        except Exception as e:
            logger.exception(f"Error handling {request.method} {request.path}: {e}")
            return error_response(f"Server error: {str(e)}", code="ServerError", status=500)

    return wrapper
