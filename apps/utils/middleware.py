# utils/middleware.py

from utils.context import clear_request_context, context_from_request, set_request_context


class AuditContextMiddleware:
    """
    Scopes an AuditContext to each request.
    Goes after AuthenticationMiddleware so the actor is known.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_request_context(context_from_request(request))
        try:
            return self.get_response(request)
        finally:
            clear_request_context()
