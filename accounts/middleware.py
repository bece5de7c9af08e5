import logging

logger = logging.getLogger(__name__)

MAX_LOGGED_BODY = 2000


def _truncate(text):
    if len(text) > MAX_LOGGED_BODY:
        return text[:MAX_LOGGED_BODY] + "...<truncated>"
    return text


class RequestResponseLoggingMiddleware:
    """
    Middleware that logs each API request method, path and body,
    and the corresponding response status and content.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Read the body before the view does; Django caches request.body.
        request_body = ""
        content_type = request.META.get("CONTENT_TYPE", "")

        if "multipart/form-data" in content_type:
            request_body = "<Multipart form data - body not logged>"
        elif request.method in ("POST", "PUT", "PATCH", "DELETE") and request.body:
            try:
                request_body = _truncate(request.body.decode("utf-8"))
            except UnicodeDecodeError:
                request_body = "<Could not decode body>"

        logger.info(
            "API Request: %s %s Body: %s",
            request.method,
            request.get_full_path(),
            request_body,
        )

        response = self.get_response(request)

        response_type = response.get("Content-Type", "")
        if response_type.startswith(("application/json", "text/")):
            if getattr(response, "streaming", False):
                response_content = "<Streaming content>"
            else:
                try:
                    response_content = _truncate(response.content.decode("utf-8"))
                except UnicodeDecodeError:
                    response_content = "<Could not decode content>"
        else:
            response_content = f"<Content-Type: {response_type}>"

        logger.info(
            "API Response: %s %s Status: %s Content: %s",
            request.method,
            request.get_full_path(),
            response.status_code,
            response_content,
        )

        return response
