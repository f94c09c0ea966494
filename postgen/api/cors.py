from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

_BODY_HEADERS = {"content-length", "content-type"}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware whose accepted preflights are 204 with an empty body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {k: v for k, v in response.headers.items() if k not in _BODY_HEADERS}
        return Response(status_code=204, headers=headers)
