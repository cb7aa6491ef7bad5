from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

USER_HEADER = "X-User-Id"


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the calling user from a request header into ``request.state.user_id``.

    Sign-in happens upstream; this only refuses API calls that carry no user.
    """

    async def dispatch(self, request: Request, call_next):
        user_id = request.headers.get(USER_HEADER, "").strip()
        if request.url.path.startswith("/api") and not user_id:
            return JSONResponse({"detail": "Not authenticated"}, status_code=401)
        request.state.user_id = user_id or None
        return await call_next(request)
