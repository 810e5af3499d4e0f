from django.conf import settings


class CookieToAuthorizationMiddleware:
    """
    Mirror the 'access_token' cookie into 'Authorization: Bearer ...' if the header is missing.
    The cookie itself stays HttpOnly; this only happens server side.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        cookie_name = getattr(settings, 'JWT_ACCESS_COOKIE_NAME', 'access_token')
        raw = request.COOKIES.get(cookie_name)
        if raw and 'HTTP_AUTHORIZATION' not in request.META:
            request.META['HTTP_AUTHORIZATION'] = f'Bearer {raw}'
        return self.get_response(request)


class QuizSessionMiddleware:
    """
    Exposes the per-browser quiz identifier sent by the client.

    The React client sends the logged-in user id, or a generated 'session-...'
    id for anonymous visitors, in the header named by QUIZ_SESSION_HEADER.
    The value is stored on request.quiz_session_key (None when absent).
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        header = getattr(settings, 'QUIZ_SESSION_HEADER', 'userId')
        meta_key = 'HTTP_' + header.upper().replace('-', '_')
        value = (request.META.get(meta_key) or '').strip()
        request.quiz_session_key = value[:128] or None  # bounded, stored in UserAnswer.user_key
        return self.get_response(request)
