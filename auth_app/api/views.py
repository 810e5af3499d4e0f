import logging
from django.conf import settings # access Django settings for lifetimes/flags
from django.contrib.auth.models import User
from django.shortcuts import get_object_or_404
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.views import APIView # DRF base API view
from rest_framework.request import Request
from rest_framework.response import Response # DRF HTTP response wrapper
from rest_framework import status # symbolic HTTP status codes
from rest_framework.serializers import ValidationError
from rest_framework_simplejwt.tokens import RefreshToken # token issuer for JWTs
from rest_framework_simplejwt.exceptions import TokenError
from auth_app.api.serializers import (
    LoginSerializer,
    RegisterSerializer,
    UserRolesSerializer,
    UserRolesUpdateSerializer,
)
from auth_app.models import ClassificationQuizRole, WebConnectRole
from auth_app.services import verification
from core.utils.email import EmailSendError

logger = logging.getLogger(__name__)


def _cookie_flags():
    """Cookie names and security flags shared by login, refresh and logout"""
    return {
        'access_name': getattr(settings, 'JWT_ACCESS_COOKIE_NAME', 'access_token'),
        'refresh_name': getattr(settings, 'JWT_REFRESH_COOKIE_NAME', 'refresh_token'),
        'secure': getattr(settings, 'JWT_COOKIE_SECURE', True),
        'samesite': getattr(settings, 'JWT_COOKIE_SAMESITE', 'Lax'),
    }


def _lifetime_seconds(key: str, fallback: int) -> int:
    lifetime = getattr(settings, 'SIMPLE_JWT', {}).get(key)
    return int(lifetime.total_seconds()) if lifetime else fallback


class RegisterView(APIView):
    """
    API endpoint for registering a new user.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        """
        Handle POST requests to create a new user.
        """
        serializer = RegisterSerializer(data=request.data)  # init serializer with request data
        if serializer.is_valid():  # validate input
            user = serializer.save()  # create user
            logger.info('Registered User(%s).', user.id)
            return Response({'detail': 'User created successfully!'}, status=status.HTTP_201_CREATED)

        # return validation errors
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@method_decorator(csrf_exempt, name='dispatch')
class LoginView(APIView):
    """
    Handle user login and set JWT cookies.

    On success:
      - returns 200 with user payload (including admin and trust flags) and a 'detail' message
      - sets 'access_token' and 'refresh_token' as HttpOnly cookies

    On failure:
      - returns 401 for invalid credentials
      - returns 500 for unexpected server errors
    """
    permission_classes = [AllowAny]
    # no SessionAuthentication, avoids CSRF 403 on POST
    authentication_classes = []

    def post(self, request: Request):
        """
        Validate credentials, generate JWT tokens, and set them in HttpOnly cookies.
        """
        serializer = LoginSerializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
            user = serializer.validated_data['user']

            refresh = RefreshToken.for_user(user)
            access = refresh.access_token

            response_data = {
                'detail': 'Login successfully!',
                'user': UserRolesSerializer(user).data,
            }
            resp = Response(response_data, status=status.HTTP_200_OK)

            flags = _cookie_flags()
            resp.set_cookie(
                key=flags['access_name'],
                value=str(access),
                max_age=_lifetime_seconds('ACCESS_TOKEN_LIFETIME', 300),
                secure=flags['secure'],
                httponly=True,                  # prevent JS access to the cookie
                samesite=flags['samesite'],
                path='/',
            )
            resp.set_cookie(
                key=flags['refresh_name'],
                value=str(refresh),
                max_age=_lifetime_seconds('REFRESH_TOKEN_LIFETIME', 86400),
                secure=flags['secure'],
                httponly=True,
                samesite=flags['samesite'],
                path='/',
            )
            return resp

        except ValidationError as exc:
            detail_obj = exc.detail

            # list: take first item
            if isinstance(detail_obj, list) and detail_obj:
                return Response({'detail': str(detail_obj[0])}, status=status.HTTP_401_UNAUTHORIZED)

            # dict: first message found wins
            if isinstance(detail_obj, dict):
                for v in detail_obj.values():
                    if isinstance(v, list) and v:
                        return Response({'detail': str(v[0])}, status=status.HTTP_401_UNAUTHORIZED)
                    if isinstance(v, str):
                        return Response({'detail': v}, status=status.HTTP_401_UNAUTHORIZED)

            return Response({'detail': 'Invalid credentials.'}, status=status.HTTP_401_UNAUTHORIZED)

        except Exception:
            logger.exception('Unexpected error during login.')
            return Response({'detail': 'Internal server error.'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@method_decorator(csrf_exempt, name='dispatch')
class LogoutView(APIView):
    """
    Log the user out by clearing JWT cookies and blacklisting the refresh token.
    """

    authentication_classes = []
    permission_classes = []

    def post(self, request):
        """
        Steps:
          1) Check if the refresh cookie is present -> else 401.
          2) Blacklist the refresh token; an already invalid token does not block the logout.
          3) Delete both cookies on the response and return 200 with detail.
        """
        flags = _cookie_flags()

        refresh_token = request.COOKIES.get(flags['refresh_name'])
        if not refresh_token:
            return Response(
                {'detail': 'Authentication credentials were not provided.'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError:
            logger.info('Logout with an invalid or already blacklisted refresh token.')

        resp = Response(
            {'detail': 'Log-Out successfully! All Tokens will be deleted. Refresh token is now invalid.'},
            status=status.HTTP_200_OK
        )
        resp.delete_cookie(key=flags['access_name'], path='/', samesite=flags['samesite'])
        resp.delete_cookie(key=flags['refresh_name'], path='/', samesite=flags['samesite'])
        return resp


@method_decorator(csrf_exempt, name='dispatch')
class TokenRefreshView(APIView):
    """
    Issue a new access token from the refresh token stored in an HttpOnly cookie.

    Behavior:
      - Requires the presence of the 'refresh_token' cookie.
      - Sets the new 'access_token' cookie on the response.
      - Returns JSON body: {'detail': 'Token refreshed', 'access': '<new_access>'}.
      - Returns 401 if the refresh cookie is missing or invalid.
    """

    authentication_classes = []
    permission_classes = []

    def post(self, request):
        flags = _cookie_flags()

        refresh_token = request.COOKIES.get(flags['refresh_name'])
        if not refresh_token:
            return Response({'detail': 'Refresh token missing.'}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            new_access = RefreshToken(refresh_token).access_token  # may raise TokenError if malformed/expired
        except TokenError:
            return Response({'detail': 'Invalid refresh token.'}, status=status.HTTP_401_UNAUTHORIZED)

        resp = Response({'detail': 'Token refreshed', 'access': str(new_access)}, status=status.HTTP_200_OK)
        resp.set_cookie(
            key=flags['access_name'],
            value=str(new_access),
            max_age=_lifetime_seconds('ACCESS_TOKEN_LIFETIME', 300),
            secure=flags['secure'],
            httponly=True,
            samesite=flags['samesite'],
            path='/',
        )
        return resp


class MeView(APIView):
    """
    GET /api/me/
    Returns the authenticated user with admin and trust flags.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserRolesSerializer(request.user).data, status=status.HTTP_200_OK)


class VerificationRequestView(APIView):
    """
    POST /api/verification/<kind>/request/
    Mails a verification link for the classification quiz or web connect role.

    Responses:
      - 200: already verified, token still pending, or email sent.
      - 401: not authenticated.
      - 404: unknown kind.
      - 500: email delivery failed.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, kind: str):
        if kind not in verification.KINDS:
            return Response({'success': False, 'message': 'Unknown verification type.'}, status=status.HTTP_404_NOT_FOUND)
        try:
            result = verification.request_verification(request.user, kind)
        except EmailSendError:
            return Response(
                {'success': False, 'message': 'Failed to send verification email.'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if result.status == 'already_verified':
            body = {'success': True, 'message': 'You have already been verified.', 'already_verified': True}
        elif result.status == 'pending':
            body = {'success': True, 'message': 'Verification token already exists.', 'expires_in': result.expires_in}
        else:
            body = {'success': True, 'message': 'Verification email sent successfully.', 'message_id': result.message_id}
        return Response(body, status=status.HTTP_200_OK)


class VerificationConfirmView(APIView):
    """
    GET /api/verification/<kind>/verify/?token=...
    Consumes a verification token (single use) and grants the role.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, kind: str):
        if kind not in verification.KINDS:
            return Response({'success': False, 'message': 'Unknown verification type.'}, status=status.HTTP_404_NOT_FOUND)
        token = (request.query_params.get('token') or '').strip()
        if not token:
            return Response({'success': False, 'message': 'Invalid verification token'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            already_verified = verification.consume_verification(kind, token)
        except verification.VerificationError as exc:
            return Response({'success': False, 'message': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        message = 'You have already been verified.' if already_verified else 'Successfully verified.'
        return Response(
            {'success': True, 'message': message, 'already_verified': already_verified},
            status=status.HTTP_200_OK,
        )


class AdminUserListView(ListAPIView):
    """
    GET /api/admin/users/
    Lists all users with admin and trust flags (staff only).
    """
    permission_classes = [IsAdminUser]
    serializer_class = UserRolesSerializer

    def get_queryset(self):
        return User.objects.select_related('classification_quiz_role', 'web_connect_role').order_by('id')


class AdminUserRolesView(APIView):
    """
    PATCH /api/admin/users/<pk>/roles/
    Toggles is_admin and the trusted flags of the role rows (staff only).
    Setting a trusted flag creates the role row if the user never verified.
    """
    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        user = get_object_or_404(User, pk=pk)
        serializer = UserRolesUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        if 'is_admin' in data:
            user.is_staff = data['is_admin']
            user.save(update_fields=['is_staff'])
        if 'is_trusted_classification_quiz' in data:
            ClassificationQuizRole.objects.update_or_create(
                user=user, defaults={'is_trusted': data['is_trusted_classification_quiz']}
            )
        if 'is_trusted_web_connect' in data:
            WebConnectRole.objects.update_or_create(
                user=user, defaults={'is_trusted': data['is_trusted_web_connect']}
            )
        logger.info('User(%s) roles updated by User(%s): %s', user.id, request.user.id, data)

        user = User.objects.select_related('classification_quiz_role', 'web_connect_role').get(pk=user.pk)
        return Response(UserRolesSerializer(user).data, status=status.HTTP_200_OK)
