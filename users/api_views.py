"""
API views for the login endpoint.
"""

from collections.abc import Mapping

from django.contrib.auth import get_user_model, login
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_protect
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.security import audit_logger
from two_factor_auth.flow import AuthenticationFlow

from .serializers import UserSerializer
from .views import VERIFIED_VIA

User = get_user_model()


@method_decorator(csrf_protect, name="dispatch")
class LoginAPIView(APIView):
    """
    API endpoint running the two-step login.

    Clients post ``username``/``password`` first. A 202 response means a
    one-time code is needed: post again with ``code`` (and optionally
    ``remember``); the credentials are kept in the session meanwhile.

    The endpoint logs the session in, so it checks CSRF for anonymous
    callers too: send the ``csrftoken`` cookie (set by the login page)
    back in the ``X-CSRFToken`` header.
    """

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        flow = AuthenticationFlow.for_request(request)
        result = flow.authenticate(request.data)

        if result.step_up:
            return Response(
                {
                    "authenticated": False,
                    "step_up": True,
                    "verify_url": result.redirect_url,
                    "message": result.message,
                },
                status=status.HTTP_202_ACCEPTED,
            )

        if not result:
            username = request.data.get("username", "") if isinstance(request.data, Mapping) else ""
            audit_logger.log_login_failed(request, str(username))
            return Response(
                {
                    "authenticated": False,
                    "step_up": False,
                    "detail": "Invalid username or password.",
                },
                status=status.HTTP_401_UNAUTHORIZED,
            )

        user = User.objects.get(pk=result.user["pk"])
        login(request, user)
        audit_logger.log_login(user, request, via=VERIFIED_VIA.get(result.verification, "password"))
        response = Response(
            {
                "authenticated": True,
                "step_up": False,
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )
        return flow.cookies.apply(response)
