import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .models import CustomUser
from .permissions import IsAdminRole

logger = logging.getLogger(__name__)


def _error(detail: str, status_code: int):
    """Consistent error payload shape across API: {'detail': ...}."""
    return Response({'detail': detail}, status=status_code)


def _user_payload(user: CustomUser) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'role': user.role,
        'roles': [user.role],
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Admin login: returns a token for active admin accounts only
    """
    username = request.data.get('username')
    password = request.data.get('password')
    if not username or not password:
        return _error('Username and password required', status.HTTP_400_BAD_REQUEST)

    # authenticate() returns None for inactive users with the default backend
    candidate = CustomUser.objects.filter(username=username).first()
    if candidate is not None and not candidate.is_active and candidate.check_password(password):
        return _error('Account is inactive', status.HTTP_403_FORBIDDEN)

    user = authenticate(request=request, username=username, password=password)
    if not user:
        logger.warning("Failed admin login for %s", username)
        return _error('Invalid credentials', status.HTTP_401_UNAUTHORIZED)
    if user.role != 'admin':
        logger.warning("Non-admin login attempt by %s", username)
        return _error('Admin access required', status.HTTP_403_FORBIDDEN)

    token, _ = Token.objects.get_or_create(user=user)
    update_last_login(None, user)

    return Response({
        'token': token.key,
        'user': _user_payload(user),
        'roles': [user.role],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    Token.objects.filter(user=request.user).delete()
    return Response({'message': 'Logged out successfully'})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def check_view(request):
    return Response({'authenticated': True, 'user': _user_payload(request.user)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def refresh_view(request):
    """
    Rotate the caller's token; the old key stops working immediately
    """
    with transaction.atomic():
        Token.objects.filter(user=request.user).delete()
        token = Token.objects.create(user=request.user)
    return Response({'token': token.key, 'user': _user_payload(request.user)})
