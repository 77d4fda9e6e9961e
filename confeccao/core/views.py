import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from .filters import AuditLogFilter
from .models import AuditLog
from .serializers import UserSerializer, AuditLogSerializer

logger = logging.getLogger('confeccao.core')


class LoginSerializer(TokenObtainPairSerializer):
    """Access/refresh pair for a workshop user; the access token carries the name shown on the dashboard"""

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('Esta conta está desativada.')
        logger.info(f"User {self.user.username} logged in")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['display_name'] = user.get_full_name() or user.username
        token['is_staff'] = user.is_staff
        return token


class LoginView(TokenObtainPairView):
    serializer_class = LoginSerializer


class RefreshSerializer(TokenRefreshSerializer):
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Sessão expirada. Entre novamente.')
        except ObjectDoesNotExist:
            raise InvalidToken('Sessão inválida: usuário removido.')


class RefreshView(TokenRefreshView):
    serializer_class = RefreshSerializer


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user; PATCH updates the user's own name, e-mail and phone"""
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    serializer = UserSerializer(request.user, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    return Response(serializer.data)


def visible_audit_logs(user):
    """Staff see the whole trail, everyone else only their own actions"""
    queryset = AuditLog.objects.select_related('user')
    if not user.is_staff:
        queryset = queryset.filter(user=user)
    return queryset


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """
    Audit trail, newest first.

    Query params: action, model, object_id, reference (e.g. '#7' for every
    event of order 7), date_from, date_to (YYYY-MM-DD).
    """
    filterset = AuditLogFilter(request.query_params, queryset=visible_audit_logs(request.user))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = AuditLogSerializer(filterset.qs.order_by('-created_at'), many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    audit_log = get_object_or_404(AuditLog, pk=pk)
    if not request.user.is_staff and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(AuditLogSerializer(audit_log).data)
