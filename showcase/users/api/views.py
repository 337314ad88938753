from rest_framework import permissions
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from showcase.users.models import User

from .serializers import UserSerializer


class UserViewSet(GenericViewSet):
    """
    Minimal user API.

    Only exposes the 'me' action to retrieve the current user's information
    and exhibit roles.
    """

    serializer_class = UserSerializer
    queryset = User.objects.all()
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["get"])
    def me(self, request):
        """Return the current authenticated user's information."""
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(status=status.HTTP_200_OK, data=serializer.data)
