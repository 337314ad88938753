from rest_framework import serializers

from showcase.users.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for the User model.

    Exposes the username and display name plus the roles the user holds,
    keyed by exhibit slug, so API clients can decide which exhibits they
    may curate.
    """

    exhibit_roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["username", "name", "is_superuser", "exhibit_roles"]
        read_only_fields = fields

    def get_exhibit_roles(self, obj: User) -> dict[str, str]:
        return dict(
            obj.exhibit_role_grants.select_related("exhibit").values_list(
                "exhibit__slug",
                "role",
            ),
        )
