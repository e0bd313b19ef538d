from rest_framework import serializers

from accounts.models import AppUser

class GoogleCallbackSerializer(serializers.Serializer):
    code = serializers.CharField(required=False)
    state = serializers.CharField(required=False, allow_blank=True)
    error = serializers.CharField(required=False)

class UserSerializer(serializers.ModelSerializer):
    picture = serializers.CharField(source="avatar_url", allow_null=True, read_only=True)

    class Meta:
        model = AppUser
        fields = ["id", "email", "name", "picture", "created_at"]

class LogoutResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
