from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class ProfileSerializer(serializers.ModelSerializer):
    """Profile details for the authenticated user."""

    display_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "first_name",
            "last_name",
            "display_name",
            "avatar_url",
            "can_rent",
            "can_list",
            "date_joined",
        ]
        read_only_fields = ["id", "username", "date_joined", "can_rent", "can_list"]

    def validate_phone(self, value):
        value = (value or "").strip()
        return value or None


class PublicProfileSerializer(serializers.ModelSerializer):
    """Limited profile details that are safe to expose publicly."""

    display_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ["id", "username", "display_name", "avatar_url", "date_joined"]
        read_only_fields = tuple(fields)


class SignupSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "password",
            "first_name",
            "last_name",
            "can_rent",
            "can_list",
        ]
        extra_kwargs = {"password": {"write_only": True}}

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def validate_phone(self, value: str):
        value = (value or "").strip()
        if value and User.objects.filter(phone=value).exists():
            raise serializers.ValidationError("This phone number is already registered.")
        return value or None

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user
