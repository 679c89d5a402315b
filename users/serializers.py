"""
Serializers for the users app.

Registration mirrors the signup form: email, password (at least six
characters) and an optional phone number.  The username is derived from
the email so that login is by email + password only.
"""
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import PasswordResetTokenGenerator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import UserProfile
from .validators import validate_phone, validate_unique_email

User = get_user_model()


def _django_errors(fn, *args, **kwargs):
    """Run a Django validator and re-raise its errors for DRF."""
    try:
        return fn(*args, **kwargs)
    except DjangoValidationError as e:
        raise serializers.ValidationError(list(e.messages))


class UserProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserProfile
        fields = ["full_name", "phone", "address", "role", "needs_password"]
        read_only_fields = ["role", "needs_password"]

    def validate_phone(self, value):
        return _django_errors(validate_phone, value)


class UserSerializer(serializers.ModelSerializer):
    profile = UserProfileSerializer(required=False)
    is_admin = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "date_joined", "profile", "is_admin"]
        read_only_fields = ["id", "email", "date_joined", "is_admin"]

    def get_is_admin(self, obj) -> bool:
        from common.permissions import is_admin

        return is_admin(obj)

    def update(self, instance, validated_data):
        profile_data = validated_data.pop("profile", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if profile_data:
            profile, _ = UserProfile.objects.get_or_create(user=instance)
            for attr, value in profile_data.items():
                setattr(profile, attr, value)
            profile.save()
            instance.profile = profile
        return instance


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        trim_whitespace=False,
        style={"input_type": "password"},
        error_messages={"min_length": "Password must be at least 6 characters long"},
    )
    phone_number = serializers.CharField(required=False, allow_blank=True)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_email(self, value):
        return _django_errors(validate_unique_email, value)

    def validate_phone_number(self, value):
        return _django_errors(validate_phone, value)

    def validate(self, attrs):
        pseudo_user = User(username=attrs["email"], email=attrs["email"])
        _django_errors(validate_password, attrs["password"], user=pseudo_user)
        return attrs

    def create(self, validated_data):
        email = validated_data["email"]
        user = User.objects.create_user(
            username=email,
            email=email,
            password=validated_data["password"],
        )
        profile = user.profile
        profile.full_name = validated_data.get("full_name", "")
        profile.phone = validated_data.get("phone_number", "")
        profile.save(update_fields=["full_name", "phone", "updated_at"])
        return user

    def to_representation(self, instance):
        return UserSerializer(instance).data


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Login using email + password and return SimpleJWT refresh/access tokens.
    POST body: {"email": "...", "password": "..."}
    """
    email = serializers.EmailField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Remove the parent-added username field so the browsable form shows only Email + Password.
        self.fields.pop(self.username_field, None)

    def validate(self, attrs):
        email = attrs.get("email")
        password = attrs.get("password")

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise AuthenticationFailed("No active account found with the given credentials")

        if not user.is_active:
            raise AuthenticationFailed("User account is disabled")

        if not user.check_password(password):
            raise AuthenticationFailed("No active account found with the given credentials")

        refresh = self.get_token(user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}


class SetPasswordSerializer(serializers.Serializer):
    """
    Sets the first password of an account created during checkout, or
    resets a forgotten one.  Either the request is authenticated, or a
    ``uid``/``token`` pair from the emailed link identifies the user.
    """
    uid = serializers.CharField(required=False)
    token = serializers.CharField(required=False)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        trim_whitespace=False,
        error_messages={"min_length": "Password must be at least 8 characters"},
    )
    confirm_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        if attrs["password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": "Passwords don't match"})

        request = self.context.get("request")
        user = request.user if request and request.user.is_authenticated else None
        if user is None:
            if not attrs.get("uid") or not attrs.get("token"):
                raise serializers.ValidationError({"token": "A password setup link is required."})
            try:
                uid_int = force_str(urlsafe_base64_decode(attrs["uid"]))
                user = User.objects.get(pk=uid_int)
            except (TypeError, ValueError, OverflowError, User.DoesNotExist):
                raise serializers.ValidationError({"uid": "Invalid user id."})
            if not PasswordResetTokenGenerator().check_token(user, attrs["token"]):
                raise serializers.ValidationError({"token": "Invalid or expired token."})

        _django_errors(validate_password, attrs["password"], user)
        attrs["user"] = user
        return attrs


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate(self, attrs):
        email = (attrs["email"] or "").strip().lower()
        # Do not reveal whether the email exists
        attrs["user"] = User.objects.filter(email__iexact=email).first()
        return attrs


class AdminUserSerializer(serializers.ModelSerializer):
    """Back-office user listing; admins may change the role."""
    full_name = serializers.CharField(source="profile.full_name", read_only=True)
    phone = serializers.CharField(source="profile.phone", read_only=True)
    role = serializers.ChoiceField(source="profile.role", choices=UserProfile.ROLE_CHOICES)

    class Meta:
        model = User
        fields = ["id", "email", "full_name", "phone", "role", "is_active", "date_joined", "last_login"]
        read_only_fields = ["id", "email", "full_name", "phone", "date_joined", "last_login"]

    def update(self, instance, validated_data):
        profile_data = validated_data.pop("profile", {})
        if "is_active" in validated_data:
            instance.is_active = validated_data["is_active"]
            instance.save(update_fields=["is_active"])
        if "role" in profile_data:
            instance.profile.role = profile_data["role"]
            instance.profile.save(update_fields=["role", "updated_at"])
        return instance

