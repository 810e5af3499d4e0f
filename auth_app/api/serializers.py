from django.contrib.auth.models import User
from django.contrib.auth import authenticate
from rest_framework import serializers
from core.utils.validators import (
    validate_email_format,
    validate_email_unique,
    validate_password_strength,
)

class RegisterSerializer(serializers.ModelSerializer):
    """ Serializer for user registration. Field 'email' is required, 'password' is validated for strength and stored hashed"""
    email = serializers.EmailField(required=True, allow_blank=False)
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ('username', 'email', 'password')

    def validate_email(self, value: str) -> str:
        """Validates email format and uniqueness using custom validators"""
        validate_email_format(value)
        validate_email_unique(value)
        return value

    def validate_password(self, value: str) -> str:
        """Validates the password strength using custom validator"""
        validate_password_strength(value)
        return value

    def create(self, validated_data: dict) -> User:
        """Creates a new User instance with a hashed password"""
        user = User(
            username=validated_data['username'],
            email=validated_data['email'],
        )
        user.set_password(validated_data['password'])
        user.save()
        return user
    
    
class LoginSerializer(serializers.Serializer):
    """Validates username/password for login. Ensures that the fields are present and correct"""
    username = serializers.CharField(write_only=True, required=True)
    password = serializers.CharField(write_only=True, required=True, style={'input_type': 'password'})

    def validate(self, attrs):
        """Returns the authenticated user instance or raises a validation error"""
        username = attrs.get('username')
        password = attrs.get('password')
        user_obj = User.objects.filter(username=username).first()
        if user_obj is not None and not user_obj.is_active:
            if user_obj.check_password(password):
                raise serializers.ValidationError('User account is disabled.')

        user = authenticate(username=username, password=password)

        if user is None:
            raise serializers.ValidationError('Invalid credentials.')

        attrs['user'] = user
        return attrs

class UserRolesSerializer(serializers.ModelSerializer):
    """Read-only view of a user together with the admin and trust flags"""
    is_admin = serializers.BooleanField(source='is_staff', read_only=True)
    is_trusted_classification_quiz = serializers.SerializerMethodField()
    is_trusted_web_connect = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'is_admin', 'is_trusted_classification_quiz', 'is_trusted_web_connect')
        read_only_fields = fields

    def get_is_trusted_classification_quiz(self, obj) -> bool:
        role = getattr(obj, 'classification_quiz_role', None)
        return bool(role and role.is_trusted)

    def get_is_trusted_web_connect(self, obj) -> bool:
        role = getattr(obj, 'web_connect_role', None)
        return bool(role and role.is_trusted)


class UserRolesUpdateSerializer(serializers.Serializer):
    """Admin input for toggling a user's admin flag and trust roles; every field is optional"""
    is_admin = serializers.BooleanField(required=False)
    is_trusted_classification_quiz = serializers.BooleanField(required=False)
    is_trusted_web_connect = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide at least one flag to update.')
        unknown = set(self.initial_data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError({key: 'Unknown field.' for key in sorted(unknown)})
        return attrs
