from rest_framework import serializers
from core.utils.validators import validate_image_filename, validate_non_empty
from showcase_app.models import WebsiteConnection


class WebsiteConnectionSerializer(serializers.ModelSerializer):
    """Read-only showcase entry"""
    githubLink = serializers.CharField(source='github_link')
    imagePath = serializers.CharField(source='image_path')
    userId = serializers.IntegerField(source='user_id')
    username = serializers.CharField(source='user.username')
    createdDate = serializers.DateTimeField(source='created_date')
    isActive = serializers.BooleanField(source='is_active')
    isFeatured = serializers.BooleanField(source='is_featured')

    class Meta:
        model = WebsiteConnection
        fields = (
            'id', 'title', 'link', 'githubLink', 'description', 'imagePath',
            'userId', 'username', 'createdDate', 'isActive', 'isFeatured',
        )
        read_only_fields = fields


class WebsiteConnectionCreateSerializer(serializers.Serializer):
    """Multipart submission: title, link, description and a banner image are required"""
    title = serializers.CharField(max_length=255)
    link = serializers.URLField(max_length=1024)
    githubLink = serializers.URLField(max_length=1024, required=False, allow_blank=True, default='')
    description = serializers.CharField()
    banner = serializers.FileField()

    def validate_title(self, value):
        return validate_non_empty(value, 'title')

    def validate_description(self, value):
        return validate_non_empty(value, 'description')

    def validate_banner(self, value):
        if not value.size:
            raise serializers.ValidationError('Banner image is empty.')
        validate_image_filename(value.name)
        return value


class ActiveStatusSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()


class FeaturedStatusSerializer(serializers.Serializer):
    isFeatured = serializers.BooleanField()
