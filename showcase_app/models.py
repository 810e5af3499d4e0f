from django.conf import settings
from django.db import models


class WebsiteConnection(models.Model):
    """
    A project submitted to the public showcase.

    Submissions start inactive and only appear publicly after an admin
    approves them; image_path points at the banner in blob storage.
    """
    title = models.CharField(max_length=255)
    link = models.URLField(max_length=1024)
    github_link = models.URLField(max_length=1024, blank=True)
    description = models.TextField()
    image_path = models.CharField(max_length=1024, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='website_connections',
    )
    created_date = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_date', '-id']

    def __str__(self) -> str:
        return f'WebsiteConnection({self.id}) by User({self.user_id}): {self.title}'
