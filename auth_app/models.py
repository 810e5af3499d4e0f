from django.conf import settings
from django.db import models


class ClassificationQuizRole(models.Model):
    """
    Marks a user as verified for the classification quiz feature.

    The row is created when the user consumes a verification token; an admin
    later flips is_trusted to allow quiz authoring.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='classification_quiz_role',
    )
    is_trusted = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f'ClassificationQuizRole(User({self.user_id}), trusted={self.is_trusted})'


class WebConnectRole(models.Model):
    """Marks a user as verified for the project showcase; same lifecycle as ClassificationQuizRole"""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='web_connect_role',
    )
    is_trusted = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f'WebConnectRole(User({self.user_id}), trusted={self.is_trusted})'


class VerificationToken(models.Model):
    """
    Single-use email verification token.

    Fields:
    - user: the user the token was issued to.
    - token: URL-safe Base64 of 32 random bytes (unique).
    - created_at/expires_at: issue time and hard expiry.
    - verified_at: set when consumed (the row is deleted right after).

    Expired rows are not cleaned up by a job; a new request for the same user
    supersedes them.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='+')
    token = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    verified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    def __str__(self) -> str:
        return f'{self.__class__.__name__}({self.id}) for User({self.user_id})'


class ClassificationQuizVerification(VerificationToken):
    pass


class WebConnectVerification(VerificationToken):
    pass
