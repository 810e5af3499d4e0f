from django.conf import settings
from django.db import models


class Sequence(models.Model):
    """
    Named monotonic counter used for config_link_id and group_id.

    Values are handed out by quiz_app.services.sequences.next_value and are
    never reused; deleting a category or an upload batch leaves a gap.
    """
    name = models.CharField(max_length=64, unique=True)
    value = models.BigIntegerField(default=0)

    def __str__(self) -> str:
        return f'Sequence({self.name}={self.value})'


class Category(models.Model):
    """
    A named quiz owned by a user.

    Fields:
    - category_name: display name, unique together with the owner.
    - config_link_id: public numeric identifier used in quiz links and statistics.
    - is_active: inactive categories are hidden from quiz takers.
    - is_featured: highlighted on the public landing page.
    """
    category_name = models.CharField(max_length=255)
    config_link_id = models.BigIntegerField(unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quiz_categories',
    )
    created_date = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'category_name'],
                name='uq_category_user_name',
            )
        ]
        ordering = ['id']
        verbose_name_plural = 'categories'

    def __str__(self) -> str:
        return f'Category({self.id}) {self.category_name} [link {self.config_link_id}]'


class Question(models.Model):
    """A question of a category; question_key is unique within its category"""
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='questions')
    question_key = models.CharField(max_length=255)
    question_text = models.TextField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['category', 'question_key'],
                name='uq_question_category_key',
            )
        ]
        ordering = ['id']

    def __str__(self) -> str:
        return f'Question({self.id}) {self.question_key} of Category({self.category_id})'


class Option(models.Model):
    # is_correct is stored but never evaluated; the quiz only collects opinions
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='options')
    option_text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f'Option({self.id}) of Question({self.question_id})'


class ImageUpload(models.Model):
    """
    One uploaded image of a category.

    Images are linked to their category through config_link_id, not a
    foreign key, so rows survive the category only until the cascade delete
    cleans them up. Every file of one upload request shares a group_id.
    """
    image_name = models.CharField(max_length=255)
    folder_name = models.CharField(max_length=255)
    image_path = models.CharField(max_length=1024)
    created_date = models.DateTimeField(auto_now_add=True)
    group_id = models.BigIntegerField(db_index=True)
    config_link_id = models.BigIntegerField(db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='image_uploads',
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f'ImageUpload({self.id}) {self.image_name} [group {self.group_id}]'


class AnswerVote(models.Model):
    """Vote counter per (config link, image, question, option)"""
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='votes')
    config_link_id = models.BigIntegerField()
    image_name = models.CharField(max_length=255)
    image_path = models.CharField(max_length=1024, blank=True)
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='votes')
    option = models.ForeignKey(Option, on_delete=models.CASCADE, related_name='votes')
    count = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['config_link_id', 'image_name', 'question', 'option'],
                name='uq_vote_link_image_question_option',
            )
        ]
        ordering = ['id']

    def __str__(self) -> str:
        return f'AnswerVote({self.image_name}, Q{self.question_id}, O{self.option_id}) = {self.count}'


class UserAnswer(models.Model):
    """Append-only log of recorded answers, read by the unique-user trend"""
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='user_answers')
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='user_answers')
    option = models.ForeignKey(Option, on_delete=models.CASCADE, related_name='user_answers')
    user_key = models.CharField(max_length=128, db_index=True)
    image_name = models.CharField(max_length=255)
    image_path = models.CharField(max_length=1024, blank=True)
    created_date = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f'UserAnswer({self.id}) by {self.user_key}'
