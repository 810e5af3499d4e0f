from django.db.models import Prefetch
from quiz_app.models import Category, ImageUpload, Option, Question
from quiz_app.services.errors import CategoryNotFound


def assemble_quiz(config_link_id: int) -> dict:
    """
    Builds the quiz a taker sees for one config link: the category, its
    active images and its questions with options, all in insertion order.
    Inactive categories count as missing.
    """
    category = Category.objects.filter(config_link_id=config_link_id, is_active=True).first()
    if category is None:
        raise CategoryNotFound()

    images = ImageUpload.objects.filter(config_link_id=config_link_id, is_active=True).order_by('id')
    questions = (
        Question.objects.filter(category=category)
        .order_by('id')
        .prefetch_related(Prefetch('options', queryset=Option.objects.order_by('id')))
    )
    return {
        'category': category,
        'images': list(images),
        'questions': list(questions),
    }
