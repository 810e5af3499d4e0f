"""
Category, question and option persistence.

Question keys are unique inside a category. Every write path checks the
incoming keys against the existing ones and against each other before
anything is inserted.
"""
import logging
import random
from collections import Counter
from typing import Iterable, List, Tuple
from django.db import transaction
from quiz_app.models import Category, ImageUpload, Option, Question
from quiz_app.services.errors import DuplicateQuestionKeys
from quiz_app.services.sequences import CONFIG_LINK_ID, next_value
from quiz_app.services.storage import BlobStorageError, parse_blob_url

logger = logging.getLogger(__name__)


def _find_duplicate_keys(category, keys: List[str]) -> List[str]:
    repeated = [key for key, n in Counter(keys).items() if n > 1]
    existing = []
    if category is not None:
        existing = list(
            Question.objects.filter(category=category, question_key__in=keys)
            .values_list('question_key', flat=True)
        )
    return sorted(set(repeated) | set(existing))


def _insert_questions(category, questions: Iterable[dict]) -> List[Question]:
    """Bulk inserts questions, then their options; `questions` items carry key, text and options"""
    questions = list(questions)
    created = Question.objects.bulk_create([
        Question(category=category, question_key=q['question_key'], question_text=q['question_text'])
        for q in questions
    ])
    # bulk_create does not return primary keys on every backend
    if any(q.pk is None for q in created):
        by_key = {
            q.question_key: q
            for q in Question.objects.filter(category=category, question_key__in=[q['question_key'] for q in questions])
        }
        created = [by_key[q['question_key']] for q in questions]

    Option.objects.bulk_create([
        Option(question=question, option_text=text, is_correct=False)
        for question, payload in zip(created, questions)
        for text in payload.get('options', [])
    ])
    return created


def create_full_category(user, category_name: str, questions: List[dict]) -> Tuple[Category, bool, List[Question]]:
    """
    Creates a category with its questions and options, or extends an existing
    category of the same user with new questions.

    Raises DuplicateQuestionKeys, without writing anything, when an incoming
    key already exists in the category or is repeated in the batch.
    Returns (category, created, inserted questions).
    """
    keys = [q['question_key'] for q in questions]
    with transaction.atomic():
        category = Category.objects.select_for_update().filter(user=user, category_name=category_name).first()
        duplicates = _find_duplicate_keys(category, keys)
        if duplicates:
            raise DuplicateQuestionKeys(duplicates)

        created = category is None
        if created:
            category = Category.objects.create(
                user=user,
                category_name=category_name,
                config_link_id=next_value(CONFIG_LINK_ID),
            )
        inserted = _insert_questions(category, questions)

    logger.info('%s Category(%s) for User(%s) with %s question(s).',
                'Created' if created else 'Extended', category.id, user.id, len(inserted))
    return category, created, inserted


def add_question(category: Category, question_key: str, question_text: str, options: List[str]) -> Question:
    with transaction.atomic():
        duplicates = _find_duplicate_keys(category, [question_key])
        if duplicates:
            raise DuplicateQuestionKeys(duplicates)
        [question] = _insert_questions(category, [{
            'question_key': question_key,
            'question_text': question_text,
            'options': options,
        }])
    return question


def add_options(question: Question, option_texts: List[str]) -> List[Option]:
    created = Option.objects.bulk_create([
        Option(question=question, option_text=text, is_correct=False) for text in option_texts
    ])
    if any(o.pk is None for o in created):
        created = list(question.options.order_by('-id')[:len(option_texts)])[::-1]
    return created


def delete_category_cascade(category: Category, storage) -> dict:
    """
    Deletes a category together with its images, questions, options and votes.

    Blob deletes are best effort: a failing delete is recorded and the
    cascade continues. Returns the number of deleted image rows and the
    failed blob deletes as [{image_path, error}].
    """
    images = list(ImageUpload.objects.filter(config_link_id=category.config_link_id))
    failures = []
    for image in images:
        location = parse_blob_url(image.image_path)
        if location is None:
            failures.append({'image_path': image.image_path, 'error': 'Unparseable image path'})
            continue
        try:
            storage.delete(*location)
        except BlobStorageError as exc:
            logger.warning('Blob delete failed for %s: %s', image.image_path, exc)
            failures.append({'image_path': image.image_path, 'error': str(exc)})

    with transaction.atomic():
        deleted_images, _ = ImageUpload.objects.filter(config_link_id=category.config_link_id).delete()
        category_id = category.id
        category.delete()

    logger.info('Deleted Category(%s) with %s image(s), %s blob delete failure(s).',
                category_id, deleted_images, len(failures))
    return {'deleted_images': deleted_images, 'failed_blob_deletes': failures}


def public_categories_by_owner(featured: bool = False) -> List[dict]:
    """
    Active (optionally featured) categories grouped by owner, each with one
    random active image as cover.
    """
    qs = Category.objects.filter(is_active=True).select_related('user').order_by('user_id', 'id')
    if featured:
        qs = qs.filter(is_featured=True)
    categories = list(qs)

    covers = {}
    for image in ImageUpload.objects.filter(
        is_active=True, config_link_id__in=[c.config_link_id for c in categories]
    ).only('config_link_id', 'image_path'):
        covers.setdefault(image.config_link_id, []).append(image.image_path)

    groups = {}
    for category in categories:
        group = groups.setdefault(category.user_id, {
            'userId': category.user_id,
            'username': category.user.username,
            'categories': [],
        })
        paths = covers.get(category.config_link_id)
        group['categories'].append({
            'categoryId': category.id,
            'categoryName': category.category_name,
            'configLinkId': category.config_link_id,
            'isFeatured': category.is_featured,
            'coverImage': random.choice(paths) if paths else None,
        })
    return list(groups.values())
