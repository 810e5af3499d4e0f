"""
Recording of quiz answers.

Each submitted (question, option) pair increments a vote counter scoped to
(config_link_id, image_name, question, option) and appends a UserAnswer
row. Submissions are not de-duplicated per user: answering the same image
twice counts twice.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional
from django.db import transaction
from django.db.models import F
from quiz_app.models import AnswerVote, Category, Option, Question, UserAnswer
from quiz_app.services.errors import CategoryNotFound, InvalidAnswers

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    is_image_complete: bool
    answered_count: int
    total_count: int


def resolve_user_key(session_key: Optional[str], user) -> str:
    """Client supplied key, else the authenticated user's id, else a fresh anonymous session key"""
    if session_key:
        return session_key
    if user is not None and getattr(user, 'is_authenticated', False):
        return str(user.id)
    return f'session-{uuid.uuid4().hex}'


def _validate(category: Category, answers: List[dict]):
    if not answers:
        raise InvalidAnswers('At least one answer is required.')

    question_ids = [a['question_id'] for a in answers]
    if len(set(question_ids)) != len(question_ids):
        raise InvalidAnswers('A question may only be answered once per submission.')

    questions = {q.id: q for q in Question.objects.filter(category=category, id__in=question_ids)}
    missing = [qid for qid in question_ids if qid not in questions]
    if missing:
        raise InvalidAnswers(f'Questions {missing} do not belong to this category.')

    options = {o.id: o for o in Option.objects.filter(id__in=[a['option_id'] for a in answers])}
    pairs = []
    for answer in answers:
        option = options.get(answer['option_id'])
        if option is None or option.question_id != answer['question_id']:
            raise InvalidAnswers(
                f'Option {answer["option_id"]} does not belong to question {answer["question_id"]}.'
            )
        pairs.append((questions[answer['question_id']], option))
    return pairs


def submit_image_answers(category_id: int, image_name: str, image_path: str,
                         answers: List[dict], user_key: str) -> SubmissionResult:
    """
    Records the answers given for one image.

    An inactive category counts as not found, as for the quiz payload.
    `answers` items carry question_id and option_id. Validation happens
    before any write; nothing is stored when it fails.
    """
    category = Category.objects.filter(id=category_id, is_active=True).first()
    if category is None:
        raise CategoryNotFound()
    pairs = _validate(category, answers)

    with transaction.atomic():
        for question, option in pairs:
            vote, _ = AnswerVote.objects.get_or_create(
                config_link_id=category.config_link_id,
                image_name=image_name,
                question=question,
                option=option,
                defaults={'category': category, 'image_path': image_path or ''},
            )
            AnswerVote.objects.filter(pk=vote.pk).update(count=F('count') + 1)
            UserAnswer.objects.create(
                category=category,
                question=question,
                option=option,
                user_key=user_key,
                image_name=image_name,
                image_path=image_path or '',
            )

    total = Question.objects.filter(category=category).count()
    answered = len(pairs)
    complete = {q.id for q, _ in pairs} == set(
        Question.objects.filter(category=category).values_list('id', flat=True)
    )
    logger.info('Recorded %s answer(s) for image %s of Category(%s).', answered, image_name, category.id)
    return SubmissionResult(is_image_complete=complete, answered_count=answered, total_count=total)
