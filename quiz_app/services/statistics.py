"""
Aggregated answer statistics and their JSON/CSV exports.

The aggregate is grouped config link -> image -> question -> option and
is computed from the AnswerVote counters. Every option of a question is
listed, unvoted ones with count 0.
"""
import csv
import io
import json
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from django.db.models import Prefetch
from django.utils import timezone
from quiz_app.models import AnswerVote, Category, Option, Question, UserAnswer
from quiz_app.services.errors import CategoryNotFound

CSV_HEADER = [
    'ConfigLinkId', 'CategoryName', 'ImageName', 'ImagePath',
    'QuestionText', 'OptionText', 'Count', 'Percentage',
]

# bucket name -> days back from the start of today (None = unbounded)
TREND_WINDOWS = (
    ('1_day', 1),
    ('3_days', 3),
    ('7_days', 7),
    ('30_days', 30),
    ('all_time', None),
)


def percentage(count: int, total: int) -> float:
    if not total:
        return 0.0
    return round(count / total * 100, 2)


def _questions_with_options(category: Category) -> List[Question]:
    return list(
        Question.objects.filter(category=category)
        .order_by('id')
        .prefetch_related(Prefetch('options', queryset=Option.objects.order_by('id')))
    )


def _image_block(image_name: str, image_path: str, questions: List[Question], counts: dict) -> dict:
    question_blocks = []
    for question in questions:
        options = list(question.options.all())
        total = sum(counts.get((question.id, o.id), 0) for o in options)
        question_blocks.append({
            'questionId': question.id,
            'questionText': question.question_text,
            'total': total,
            'options': [
                {
                    'optionId': o.id,
                    'optionText': o.option_text,
                    'count': counts.get((question.id, o.id), 0),
                    'percentage': percentage(counts.get((question.id, o.id), 0), total),
                }
                for o in options
            ],
        })
    return {'imageName': image_name, 'imagePath': image_path, 'questions': question_blocks}


def _category_block(category: Category) -> dict:
    questions = _questions_with_options(category)
    images = {}
    for vote in AnswerVote.objects.filter(config_link_id=category.config_link_id).order_by('id'):
        entry = images.setdefault(vote.image_name, {'path': vote.image_path, 'counts': {}})
        entry['counts'][(vote.question_id, vote.option_id)] = vote.count
    return {
        'configLinkId': category.config_link_id,
        'categoryName': category.category_name,
        'images': [
            _image_block(name, entry['path'], questions, entry['counts'])
            for name, entry in images.items()
        ],
    }


def build_statistics(config_link_ids: Iterable[int]) -> List[dict]:
    categories = Category.objects.filter(config_link_id__in=list(config_link_ids)).order_by('config_link_id')
    return [_category_block(category) for category in categories]


def image_statistics(category_id: int, image_name: str) -> dict:
    """Statistics block of a single image; an image without votes yields zero counts"""
    category = Category.objects.filter(id=category_id).first()
    if category is None:
        raise CategoryNotFound()
    votes = AnswerVote.objects.filter(config_link_id=category.config_link_id, image_name=image_name)
    counts = {(v.question_id, v.option_id): v.count for v in votes}
    image_path = next((v.image_path for v in votes), '')
    block = _image_block(image_name, image_path, _questions_with_options(category), counts)
    block['configLinkId'] = category.config_link_id
    block['categoryName'] = category.category_name
    return block


def unique_user_trend(config_link_ids: Iterable[int], now: Optional[datetime] = None) -> List[dict]:
    """
    Distinct answering user keys per config link in five fixed windows.

    A window of N days covers [start of today - N days, now].
    """
    now = now or timezone.now()
    start_of_today = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)

    result = []
    for category in Category.objects.filter(config_link_id__in=list(config_link_ids)).order_by('config_link_id'):
        answers = UserAnswer.objects.filter(category=category, created_date__lte=now)
        buckets = {}
        for name, days in TREND_WINDOWS:
            qs = answers
            if days is not None:
                qs = qs.filter(created_date__gte=start_of_today - timedelta(days=days))
            buckets[name] = qs.values('user_key').distinct().count()
        result.append({
            'configLinkId': category.config_link_id,
            'categoryName': category.category_name,
            'counts': buckets,
        })
    return result


def render_json(stats: List[dict]) -> str:
    return json.dumps(stats, indent=2, ensure_ascii=False)


def render_csv(stats: List[dict]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_HEADER)
    for category in stats:
        for image in category['images']:
            for question in image['questions']:
                for option in question['options']:
                    writer.writerow([
                        category['configLinkId'],
                        category['categoryName'],
                        image['imageName'],
                        image['imagePath'],
                        question['questionText'],
                        option['optionText'],
                        option['count'],
                        option['percentage'],
                    ])
    return buf.getvalue()
