from django.db import transaction
from django.db.models import F
from quiz_app.models import Sequence

CONFIG_LINK_ID = 'category.config_link_id'
GROUP_ID = 'image_upload.group_id'


def next_value(name: str) -> int:
    """
    Returns the next value of the named sequence, creating it at 0 on first use.

    The row is locked for the increment, so concurrent callers never receive
    the same value.
    """
    with transaction.atomic():
        Sequence.objects.get_or_create(name=name)
        seq = Sequence.objects.select_for_update().get(name=name)
        Sequence.objects.filter(pk=seq.pk).update(value=F('value') + 1)
        seq.refresh_from_db(fields=['value'])
        return seq.value
