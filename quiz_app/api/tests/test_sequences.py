import pytest
from quiz_app.models import Category
from quiz_app.services.categories import create_full_category
from quiz_app.services.sequences import CONFIG_LINK_ID, GROUP_ID, next_value


@pytest.mark.django_db
def test_sequences_start_at_one_and_are_independent():
    assert next_value(CONFIG_LINK_ID) == 1
    assert next_value(CONFIG_LINK_ID) == 2
    assert next_value(GROUP_ID) == 1


@pytest.mark.django_db
def test_config_link_ids_are_never_reused_after_delete(user):
    first, _, _ = create_full_category(user, 'First', [])
    second, _, _ = create_full_category(user, 'Second', [])
    assert second.config_link_id > first.config_link_id

    second_id = second.config_link_id
    Category.objects.filter(pk=second.pk).delete()
    third, _, _ = create_full_category(user, 'Third', [])
    assert third.config_link_id > second_id
