import pytest
from django.urls import reverse
from quiz_app.models import Category, Option, Question
from quiz_app.services.categories import create_full_category
from quiz_app.services.errors import DuplicateQuestionKeys


def _payload(name='Birds', keys=('b1',)):
    return {
        'categoryName': name,
        'questions': [
            {
                'questionKey': key,
                'questionText': f'Question {key}?',
                'options': [{'optionText': 'Red'}, {'optionText': 'Blue'}],
            }
            for key in keys
        ],
    }


def _service_questions(*keys):
    return [{'question_key': k, 'question_text': f'{k}?', 'options': ['Yes', 'No']} for k in keys]


@pytest.mark.django_db
def test_create_full_category_inserts_questions_and_options(user):
    category, created, questions = create_full_category(user, 'Birds', _service_questions('b1', 'b2'))
    assert created is True
    assert [q.question_key for q in questions] == ['b1', 'b2']
    assert Option.objects.filter(question__category=category).count() == 4
    assert not Option.objects.filter(is_correct=True).exists()


@pytest.mark.django_db
def test_same_name_extends_existing_category(user):
    first, _, _ = create_full_category(user, 'Birds', _service_questions('b1'))
    again, created, questions = create_full_category(user, 'Birds', _service_questions('b2'))
    assert created is False
    assert again.pk == first.pk
    assert again.config_link_id == first.config_link_id
    assert Question.objects.filter(category=first).count() == 2


@pytest.mark.django_db
def test_colliding_key_rejects_the_whole_batch(user):
    category, _, _ = create_full_category(user, 'Birds', _service_questions('b1'))
    with pytest.raises(DuplicateQuestionKeys) as exc_info:
        create_full_category(user, 'Birds', _service_questions('b2', 'b1', 'b3'))
    assert exc_info.value.duplicates == ['b1']
    assert list(Question.objects.filter(category=category).values_list('question_key', flat=True)) == ['b1']


@pytest.mark.django_db
def test_keys_repeated_within_one_batch_are_duplicates(user):
    with pytest.raises(DuplicateQuestionKeys) as exc_info:
        create_full_category(user, 'Birds', _service_questions('b1', 'b1'))
    assert exc_info.value.duplicates == ['b1']
    assert not Category.objects.exists()


@pytest.mark.django_db
def test_same_name_for_another_user_is_a_new_category(user, other_user):
    mine, _, _ = create_full_category(user, 'Birds', _service_questions('b1'))
    theirs, created, _ = create_full_category(other_user, 'Birds', _service_questions('b1'))
    assert created is True
    assert theirs.pk != mine.pk


@pytest.mark.django_db
def test_endpoint_returns_201_then_200(auth_client, author):
    client = auth_client(author)
    url = reverse('full-category')
    resp = client.post(url, _payload(keys=('b1',)), format='json')
    assert resp.status_code == 201
    body = resp.json()
    assert body['success'] is True
    assert len(body['questionIds']) == 1

    resp = client.post(url, _payload(keys=('b2',)), format='json')
    assert resp.status_code == 200
    assert resp.json()['configLinkId'] == body['configLinkId']


@pytest.mark.django_db
def test_endpoint_reports_duplicates_with_400(auth_client, author):
    client = auth_client(author)
    url = reverse('full-category')
    client.post(url, _payload(keys=('b1',)), format='json')
    resp = client.post(url, _payload(keys=('b1', 'b9')), format='json')
    assert resp.status_code == 400
    assert resp.json()['duplicates'] == ['b1']
    assert not Question.objects.filter(question_key='b9').exists()


@pytest.mark.django_db
def test_endpoint_validates_payload(auth_client, author):
    resp = auth_client(author).post(reverse('full-category'), {'categoryName': '  ', 'questions': []}, format='json')
    assert resp.status_code == 400
    body = resp.json()
    assert 'categoryName' in body and 'questions' in body


@pytest.mark.django_db
def test_endpoint_requires_trusted_author(api_client, auth_client, user):
    url = reverse('full-category')
    assert api_client.post(url, _payload(), format='json').status_code == 401
    assert auth_client(user).post(url, _payload(), format='json').status_code == 403


@pytest.mark.django_db
def test_staff_may_author_without_role(auth_client, staff_user):
    resp = auth_client(staff_user).post(reverse('full-category'), _payload(), format='json')
    assert resp.status_code == 201
