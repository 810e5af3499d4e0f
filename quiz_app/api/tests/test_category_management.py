import pytest
from django.urls import reverse
from quiz_app.models import AnswerVote, Category, ImageUpload, Option, Question
from quiz_app.services.categories import create_full_category, delete_category_cascade


@pytest.fixture
def birds(user):
    category, _, _ = create_full_category(
        user, 'Birds', [{'question_key': 'b1', 'question_text': 'Colour?', 'options': ['Red', 'Blue']}]
    )
    return category


def _image(category, user, name, path):
    return ImageUpload.objects.create(
        image_name=name, folder_name='birds', image_path=path,
        group_id=1, config_link_id=category.config_link_id, user=user,
    )


@pytest.mark.django_db
def test_list_returns_only_own_categories(auth_client, birds, other_user):
    create_full_category(other_user, 'Fish', [])
    resp = auth_client(birds.user).get(reverse('category-list'))
    assert resp.status_code == 200
    assert [c['categoryName'] for c in resp.json()] == ['Birds']


@pytest.mark.django_db
def test_detail_nests_questions_and_options(auth_client, birds):
    resp = auth_client(birds.user).get(reverse('category-detail', args=[birds.id]))
    assert resp.status_code == 200
    question = resp.json()['questions'][0]
    assert question['questionKey'] == 'b1'
    assert [o['optionText'] for o in question['options']] == ['Red', 'Blue']


@pytest.mark.django_db
def test_detail_of_foreign_category_is_forbidden(auth_client, birds, other_user):
    assert auth_client(other_user).get(reverse('category-detail', args=[birds.id])).status_code == 403


@pytest.mark.django_db
def test_unknown_category_is_404(auth_client, user):
    assert auth_client(user).get(reverse('category-detail', args=[999])).status_code == 404


@pytest.mark.django_db
def test_patch_toggles_flags(auth_client, birds):
    resp = auth_client(birds.user).patch(
        reverse('category-detail', args=[birds.id]), {'isActive': False, 'isFeatured': True}, format='json'
    )
    assert resp.status_code == 200
    birds.refresh_from_db()
    assert birds.is_active is False
    assert birds.is_featured is True


@pytest.mark.django_db
def test_patch_without_flags_is_400(auth_client, birds):
    resp = auth_client(birds.user).patch(reverse('category-detail', args=[birds.id]), {}, format='json')
    assert resp.status_code == 400


@pytest.mark.django_db
def test_staff_may_toggle_foreign_category(auth_client, birds, staff_user):
    resp = auth_client(staff_user).patch(
        reverse('category-detail', args=[birds.id]), {'isFeatured': True}, format='json'
    )
    assert resp.status_code == 200


@pytest.mark.django_db
def test_cascade_delete_keeps_going_when_blob_delete_fails(birds, fake_storage):
    _image(birds, birds.user, 'a.png', 'https://blobs.test/birds/a.png')
    _image(birds, birds.user, 'b.png', 'https://blobs.test/birds/b.png')
    question = birds.questions.get()
    AnswerVote.objects.create(
        category=birds, config_link_id=birds.config_link_id, image_name='a.png',
        question=question, option=question.options.first(), count=3,
    )
    fake_storage.fail_deletes.add('b.png')

    report = delete_category_cascade(birds, fake_storage)

    assert report['deleted_images'] == 2
    assert report['failed_blob_deletes'][0]['image_path'] == 'https://blobs.test/birds/b.png'
    assert len(report['failed_blob_deletes']) == 1
    assert fake_storage.deleted == [('birds', 'a.png')]
    assert not Category.objects.exists()
    assert not Question.objects.exists()
    assert not Option.objects.exists()
    assert not AnswerVote.objects.exists()
    assert not ImageUpload.objects.exists()


@pytest.mark.django_db
def test_cascade_delete_endpoint_reports_failures(auth_client, birds, fake_storage):
    _image(birds, birds.user, 'a.png', 'not a blob url')
    resp = auth_client(birds.user).delete(reverse('category-detail', args=[birds.id]))
    assert resp.status_code == 200
    body = resp.json()
    assert body['deletedImages'] == 1
    assert body['failedBlobDeletes'][0]['error'] == 'Unparseable image path'


@pytest.mark.django_db
def test_add_question_applies_duplicate_rule(auth_client, birds):
    client = auth_client(birds.user)
    url = reverse('category-questions', args=[birds.id])
    resp = client.post(url, {'questionKey': 'b1', 'questionText': 'Again?'}, format='json')
    assert resp.status_code == 400
    assert resp.json()['duplicates'] == ['b1']

    resp = client.post(
        url, {'questionKey': 'b2', 'questionText': 'Size?', 'options': [{'optionText': 'Big'}]}, format='json'
    )
    assert resp.status_code == 201
    assert resp.json()['options'][0]['optionText'] == 'Big'
    assert [q['questionKey'] for q in client.get(url).json()] == ['b1', 'b2']


@pytest.mark.django_db
def test_question_text_update_options_and_deletes(auth_client, birds, other_user):
    client = auth_client(birds.user)
    question = birds.questions.get()

    assert auth_client(other_user).patch(
        reverse('question-detail', args=[question.id]), {'questionText': 'Hacked'}, format='json'
    ).status_code == 403

    resp = client.patch(reverse('question-detail', args=[question.id]), {'questionText': 'Plumage?'}, format='json')
    assert resp.status_code == 200
    assert resp.json()['questionText'] == 'Plumage?'

    resp = client.post(
        reverse('question-options', args=[question.id]),
        {'options': [{'optionText': 'Green'}, {'optionText': 'Black'}]},
        format='json',
    )
    assert resp.status_code == 201
    assert [o['optionText'] for o in resp.json()] == ['Green', 'Black']
    assert question.options.count() == 4

    option = question.options.first()
    assert client.delete(reverse('option-detail', args=[option.id])).status_code == 204
    assert client.delete(reverse('question-detail', args=[question.id])).status_code == 204
    assert not Option.objects.exists()


@pytest.mark.django_db
def test_public_lists_group_active_categories_by_owner(api_client, birds, other_user):
    _image(birds, birds.user, 'a.png', 'https://blobs.test/birds/a.png')
    fish, _, _ = create_full_category(other_user, 'Fish', [])
    Category.objects.filter(pk=fish.pk).update(is_featured=True)
    create_full_category(other_user, 'Hidden', [])
    Category.objects.filter(category_name='Hidden').update(is_active=False)

    active = api_client.get(reverse('category-active')).json()
    assert [g['username'] for g in active] == ['alice', 'bob']
    assert active[0]['categories'][0]['coverImage'] == 'https://blobs.test/birds/a.png'
    assert [c['categoryName'] for c in active[1]['categories']] == ['Fish']
    assert active[1]['categories'][0]['coverImage'] is None

    featured = api_client.get(reverse('category-featured')).json()
    assert [c['categoryName'] for g in featured for c in g['categories']] == ['Fish']


@pytest.mark.django_db
def test_category_count_is_public(api_client, birds):
    resp = api_client.get(reverse('category-count'))
    assert resp.status_code == 200
    assert resp.json() == {'count': 1}


@pytest.mark.django_db
def test_option_text_update(auth_client, birds, other_user, staff_user):
    option = birds.questions.get().options.order_by('id').first()
    url = reverse('option-detail', args=[option.id])

    assert auth_client(other_user).patch(url, {'optionText': 'Hacked'}, format='json').status_code == 403
    assert auth_client(birds.user).patch(url, {'optionText': '   '}, format='json').status_code == 400

    resp = auth_client(birds.user).patch(url, {'optionText': '  Crimson '}, format='json')
    assert resp.status_code == 200
    assert resp.json() == {'id': option.id, 'optionText': 'Crimson', 'isCorrect': False}

    assert auth_client(staff_user).patch(url, {'optionText': 'Scarlet'}, format='json').status_code == 200
    option.refresh_from_db()
    assert option.option_text == 'Scarlet'
    assert auth_client(birds.user).patch(
        reverse('option-detail', args=[9999]), {'optionText': 'x'}, format='json'
    ).status_code == 404
