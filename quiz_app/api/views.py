import hashlib
import logging
from django.conf import settings
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from core.utils.permissions import IsTrustedClassificationQuiz
from core.utils.validators import validate_image_filename
from quiz_app.api.serializers import (
    CategoryDetailSerializer,
    CategorySerializer,
    CategoryStatusSerializer,
    FullCategorySerializer,
    ImageAnswersSerializer,
    ImageUploadSerializer,
    OptionBulkCreateSerializer,
    OptionCreateSerializer,
    OptionSerializer,
    QuestionCreateSerializer,
    QuestionSerializer,
    QuestionTextUpdateSerializer,
    QuizPayloadSerializer,
)
from quiz_app.models import Category, ImageUpload, Option, Question
from quiz_app.services import statistics
from quiz_app.services import storage as blob_storage
from quiz_app.services.answers import resolve_user_key, submit_image_answers
from quiz_app.services.assembly import assemble_quiz
from quiz_app.services.categories import (
    add_options,
    add_question,
    create_full_category,
    delete_category_cascade,
    public_categories_by_owner,
)
from quiz_app.services.errors import CategoryNotFound, DuplicateQuestionKeys, InvalidAnswers
from quiz_app.services.images import content_type_for, delete_image, register_upload_batch

logger = logging.getLogger(__name__)


def _check_owner(obj, user, owner_id=None):
    """Raises 403 unless `user` owns `obj` or is staff"""
    owner_id = obj.user_id if owner_id is None else owner_id
    if not user.is_staff and owner_id != user.id:
        raise PermissionDenied('You do not have permission to modify this resource.')
    return obj


def _owned_category(pk, user) -> Category:
    category = Category.objects.filter(pk=pk).first()
    if category is None:
        raise NotFound('Category not found.')
    return _check_owner(category, user)


class FullCategoryView(APIView):
    """
    POST /api/full-category/
    Creates a category with questions and options, or adds questions to the
    caller's existing category of the same name.

    Responses:
      - 201: category created.
      - 200: existing category extended.
      - 400: invalid payload, or colliding question keys ('duplicates' lists them; nothing is written).
      - 401/403: not authenticated / not a trusted author.
    """
    permission_classes = [IsTrustedClassificationQuiz]

    def post(self, request):
        serializer = FullCategorySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            category, created, questions = create_full_category(
                request.user,
                serializer.validated_data['categoryName'],
                serializer.questions_for_service(),
            )
        except DuplicateQuestionKeys as exc:
            return Response(
                {'success': False, 'message': str(exc), 'duplicates': exc.duplicates},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                'success': True,
                'message': 'Category created.' if created else 'Questions added to existing category.',
                'categoryId': category.id,
                'configLinkId': category.config_link_id,
                'questionIds': [q.id for q in questions],
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CategoryListView(ListAPIView):
    """GET /api/categories/ - categories of the authenticated user"""
    permission_classes = [IsAuthenticated]
    serializer_class = CategorySerializer

    def get_queryset(self):
        return Category.objects.filter(user=self.request.user).order_by('id')


class CategoryCountView(APIView):
    """GET /api/categories/count/"""
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({'count': Category.objects.count()}, status=status.HTTP_200_OK)


class PublicCategoriesView(APIView):
    """
    GET /api/categories/active/ and /api/categories/featured/
    Active categories grouped by owner, each with a random cover image.
    """
    permission_classes = [AllowAny]
    featured = False

    def get(self, request):
        return Response(public_categories_by_owner(featured=self.featured), status=status.HTTP_200_OK)


class CategoryDetailView(APIView):
    """
    GET    /api/categories/{id}/  category with nested questions and options
    PATCH  /api/categories/{id}/  toggle isActive / isFeatured
    DELETE /api/categories/{id}/  cascade delete incl. blobs (best effort)

    Only the owner or staff may access a category here.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        category = _owned_category(pk, request.user)
        return Response(CategoryDetailSerializer(category).data, status=status.HTTP_200_OK)

    def patch(self, request, pk):
        category = _owned_category(pk, request.user)
        serializer = CategoryStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        fields = []
        if 'isActive' in serializer.validated_data:
            category.is_active = serializer.validated_data['isActive']
            fields.append('is_active')
        if 'isFeatured' in serializer.validated_data:
            category.is_featured = serializer.validated_data['isFeatured']
            fields.append('is_featured')
        category.save(update_fields=fields)
        return Response(CategorySerializer(category).data, status=status.HTTP_200_OK)

    def delete(self, request, pk):
        category = _owned_category(pk, request.user)
        report = delete_category_cascade(category, blob_storage.get_storage())
        return Response(
            {
                'success': True,
                'message': 'Category deleted.',
                'deletedImages': report['deleted_images'],
                'failedBlobDeletes': report['failed_blob_deletes'],
            },
            status=status.HTTP_200_OK,
        )


class CategoryQuestionsView(APIView):
    """
    GET  /api/categories/{id}/questions/  questions with options
    POST /api/categories/{id}/questions/  add one question (same duplicate-key rule as full-category)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        category = _owned_category(pk, request.user)
        questions = category.questions.order_by('id').prefetch_related('options')
        return Response(QuestionSerializer(questions, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, pk):
        category = _owned_category(pk, request.user)
        serializer = QuestionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payload = serializer.to_service()
        try:
            question = add_question(category, payload['question_key'], payload['question_text'], payload['options'])
        except DuplicateQuestionKeys as exc:
            return Response(
                {'success': False, 'message': str(exc), 'duplicates': exc.duplicates},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(QuestionSerializer(question).data, status=status.HTTP_201_CREATED)


class QuestionDetailView(APIView):
    """
    PATCH  /api/questions/{id}/  update the question text
    DELETE /api/questions/{id}/  delete the question and its options
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        question = Question.objects.select_related('category').filter(pk=pk).first()
        if question is None:
            raise NotFound('Question not found.')
        return _check_owner(question, self.request.user, owner_id=question.category.user_id)

    def patch(self, request, pk):
        question = self.get_object(pk)
        serializer = QuestionTextUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        question.question_text = serializer.validated_data['questionText']
        question.save(update_fields=['question_text'])
        return Response(QuestionSerializer(question).data, status=status.HTTP_200_OK)

    def delete(self, request, pk):
        self.get_object(pk).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class QuestionOptionsView(APIView):
    """POST /api/questions/{id}/options/ - add options in bulk"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        question = Question.objects.select_related('category').filter(pk=pk).first()
        if question is None:
            raise NotFound('Question not found.')
        _check_owner(question, request.user, owner_id=question.category.user_id)

        serializer = OptionBulkCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        options = add_options(question, [o['optionText'] for o in serializer.validated_data['options']])
        return Response(OptionSerializer(options, many=True).data, status=status.HTTP_201_CREATED)


class OptionDetailView(APIView):
    """
    PATCH  /api/options/{id}/  update the option text
    DELETE /api/options/{id}/
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, pk):
        option = Option.objects.select_related('question__category').filter(pk=pk).first()
        if option is None:
            raise NotFound('Option not found.')
        return _check_owner(option, self.request.user, owner_id=option.question.category.user_id)

    def patch(self, request, pk):
        option = self.get_object(pk)
        serializer = OptionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        option.option_text = serializer.validated_data['optionText']
        option.save(update_fields=['option_text'])
        return Response(OptionSerializer(option).data, status=status.HTTP_200_OK)

    def delete(self, request, pk):
        self.get_object(pk).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryImageUploadView(APIView):
    """
    POST /api/categories/{id}/images/
    Multipart upload (field 'files'); every file of the request shares one group id.

    Responses:
      - 200: uploaded records and the group id.
      - 400: no files or unsupported file type.
      - 403: not the category owner.
      - 404: unknown category.
      - 500: storage failure.
    """
    permission_classes = [IsTrustedClassificationQuiz]

    def post(self, request, pk):
        category = _owned_category(pk, request.user)
        files = [f for f in request.FILES.getlist('files') if f.size]
        if not files:
            return Response({'success': False, 'message': 'No files uploaded.'}, status=status.HTTP_400_BAD_REQUEST)
        for upload in files:
            validate_image_filename(upload.name)

        try:
            group_id, records = register_upload_batch(request.user, category, files, blob_storage.get_storage())
        except blob_storage.BlobStorageError:
            logger.exception('Image upload to Category(%s) failed.', category.id)
            return Response(
                {'success': False, 'message': 'Failed to upload images.'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(
            {
                'success': True,
                'groupId': group_id,
                'uploadedFiles': ImageUploadSerializer(records, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class ImageListView(ListAPIView):
    """GET /api/images/ - uploads of the authenticated user"""
    permission_classes = [IsAuthenticated]
    serializer_class = ImageUploadSerializer

    def get_queryset(self):
        return ImageUpload.objects.filter(user=self.request.user).order_by('id')


class ImageDetailView(APIView):
    """DELETE /api/images/{id}/ - blob first, then the record"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        image = ImageUpload.objects.filter(pk=pk).first()
        if image is None:
            raise NotFound('Image not found.')
        _check_owner(image, request.user)
        try:
            delete_image(image, blob_storage.get_storage())
        except blob_storage.BlobStorageError:
            logger.exception('Deleting blob of ImageUpload(%s) failed.', image.id)
            return Response(
                {'success': False, 'message': 'Failed to delete image.'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ImageBlobView(APIView):
    """
    GET /api/images/{container}/{file_name}
    Streams an image from blob storage, retrying transient download errors.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, container, file_name):
        try:
            content = blob_storage.download_with_retry(
                blob_storage.get_storage(),
                container,
                file_name,
                attempts=settings.BLOB_DOWNLOAD_MAX_ATTEMPTS,
                backoff=settings.BLOB_DOWNLOAD_BACKOFF_SECONDS,
            )
        except blob_storage.BlobStorageError:
            return Response({'success': False, 'message': 'Image not found'}, status=status.HTTP_404_NOT_FOUND)

        resp = HttpResponse(content, content_type=content_type_for(file_name))
        resp['Cache-Control'] = 'public, max-age=86400'
        resp['ETag'] = '"%s"' % hashlib.md5(content).hexdigest()
        return resp


class CreateQuizView(APIView):
    """
    GET /api/createQuiz/{config_link_id}/
    Public quiz payload: category, active images and questions with options.
    """
    permission_classes = [AllowAny]

    def get(self, request, config_link_id):
        try:
            payload = assemble_quiz(config_link_id)
        except CategoryNotFound as exc:
            return Response({'success': False, 'message': str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(QuizPayloadSerializer(payload).data, status=status.HTTP_200_OK)


class SubmitImageAnswersView(APIView):
    """
    POST /api/submitImageAnswers/
    Records the answers for one image. Each call counts, also repeated ones.

    Responses:
      - 200: {success, message, isImageComplete, answeredCount, totalCount}
      - 400: invalid body or answers not matching the category.
      - 404: unknown or inactive category.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ImageAnswersSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        user_key = resolve_user_key(getattr(request, 'quiz_session_key', None), request.user)

        try:
            result = submit_image_answers(
                data['categoryId'],
                data['imageName'],
                data['imagePath'],
                serializer.answers_for_service(),
                user_key,
            )
        except CategoryNotFound as exc:
            return Response({'success': False, 'message': str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidAnswers as exc:
            return Response({'success': False, 'message': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                'success': True,
                'message': 'Answers submitted successfully.',
                'isImageComplete': result.is_image_complete,
                'answeredCount': result.answered_count,
                'totalCount': result.total_count,
            },
            status=status.HTTP_200_OK,
        )


def _statistics_owner_id(request) -> int:
    """The caller's own id; staff may inspect another user via ?user_id="""
    requested = request.query_params.get('user_id')
    if requested and request.user.is_staff:
        try:
            return int(requested)
        except ValueError:
            raise NotFound('User not found.')
    return request.user.id


def _owned_config_link_ids(user_id: int):
    ids = list(Category.objects.filter(user_id=user_id).order_by('config_link_id').values_list('config_link_id', flat=True))
    if not ids:
        raise NotFound('No categories found for this user.')
    return ids


class StatisticsByConfigView(APIView):
    """GET /api/statistics/config/sorted/ - aggregated votes of every owned category"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ids = _owned_config_link_ids(_statistics_owner_id(request))
        return Response(statistics.build_statistics(ids), status=status.HTTP_200_OK)


class ImageStatisticsView(APIView):
    """GET /api/statistics/image/{category_id}/{image_name}/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, category_id, image_name):
        category = _owned_category(category_id, request.user)
        return Response(statistics.image_statistics(category.id, image_name), status=status.HTTP_200_OK)


class StatisticsExportView(APIView):
    """
    GET /api/statistics/export/{format}/
    Downloads the aggregate as 'json' or 'csv'; any other format is a 400.
    """
    permission_classes = [IsAuthenticated]
    renderers = {
        'json': (statistics.render_json, 'application/json'),
        'csv': (statistics.render_csv, 'text/csv'),
    }

    def get(self, request, export_format):
        export_format = export_format.lower()
        if export_format not in self.renderers:
            return Response(
                {'success': False, 'message': 'Unsupported export format. Use json or csv.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        owner_id = _statistics_owner_id(request)
        stats = statistics.build_statistics(_owned_config_link_ids(owner_id))

        render, content_type = self.renderers[export_format]
        stamp = timezone.localtime().strftime('%Y%m%d_%H%M%S')
        resp = HttpResponse(render(stats), content_type=f'{content_type}; charset=utf-8')
        resp['Content-Disposition'] = f'attachment; filename="statistics_{owner_id}_{stamp}.{export_format}"'
        logger.info('User(%s) exported statistics of User(%s) as %s.', request.user.id, owner_id, export_format)
        return resp


class UniqueUserCountsView(APIView):
    """GET /api/statistics/user-counts/ - distinct answering users per config link over five windows"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ids = _owned_config_link_ids(_statistics_owner_id(request))
        return Response(statistics.unique_user_trend(ids), status=status.HTTP_200_OK)
