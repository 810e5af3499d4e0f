"""URLs of the classification quiz API"""
from django.urls import path
from quiz_app.api.views import (
    CategoryCountView,
    CategoryDetailView,
    CategoryImageUploadView,
    CategoryListView,
    CategoryQuestionsView,
    CreateQuizView,
    FullCategoryView,
    ImageBlobView,
    ImageDetailView,
    ImageListView,
    ImageStatisticsView,
    OptionDetailView,
    PublicCategoriesView,
    QuestionDetailView,
    QuestionOptionsView,
    StatisticsByConfigView,
    StatisticsExportView,
    SubmitImageAnswersView,
    UniqueUserCountsView,
)


urlpatterns = [
    path('full-category/', FullCategoryView.as_view(), name='full-category'),
    path('categories/', CategoryListView.as_view(), name='category-list'),
    path('categories/count/', CategoryCountView.as_view(), name='category-count'),
    path('categories/active/', PublicCategoriesView.as_view(), name='category-active'),
    path('categories/featured/', PublicCategoriesView.as_view(featured=True), name='category-featured'),
    path('categories/<int:pk>/', CategoryDetailView.as_view(), name='category-detail'),
    path('categories/<int:pk>/questions/', CategoryQuestionsView.as_view(), name='category-questions'),
    path('categories/<int:pk>/images/', CategoryImageUploadView.as_view(), name='category-images'),
    path('questions/<int:pk>/', QuestionDetailView.as_view(), name='question-detail'),
    path('questions/<int:pk>/options/', QuestionOptionsView.as_view(), name='question-options'),
    path('options/<int:pk>/', OptionDetailView.as_view(), name='option-detail'),
    path('images/', ImageListView.as_view(), name='image-list'),
    path('images/<int:pk>/', ImageDetailView.as_view(), name='image-detail'),
    path('images/<str:container>/<str:file_name>', ImageBlobView.as_view(), name='image-blob'),
    path('createQuiz/<int:config_link_id>/', CreateQuizView.as_view(), name='create-quiz'),
    path('submitImageAnswers/', SubmitImageAnswersView.as_view(), name='submit-image-answers'),
    path('statistics/config/sorted/', StatisticsByConfigView.as_view(), name='statistics-config-sorted'),
    path('statistics/image/<int:category_id>/<str:image_name>/', ImageStatisticsView.as_view(), name='statistics-image'),
    path('statistics/export/<str:export_format>/', StatisticsExportView.as_view(), name='statistics-export'),
    path('statistics/user-counts/', UniqueUserCountsView.as_view(), name='statistics-user-counts'),
]
