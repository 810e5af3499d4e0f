from django.contrib import admin
from quiz_app.models import AnswerVote, Category, ImageUpload, Option, Question, Sequence, UserAnswer


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'category_name', 'config_link_id', 'user', 'is_active', 'is_featured', 'created_date')
    list_filter = ('is_active', 'is_featured')
    search_fields = ('category_name', 'user__username')
    readonly_fields = ('config_link_id',)
    inlines = (QuestionInline,)


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('id', 'question_key', 'category')
    search_fields = ('question_key', 'question_text')
    inlines = (OptionInline,)


@admin.register(ImageUpload)
class ImageUploadAdmin(admin.ModelAdmin):
    list_display = ('id', 'image_name', 'folder_name', 'group_id', 'config_link_id', 'user', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('image_name', 'folder_name')


@admin.register(AnswerVote)
class AnswerVoteAdmin(admin.ModelAdmin):
    list_display = ('id', 'config_link_id', 'image_name', 'question', 'option', 'count')
    readonly_fields = ('count',)


admin.site.register(UserAnswer)
admin.site.register(Sequence)
