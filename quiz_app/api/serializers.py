from rest_framework import serializers
from core.utils.validators import validate_non_empty
from quiz_app.models import Category, ImageUpload, Option, Question


class OptionSerializer(serializers.ModelSerializer):
    """Read-only option as shown to authors"""
    optionText = serializers.CharField(source='option_text')
    isCorrect = serializers.BooleanField(source='is_correct')

    class Meta:
        model = Option
        fields = ('id', 'optionText', 'isCorrect')
        read_only_fields = fields


class QuestionSerializer(serializers.ModelSerializer):
    questionKey = serializers.CharField(source='question_key')
    questionText = serializers.CharField(source='question_text')
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ('id', 'questionKey', 'questionText', 'options')
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    """
    Read-only category; `questions` is nested only in the detail view.
    """
    categoryName = serializers.CharField(source='category_name')
    configLinkId = serializers.IntegerField(source='config_link_id')
    userId = serializers.IntegerField(source='user_id')
    createdDate = serializers.DateTimeField(source='created_date')
    isActive = serializers.BooleanField(source='is_active')
    isFeatured = serializers.BooleanField(source='is_featured')

    class Meta:
        model = Category
        fields = ('id', 'categoryName', 'configLinkId', 'userId', 'createdDate', 'isActive', 'isFeatured')
        read_only_fields = fields


class CategoryDetailSerializer(CategorySerializer):
    questions = QuestionSerializer(many=True, read_only=True)

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ('questions',)
        read_only_fields = fields


class CategoryStatusSerializer(serializers.Serializer):
    """Partial update input for the active/featured toggles; at least one flag required"""
    isActive = serializers.BooleanField(required=False)
    isFeatured = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide isActive and/or isFeatured.')
        return attrs


class OptionCreateSerializer(serializers.Serializer):
    optionText = serializers.CharField(max_length=500)

    def validate_optionText(self, value):
        return validate_non_empty(value, 'optionText')


class QuestionCreateSerializer(serializers.Serializer):
    questionKey = serializers.CharField(max_length=255)
    questionText = serializers.CharField()
    options = OptionCreateSerializer(many=True, required=False)

    def validate_questionKey(self, value):
        return validate_non_empty(value, 'questionKey')

    def validate_questionText(self, value):
        return validate_non_empty(value, 'questionText')

    def to_service(self, data=None) -> dict:
        data = data if data is not None else self.validated_data
        return {
            'question_key': data['questionKey'],
            'question_text': data['questionText'],
            'options': [o['optionText'] for o in data.get('options', [])],
        }


class FullCategorySerializer(serializers.Serializer):
    """
    Input for creating (or extending) a category in one request:
    {categoryName, questions: [{questionKey, questionText, options: [{optionText}]}]}
    """
    categoryName = serializers.CharField(max_length=255)
    questions = QuestionCreateSerializer(many=True)

    def validate_categoryName(self, value):
        return validate_non_empty(value, 'categoryName')

    def validate_questions(self, value):
        if not value:
            raise serializers.ValidationError('At least one question is required.')
        return value

    def questions_for_service(self):
        to_service = QuestionCreateSerializer().to_service
        return [to_service(q) for q in self.validated_data['questions']]


class QuestionTextUpdateSerializer(serializers.Serializer):
    questionText = serializers.CharField()

    def validate_questionText(self, value):
        return validate_non_empty(value, 'questionText')


class OptionBulkCreateSerializer(serializers.Serializer):
    options = OptionCreateSerializer(many=True)

    def validate_options(self, value):
        if not value:
            raise serializers.ValidationError('At least one option is required.')
        return value


class ImageUploadSerializer(serializers.ModelSerializer):
    imageName = serializers.CharField(source='image_name')
    folderName = serializers.CharField(source='folder_name')
    imagePath = serializers.CharField(source='image_path')
    createdDate = serializers.DateTimeField(source='created_date')
    groupId = serializers.IntegerField(source='group_id')
    configLinkId = serializers.IntegerField(source='config_link_id')
    userId = serializers.IntegerField(source='user_id')
    isActive = serializers.BooleanField(source='is_active')

    class Meta:
        model = ImageUpload
        fields = (
            'id', 'imageName', 'folderName', 'imagePath', 'createdDate',
            'groupId', 'configLinkId', 'userId', 'isActive',
        )
        read_only_fields = fields


class QuizImageSerializer(serializers.ModelSerializer):
    imageName = serializers.CharField(source='image_name')
    imagePath = serializers.CharField(source='image_path')
    groupId = serializers.IntegerField(source='group_id')

    class Meta:
        model = ImageUpload
        fields = ('imageName', 'imagePath', 'groupId')
        read_only_fields = fields


class QuizOptionSerializer(serializers.ModelSerializer):
    optionText = serializers.CharField(source='option_text')

    class Meta:
        model = Option
        fields = ('id', 'optionText')
        read_only_fields = fields


class QuizQuestionSerializer(serializers.ModelSerializer):
    questionKey = serializers.CharField(source='question_key')
    questionText = serializers.CharField(source='question_text')
    options = QuizOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ('id', 'questionKey', 'questionText', 'options')
        read_only_fields = fields


class QuizPayloadSerializer(serializers.Serializer):
    """Output of the quiz assembly: the category with its active images and questions"""
    success = serializers.SerializerMethodField()
    category = serializers.CharField(source='category.category_name')
    categoryId = serializers.IntegerField(source='category.id')
    configLinkId = serializers.IntegerField(source='category.config_link_id')
    images = QuizImageSerializer(many=True)
    questions = QuizQuestionSerializer(many=True)

    def get_success(self, obj) -> bool:
        return True


class AnswerSerializer(serializers.Serializer):
    questionId = serializers.IntegerField()
    optionId = serializers.IntegerField()


class ImageAnswersSerializer(serializers.Serializer):
    """Input of POST /api/submitImageAnswers/"""
    imageName = serializers.CharField(max_length=255)
    imagePath = serializers.CharField(max_length=1024, required=False, allow_blank=True, default='')
    categoryId = serializers.IntegerField()
    answers = AnswerSerializer(many=True)

    def validate_imageName(self, value):
        return validate_non_empty(value, 'imageName')

    def answers_for_service(self):
        return [
            {'question_id': a['questionId'], 'option_id': a['optionId']}
            for a in self.validated_data['answers']
        ]
