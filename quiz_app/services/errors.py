"""Domain errors raised by the quiz services and mapped to HTTP answers by the views"""


class QuizError(Exception):
    """Base class; the message is safe to return to the client"""
    pass


class CategoryNotFound(QuizError):
    def __init__(self, message: str = 'Category not found'):
        super().__init__(message)


class DuplicateQuestionKeys(QuizError):
    """Raised when incoming question keys collide with existing ones or with each other"""

    def __init__(self, duplicates):
        self.duplicates = sorted(set(duplicates))
        super().__init__('Duplicate question keys found: ' + ', '.join(self.duplicates))


class InvalidAnswers(QuizError):
    pass
