from .service import GenerationFailure, QuestionService, parse_questions
from .themes import THEMES, theme_label

__all__ = ['GenerationFailure', 'QuestionService', 'parse_questions', 'THEMES', 'theme_label']
