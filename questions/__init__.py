"""questions — rekonstrukcja zawiadomień o pytaniach ogólnych."""

from .parser import QuestionFolder, fold_questions, parse_question_document

__all__ = ["QuestionFolder", "fold_questions", "parse_question_document"]
