"""Question editing over game content.

Every function here takes a content value and returns a new one; nothing is
written to the database. Callers persist the result themselves, which keeps
these operations testable with plain in-memory documents.
"""

from typing import Iterable

from wordgames.errors import NotFound
from .content import GameContent, new_question_id


def _fresh_id(content: GameContent) -> str:
    question_id = new_question_id()
    while content.find(question_id) is not None:
        question_id = new_question_id()
    return question_id


def find_question(content: GameContent, question_id):
    question = content.find(question_id)
    if question is None:
        raise NotFound('Question not found')
    return question


def add_question(content: GameContent, fields: dict) -> GameContent:
    question = content.question_type.create(fields, _fresh_id(content))
    updated = content.with_questions(content.questions + (question,))
    updated.validate()
    return updated


def update_question(content: GameContent, question_id, patch: dict) -> GameContent:
    idx = content.index_of(question_id)
    if idx is None:
        raise NotFound('Question not found')
    questions = list(content.questions)
    questions[idx] = questions[idx].patched(patch)
    updated = content.with_questions(questions)
    updated.validate()
    return updated


def delete_question(content: GameContent, question_id) -> GameContent:
    idx = content.index_of(question_id)
    if idx is None:
        raise NotFound('Question not found')
    return content.with_questions(content.questions[:idx] + content.questions[idx + 1:])


def replace_questions(content: GameContent, items: Iterable[dict]) -> GameContent:
    """Swap the whole question list for freshly created questions."""
    questions = []
    for fields in items:
        questions.append(content.question_type.create(fields, new_question_id()))
    updated = content.with_questions(questions)
    updated.validate()
    return updated
