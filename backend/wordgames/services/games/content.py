"""Game content documents.

Each game template stores its questions in the ``game_json`` column of the
``game`` table. The JSON is parsed once, at the point where a record is
loaded, into one of the immutable content variants below; everything past
that boundary works with typed values instead of re-reading the slug.
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from wordgames.errors import InvalidQuestion, ValidationError


class TemplateSlug(str, Enum):
    WORDIT = 'wordit'
    COMPLETE_THE_SENTENCE = 'complete-the-sentence'
    COMPOUND_SENTENCES = 'compound-sentences'


TEMPLATE_NAMES = {
    TemplateSlug.WORDIT: 'WordIt',
    TemplateSlug.COMPLETE_THE_SENTENCE: 'Complete the Sentence',
    TemplateSlug.COMPOUND_SENTENCES: 'Compound Sentences',
}


def new_question_id() -> str:
    return str(uuid.uuid4())


def _as_tuple(value):
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def _check_text(value, label: str, max_len: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidQuestion(f'{label} is required')
    if len(value) > max_len:
        raise InvalidQuestion(f'{label} must be at most {max_len} characters')


def _check_optional_text(value, label: str, max_len: int) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        raise InvalidQuestion(f'{label} must be text')
    if len(value) > max_len:
        raise InvalidQuestion(f'{label} must be at most {max_len} characters')


def _check_choices(values, label: str, min_items: int, max_items: int, max_len: int) -> None:
    if not isinstance(values, tuple):
        raise InvalidQuestion(f'{label} must be a list')
    if not (min_items <= len(values) <= max_items):
        raise InvalidQuestion(f'{label} must have between {min_items} and {max_items} entries')
    for value in values:
        _check_text(value, f'Each entry of {label.lower()}', max_len)


def _stored(data: dict, key: str):
    try:
        return data[key]
    except (KeyError, TypeError):
        raise ValidationError('Game content is malformed') from None


class _QuestionMixin:
    # Fields an author may change after creation; ``id`` is never editable.
    EDITABLE: Tuple[str, ...] = ()
    # Fields safe to show a player before they answer.
    PLAY_FIELDS: Tuple[str, ...] = ()
    LIST_FIELDS: Tuple[str, ...] = ()

    def patched(self, patch: dict):
        """Return a validated copy with the editable fields in ``patch`` applied."""
        changes = {}
        for key in self.EDITABLE:
            if key in patch:
                value = patch[key]
                changes[key] = _as_tuple(value) if key in self.LIST_FIELDS else value
        question = replace(self, **changes)
        question.validate()
        return question

    def to_json(self) -> dict:
        data = {'id': self.id}
        for key in self.EDITABLE:
            value = getattr(self, key)
            if value is None:
                continue
            data[key] = list(value) if key in self.LIST_FIELDS else value
        return data


@dataclass(frozen=True)
class WorditQuestion(_QuestionMixin):
    id: str
    sentence: str
    options: Tuple[str, ...]
    correct_answer: str
    explanation: Optional[str] = None

    EDITABLE = ('sentence', 'options', 'correct_answer', 'explanation')
    PLAY_FIELDS = ('id', 'sentence', 'options')
    LIST_FIELDS = ('options',)

    @classmethod
    def create(cls, fields: dict, question_id: str):
        question = cls(
            id=question_id,
            sentence=fields.get('sentence'),
            options=_as_tuple(fields.get('options')),
            correct_answer=fields.get('correct_answer'),
            explanation=fields.get('explanation'),
        )
        question.validate()
        return question

    @classmethod
    def from_json(cls, data: dict):
        return cls(
            id=_stored(data, 'id'),
            sentence=_stored(data, 'sentence'),
            options=tuple(_stored(data, 'options')),
            correct_answer=_stored(data, 'correct_answer'),
            explanation=data.get('explanation'),
        )

    def validate(self) -> None:
        _check_text(self.sentence, 'Sentence', 500)
        _check_choices(self.options, 'Options', 2, 6, 100)
        _check_text(self.correct_answer, 'Correct answer', 100)
        _check_optional_text(self.explanation, 'Explanation', 500)
        if self.correct_answer not in self.options:
            raise InvalidQuestion('Correct answer must be one of the options')


@dataclass(frozen=True)
class SentenceQuestion(_QuestionMixin):
    """Two clauses joined by the conjunction the player must pick."""

    id: str
    left_clause: str
    right_clause: str
    conjunctions: Tuple[str, ...]
    correct_answer: str
    explanation: Optional[str] = None

    EDITABLE = ('left_clause', 'right_clause', 'conjunctions', 'correct_answer', 'explanation')
    PLAY_FIELDS = ('id', 'left_clause', 'right_clause', 'conjunctions')
    LIST_FIELDS = ('conjunctions',)

    @property
    def options(self):
        return self.conjunctions

    @property
    def completed_sentence(self) -> str:
        return f'{self.left_clause}, {self.correct_answer} {self.right_clause}.'

    @classmethod
    def create(cls, fields: dict, question_id: str):
        conjunctions = _as_tuple(fields.get('conjunctions'))
        correct_answer = fields.get('correct_answer')
        if correct_answer is None and isinstance(conjunctions, tuple) and conjunctions:
            # Authors who list the right conjunction first may omit it.
            correct_answer = conjunctions[0]
        question = cls(
            id=question_id,
            left_clause=fields.get('left_clause'),
            right_clause=fields.get('right_clause'),
            conjunctions=conjunctions,
            correct_answer=correct_answer,
            explanation=fields.get('explanation'),
        )
        question.validate()
        return question

    @classmethod
    def from_json(cls, data: dict):
        return cls(
            id=_stored(data, 'id'),
            left_clause=_stored(data, 'left_clause'),
            right_clause=_stored(data, 'right_clause'),
            conjunctions=tuple(_stored(data, 'conjunctions')),
            correct_answer=_stored(data, 'correct_answer'),
            explanation=data.get('explanation'),
        )

    def validate(self) -> None:
        _check_text(self.left_clause, 'Left clause', 2000)
        _check_text(self.right_clause, 'Right clause', 2000)
        _check_choices(self.conjunctions, 'Conjunctions', 2, 6, 16)
        _check_text(self.correct_answer, 'Correct answer', 16)
        _check_optional_text(self.explanation, 'Explanation', 2000)
        if self.correct_answer not in self.conjunctions:
            raise InvalidQuestion('Correct answer must be one of the conjunctions')


Question = Union[WorditQuestion, SentenceQuestion]


@dataclass(frozen=True)
class _Content:
    questions: Tuple[Question, ...] = ()

    slug = None
    question_type = None

    @classmethod
    def from_json(cls, data):
        raw = (data.get('questions') if isinstance(data, dict) else None) or []
        if not isinstance(raw, list):
            raise ValidationError('Game content is malformed')
        return cls(questions=tuple(cls.question_type.from_json(item) for item in raw))

    def to_json(self) -> dict:
        return {'questions': [q.to_json() for q in self.questions]}

    def validate(self) -> None:
        seen = set()
        for question in self.questions:
            question.validate()
            if question.id in seen:
                raise InvalidQuestion(f'Duplicate question id {question.id}')
            seen.add(question.id)

    def index_of(self, question_id) -> Optional[int]:
        for idx, question in enumerate(self.questions):
            if question.id == question_id:
                return idx
        return None

    def find(self, question_id) -> Optional[Question]:
        idx = self.index_of(question_id)
        return None if idx is None else self.questions[idx]

    def with_questions(self, questions):
        return replace(self, questions=tuple(questions))


@dataclass(frozen=True)
class WorditContent(_Content):
    slug = TemplateSlug.WORDIT
    question_type = WorditQuestion


@dataclass(frozen=True)
class CompleteTheSentenceContent(_Content):
    slug = TemplateSlug.COMPLETE_THE_SENTENCE
    question_type = SentenceQuestion


@dataclass(frozen=True)
class CompoundSentencesContent(_Content):
    slug = TemplateSlug.COMPOUND_SENTENCES
    question_type = SentenceQuestion


GameContent = Union[WorditContent, CompleteTheSentenceContent, CompoundSentencesContent]

CONTENT_TYPES = {
    cls.slug: cls for cls in (WorditContent, CompleteTheSentenceContent, CompoundSentencesContent)
}


def content_type(slug):
    try:
        return CONTENT_TYPES[TemplateSlug(slug)]
    except ValueError:
        raise ValidationError(f'Unknown game template {slug!r}') from None


def empty_content(slug) -> GameContent:
    return content_type(slug)()


def load_content(slug, game_json) -> GameContent:
    return content_type(slug).from_json(game_json)


# Clause pairs a new Compound Sentences game starts with when its author
# does not supply any.
COMPOUND_SENTENCES_STARTER = (
    {
        'left_clause': 'I wanted to go for a walk',
        'right_clause': 'it was raining',
        'conjunctions': ['and', 'but', 'so', 'or'],
        'correct_answer': 'but',
        'explanation': "Use 'but' to show contrast.",
    },
    {
        'left_clause': 'She studied hard',
        'right_clause': 'she passed the test',
        'conjunctions': ['and', 'but', 'so', 'or'],
        'correct_answer': 'so',
        'explanation': "Use 'so' to show result.",
    },
    {
        'left_clause': 'He can go to the party',
        'right_clause': 'he finishes his homework',
        'conjunctions': ['and', 'but', 'if', 'or'],
        'correct_answer': 'if',
        'explanation': "Use 'if' to show condition.",
    },
)
