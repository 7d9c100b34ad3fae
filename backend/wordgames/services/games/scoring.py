from dataclasses import dataclass, field
from typing import List, Optional

from wordgames.errors import NotFound, ValidationError
from .content import GameContent


def answers_match(expected: str, given: str) -> bool:
    """Whole-string comparison, ignoring case only."""
    return expected.lower() == given.lower()


def percent_score(correct: int, total: int) -> int:
    """round(correct / total * 100) with halves rounded up."""
    return (200 * correct + total) // (2 * total)


@dataclass
class QuestionResult:
    question_id: str
    is_correct: bool
    user_answer: str
    correct_answer: str
    explanation: Optional[str] = None

    def to_dict(self):
        data = {
            'question_id': self.question_id,
            'is_correct': self.is_correct,
            'user_answer': self.user_answer,
            'correct_answer': self.correct_answer,
        }
        if self.explanation is not None:
            data['explanation'] = self.explanation
        return data


@dataclass
class SubmissionResult:
    total_questions: int
    correct_answers: int
    score: int
    time_taken: Optional[int] = None
    results: List[QuestionResult] = field(default_factory=list)

    @property
    def wrong_answers(self) -> int:
        return self.total_questions - self.correct_answers

    def to_dict(self):
        return {
            'total_questions': self.total_questions,
            'correct_answers': self.correct_answers,
            'wrong_answers': self.wrong_answers,
            'score': self.score,
            'time_taken': self.time_taken,
            'results': [r.to_dict() for r in self.results],
        }


def check_one(content: GameContent, question_id, answer: str) -> dict:
    """Check a single answer.

    The correct answer is only disclosed when the player got it wrong; the
    explanation is returned either way.
    """
    question = content.find(question_id)
    if question is None:
        raise NotFound('Question not found')
    is_correct = answers_match(question.correct_answer, answer)
    result = {'question_id': question.id, 'is_correct': is_correct}
    if not is_correct:
        result['correct_answer'] = question.correct_answer
    if question.explanation is not None:
        result['explanation'] = question.explanation
    return result


def submit_all(content: GameContent, answers, time_taken: Optional[int] = None) -> SubmissionResult:
    """Score a full submission against every question in ``content``.

    ``answers`` is a sequence of ``{'question_id', 'answer'}`` dicts. The
    score's denominator is the document's question count, so unanswered
    questions count as wrong.
    """
    total = len(content.questions)
    if total == 0:
        raise ValidationError('Cannot score a game without questions')

    correct = 0
    seen = set()
    results = []
    for answer in answers:
        question = content.find(answer['question_id'])
        if question is None:
            # Unknown ids are skipped, not rejected, and do not change the denominator.
            continue
        if question.id in seen:
            continue
        seen.add(question.id)
        is_correct = answers_match(question.correct_answer, answer['answer'])
        if is_correct:
            correct += 1
        results.append(QuestionResult(
            question_id=question.id,
            is_correct=is_correct,
            user_answer=answer['answer'],
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        ))

    return SubmissionResult(
        total_questions=total,
        correct_answers=correct,
        score=percent_score(correct, total),
        time_taken=time_taken,
        results=results,
    )


def _rank_key(entry: dict):
    time_taken = entry.get('time_taken')
    return (
        -entry['score'],
        time_taken is None,
        time_taken if time_taken is not None else 0,
        entry.get('created_at') or '',
    )


def rank_leaderboard(entries) -> List[dict]:
    """Order entries by score desc, then time asc (missing times last), and number them from 1."""
    ranked = []
    for position, entry in enumerate(sorted(entries, key=_rank_key), start=1):
        row = dict(entry)
        row['rank'] = position
        ranked.append(row)
    return ranked
