import pytest

from wordgames.errors import InvalidQuestion, NotFound, ValidationError
from wordgames.services.games import documents
from wordgames.services.games.content import (
    CompleteTheSentenceContent, TemplateSlug, WorditContent, load_content,
)


def _wordit(n=0):
    content = WorditContent()
    for i in range(n):
        content = documents.add_question(content, {
            'sentence': f'Sentence {i}', 'options': ['a', 'b'], 'correct_answer': 'a',
        })
    return content


def test_add_question_appends_with_fresh_id():
    before = _wordit(3)
    after = documents.add_question(before, {
        'sentence': 'Pick b', 'options': ['a', 'b'], 'correct_answer': 'b',
    })
    assert len(after.questions) == len(before.questions) + 1
    new = after.questions[-1]
    assert before.find(new.id) is None
    assert new.correct_answer == 'b'
    # input value is untouched
    assert len(before.questions) == 3


def test_add_question_rejects_answer_outside_options():
    with pytest.raises(InvalidQuestion):
        documents.add_question(_wordit(), {'sentence': 's', 'options': ['a', 'b'], 'correct_answer': 'c'})


@pytest.mark.parametrize('fields', [
    {'sentence': '', 'options': ['a', 'b'], 'correct_answer': 'a'},
    {'sentence': '   ', 'options': ['a', 'b'], 'correct_answer': 'a'},
    {'sentence': 'x' * 501, 'options': ['a', 'b'], 'correct_answer': 'a'},
    {'sentence': 's', 'options': ['a'], 'correct_answer': 'a'},
    {'sentence': 's', 'options': ['a', 'b', 'c', 'd', 'e', 'f', 'g'], 'correct_answer': 'a'},
    {'sentence': 's', 'options': 'a,b', 'correct_answer': 'a'},
    {'sentence': 's', 'options': ['a', ''], 'correct_answer': 'a'},
    {'sentence': 's', 'options': ['a', 'b'], 'correct_answer': 'a', 'explanation': 'x' * 501},
])
def test_add_question_rejects_malformed_fields(fields):
    with pytest.raises(InvalidQuestion):
        documents.add_question(_wordit(), fields)


def test_update_question_is_partial():
    content = _wordit(2)
    target = content.questions[1]
    updated = documents.update_question(content, target.id, {'sentence': 'Changed', 'explanation': 'Why'})
    q = updated.find(target.id)
    assert q.sentence == 'Changed'
    assert q.explanation == 'Why'
    assert q.options == target.options
    assert q.correct_answer == target.correct_answer
    assert [x.id for x in updated.questions] == [x.id for x in content.questions]


def test_update_question_rejects_breaking_answer_invariant_and_leaves_document():
    content = _wordit(1)
    qid = content.questions[0].id
    with pytest.raises(InvalidQuestion):
        documents.update_question(content, qid, {'options': ['x', 'y']})
    assert content.questions[0].options == ('a', 'b')


def test_update_question_can_change_options_and_answer_together():
    content = _wordit(1)
    qid = content.questions[0].id
    updated = documents.update_question(content, qid, {'options': ['x', 'y'], 'correct_answer': 'y'})
    assert updated.find(qid).correct_answer == 'y'


def test_update_question_ignores_id_in_patch():
    content = _wordit(1)
    qid = content.questions[0].id
    updated = documents.update_question(content, qid, {'id': 'other', 'sentence': 'New'})
    assert updated.questions[0].id == qid


def test_update_unknown_question_is_not_found():
    with pytest.raises(NotFound):
        documents.update_question(_wordit(1), 'missing', {'sentence': 'x'})


def test_delete_question_preserves_order():
    content = _wordit(4)
    ids = [q.id for q in content.questions]
    updated = documents.delete_question(content, ids[1])
    assert [q.id for q in updated.questions] == [ids[0], ids[2], ids[3]]


def test_update_after_delete_is_not_found():
    content = _wordit(2)
    qid = content.questions[0].id
    updated = documents.delete_question(content, qid)
    with pytest.raises(NotFound):
        documents.update_question(updated, qid, {'sentence': 'again'})
    with pytest.raises(NotFound):
        documents.delete_question(updated, qid)


def test_sentence_question_defaults_correct_answer_to_first_conjunction():
    content = documents.add_question(CompleteTheSentenceContent(), {
        'left_clause': 'She studied hard', 'right_clause': 'she passed',
        'conjunctions': ['so', 'but'],
    })
    q = content.questions[0]
    assert q.correct_answer == 'so'
    assert q.completed_sentence == 'She studied hard, so she passed.'


def test_sentence_question_rejects_unknown_conjunction():
    with pytest.raises(InvalidQuestion):
        documents.add_question(CompleteTheSentenceContent(), {
            'left_clause': 'a', 'right_clause': 'b',
            'conjunctions': ['and', 'but'], 'correct_answer': 'because',
        })


def test_replace_questions_assigns_unique_ids():
    content = documents.replace_questions(WorditContent(), [
        {'sentence': 's1', 'options': ['a', 'b'], 'correct_answer': 'a'},
        {'sentence': 's2', 'options': ['a', 'b'], 'correct_answer': 'b'},
    ])
    assert len({q.id for q in content.questions}) == 2


def test_json_round_trip_through_column_format():
    content = _wordit(2)
    stored = content.to_json()
    assert isinstance(stored['questions'][0]['options'], list)
    assert 'explanation' not in stored['questions'][0]
    assert load_content(TemplateSlug.WORDIT, stored) == content


def test_duplicate_ids_in_stored_document_are_rejected():
    stored = {'questions': [
        {'id': 'q1', 'sentence': 's', 'options': ['a', 'b'], 'correct_answer': 'a'},
        {'id': 'q1', 'sentence': 't', 'options': ['a', 'b'], 'correct_answer': 'b'},
    ]}
    content = load_content('wordit', stored)
    with pytest.raises(InvalidQuestion):
        content.validate()


def test_malformed_stored_document():
    with pytest.raises(ValidationError):
        load_content('wordit', {'questions': 'nope'})
    with pytest.raises(ValidationError):
        load_content('wordit', {'questions': [{'sentence': 'no id'}]})
    with pytest.raises(ValidationError):
        load_content('not-a-game', {})
