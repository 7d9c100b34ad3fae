from types import SimpleNamespace

import pytest

from wordgames.errors import Forbidden, NotFound, Unauthorized
from wordgames.services.games import documents, ownership, projection, repository
from wordgames.services.games.content import CompleteTheSentenceContent, WorditContent


def _record(game_id='g1', slug='wordit', creator_id='u1', is_published=False):
    return SimpleNamespace(
        id=game_id, template_slug=slug, creator_id=creator_id, is_published=is_published,
        name='Capitals', description='Guess the capital', thumbnail_image='game/wordit/g1/x.png',
        creator=SimpleNamespace(username='author'),
    )


@pytest.fixture()
def games(monkeypatch):
    records = {}
    monkeypatch.setattr(repository, 'find_by_id', lambda game_id: records.get(game_id))
    return records


def test_owner_may_modify(games):
    games['g1'] = _record()
    assert ownership.resolve('g1', 'wordit', ownership.Identity('u1')) is games['g1']


def test_other_user_is_forbidden(games):
    games['g1'] = _record()
    with pytest.raises(Forbidden) as exc:
        ownership.resolve('g1', 'wordit', ownership.Identity('u2'), action='delete')
    assert exc.value.message == 'You do not have permission to delete this game'


def test_super_admin_may_modify_any_game(games):
    games['g1'] = _record()
    admin = ownership.Identity('root', role='SUPER_ADMIN')
    assert admin.is_privileged
    assert ownership.resolve('g1', 'wordit', admin) is games['g1']


def test_anonymous_is_unauthorized(games):
    games['g1'] = _record()
    with pytest.raises(Unauthorized):
        ownership.resolve('g1', 'wordit', None)


def test_wrong_game_type_looks_missing(games):
    games['g1'] = _record(slug='complete-the-sentence')
    with pytest.raises(NotFound):
        ownership.resolve('g1', 'wordit', ownership.Identity('u1'))
    with pytest.raises(NotFound):
        ownership.resolve_published('g1', 'wordit')


def test_missing_game(games):
    with pytest.raises(NotFound):
        ownership.resolve('nope', 'wordit', ownership.Identity('u1'))


def test_unpublished_game_cannot_be_played(games):
    games['g1'] = _record()
    with pytest.raises(Forbidden):
        ownership.resolve_published('g1', 'wordit')
    games['g1'].is_published = True
    assert ownership.resolve_published('g1', 'wordit') is games['g1']


def test_preview_requires_owner(games):
    games['g1'] = _record()
    assert ownership.resolve_preview('g1', 'wordit', ownership.Identity('u1')) is games['g1']
    with pytest.raises(Forbidden):
        ownership.resolve_preview('g1', 'wordit', ownership.Identity('u2'))


def test_projection_hides_answers_and_explanations():
    content = documents.replace_questions(WorditContent(), [
        {'sentence': 'Capital of France?', 'options': ['Paris', 'Lyon'], 'correct_answer': 'Paris',
         'explanation': 'It just is.'},
    ])
    view = projection.project(content)
    question = view['questions'][0]
    assert set(question) == {'id', 'sentence', 'options'}
    assert question['options'] == ['Paris', 'Lyon']


def test_sentence_projection_keeps_clauses_and_conjunctions():
    content = documents.replace_questions(CompleteTheSentenceContent(), [
        {'left_clause': 'It rained', 'right_clause': 'we stayed in', 'conjunctions': ['so', 'but'],
         'explanation': 'Result.'},
    ])
    question = projection.project(content)['questions'][0]
    assert set(question) == {'id', 'left_clause', 'right_clause', 'conjunctions'}


def test_play_payload():
    content = documents.replace_questions(WorditContent(), [
        {'sentence': 's', 'options': ['a', 'b'], 'correct_answer': 'a'},
    ])
    payload = projection.play_payload(_record(is_published=True), content)
    assert payload['creator_name'] == 'author'
    assert payload['total_questions'] == 1
    assert 'correct_answer' not in payload['questions'][0]
    assert 'game_json' not in payload
