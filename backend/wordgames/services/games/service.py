"""Game operations for every template type.

Blueprints call these with the template slug they serve plus the
requester's ``Identity`` (or ``None`` for anonymous players). Each function
validates first and writes last, so a raised error never leaves a half
applied change behind.
"""

import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError

from wordgames import storage
from wordgames.errors import Conflict, NotFound, Unauthorized, ValidationError
from wordgames.models import Game
from wordgames.socketio_events import notify_leaderboard
from . import documents, ownership, projection, repository, scoring
from .content import (
    COMPOUND_SENTENCES_STARTER, SentenceQuestion, TemplateSlug, empty_content, load_content,
)


def _slug(slug) -> str:
    return TemplateSlug(slug).value


def _content(game: Game):
    return load_content(game.template_slug, game.game_json)


def _store(game: Game, content) -> None:
    game.game_json = content.to_json()
    repository.save(game)


def _question_view(question) -> dict:
    data = question.to_json()
    if isinstance(question, SentenceQuestion):
        data['completed_sentence'] = question.completed_sentence
    return data


def _summary(game: Game, content) -> dict:
    data = game.to_dict()
    data['question_count'] = len(content.questions)
    return data


def _check_publishable(content) -> None:
    if not content.questions:
        raise ValidationError('Cannot publish a game without questions')


def _folder(slug, game_id) -> str:
    return f'game/{_slug(slug)}/{game_id}'


# ---- Game management ----

def create_game(slug, data: dict, thumbnail, identity) -> dict:
    if identity is None:
        raise Unauthorized()
    slug = _slug(slug)
    title = data['title']
    if repository.name_taken(title):
        raise Conflict('Game with this name already exists')

    template = repository.find_template(slug)
    if template is None:
        raise NotFound('Game template not found. Please seed the database first.')

    questions = data.get('questions')
    if questions:
        content = documents.replace_questions(empty_content(slug), questions)
    elif slug == TemplateSlug.COMPOUND_SENTENCES.value:
        content = documents.replace_questions(empty_content(slug), COMPOUND_SENTENCES_STARTER)
    else:
        content = empty_content(slug)

    is_published = bool(data.get('is_published', False))
    if is_published:
        _check_publishable(content)
    if thumbnail is None:
        raise ValidationError('Thumbnail is required')
    storage.check_image(thumbnail)

    game_id = str(uuid.uuid4())
    thumbnail_path = storage.upload(_folder(slug, game_id), thumbnail)
    game = Game(
        id=game_id,
        game_template_id=template.id,
        creator_id=identity.user_id,
        name=title,
        description=data.get('description'),
        thumbnail_image=thumbnail_path,
        is_published=is_published,
        game_json=content.to_json(),
    )
    try:
        repository.save(game)
    except IntegrityError:
        # Another request took the name after name_taken() ran
        storage.remove_folder(_folder(slug, game_id))
        raise Conflict('Game with this name already exists') from None
    except Exception:
        storage.remove_folder(_folder(slug, game_id))
        raise
    current_app.logger.info(f"[game-create] game={game.id} slug={slug} user={identity.user_id} questions={len(content.questions)}")
    return _summary(game, content)


def list_user_games(slug, identity) -> list:
    if identity is None:
        raise Unauthorized()
    games = repository.list_by_owner(_slug(slug), identity.user_id)
    return [_summary(game, _content(game)) for game in games]


def get_game_detail(slug, game_id, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity, action='view')
    content = _content(game)
    data = _summary(game, content)
    data['questions'] = [_question_view(q) for q in content.questions]
    return data


def update_game(slug, game_id, data: dict, thumbnail, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity)
    content = _content(game)

    title = data.get('title')
    if title and title != game.name and repository.name_taken(title, exclude_id=game.id):
        raise Conflict('Game name is already used')

    if data.get('questions') is not None:
        content = documents.replace_questions(content, data['questions'])
    if data.get('is_published'):
        _check_publishable(content)
    if thumbnail is not None:
        storage.check_image(thumbnail)

    if title:
        game.name = title
    if 'description' in data:
        game.description = data['description']
    if 'is_published' in data:
        game.is_published = bool(data['is_published'])
    game.game_json = content.to_json()

    old_thumbnail = new_thumbnail = None
    if thumbnail is not None:
        old_thumbnail = game.thumbnail_image
        new_thumbnail = storage.upload(_folder(slug, game.id), thumbnail)
        game.thumbnail_image = new_thumbnail
    try:
        repository.save(game)
    except IntegrityError:
        if new_thumbnail:
            storage.remove(new_thumbnail)
        raise Conflict('Game name is already used') from None
    except Exception:
        if new_thumbnail:
            storage.remove(new_thumbnail)
        raise
    if old_thumbnail:
        # The update is already committed; a leftover file is only logged
        try:
            storage.remove(old_thumbnail)
        except (ValidationError, OSError) as exc:
            current_app.logger.warning(f"[game-update] game={game.id} could not remove {old_thumbnail!r}: {exc}")
    current_app.logger.info(f"[game-update] game={game.id} revision={game.revision} fields={sorted(data)}")
    return _summary(game, content)


def delete_game(slug, game_id, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity, action='delete')
    folder = _folder(slug, game.id)
    repository.delete(game)
    storage.remove_folder(folder)
    current_app.logger.info(f"[game-delete] game={game_id}")
    return {'id': game_id}


def set_published(slug, game_id, is_published: bool, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity)
    if is_published:
        _check_publishable(_content(game))
    game.is_published = is_published
    repository.save(game)
    current_app.logger.info(f"[game-publish] game={game.id} is_published={is_published}")
    return {'id': game.id, 'is_published': game.is_published}


def publish_game(slug, game_id, identity) -> dict:
    return set_published(slug, game_id, True, identity)


def unpublish_game(slug, game_id, identity) -> dict:
    return set_published(slug, game_id, False, identity)


# ---- Question management ----

def list_questions(slug, game_id, identity) -> list:
    game = ownership.resolve(game_id, slug, identity, action='view')
    return [_question_view(q) for q in _content(game).questions]


def get_question(slug, game_id, question_id, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity, action='view')
    return _question_view(documents.find_question(_content(game), question_id))


def add_question(slug, game_id, fields: dict, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity)
    content = documents.add_question(_content(game), fields)
    _store(game, content)
    question = content.questions[-1]
    current_app.logger.info(f"[question-add] game={game.id} question={question.id} count={len(content.questions)}")
    return _question_view(question)


def update_question(slug, game_id, question_id, patch: dict, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity)
    content = documents.update_question(_content(game), question_id, patch)
    _store(game, content)
    current_app.logger.info(f"[question-update] game={game.id} question={question_id} fields={sorted(patch)}")
    return _question_view(content.find(question_id))


def delete_question(slug, game_id, question_id, identity) -> dict:
    game = ownership.resolve(game_id, slug, identity)
    content = documents.delete_question(_content(game), question_id)
    _store(game, content)
    current_app.logger.info(f"[question-delete] game={game.id} question={question_id} count={len(content.questions)}")
    return {'id': question_id}


# ---- Play ----

def get_game_for_play(slug, game_id) -> dict:
    game = ownership.resolve_published(game_id, slug)
    return projection.play_payload(game, _content(game))


def get_game_preview(slug, game_id, identity) -> dict:
    game = ownership.resolve_preview(game_id, slug, identity)
    return projection.play_payload(game, _content(game))


def check_answer(slug, game_id, question_id, answer: str) -> dict:
    game = ownership.resolve_published(game_id, slug)
    content = _content(game)
    result = scoring.check_one(content, question_id, answer)
    question = content.find(question_id)
    if isinstance(question, SentenceQuestion):
        result['completed_sentence'] = question.completed_sentence
    return result


def submit_answers(slug, game_id, answers, time_taken=None, identity=None) -> dict:
    game = ownership.resolve_published(game_id, slug)
    result = scoring.submit_all(_content(game), answers, time_taken)
    user_id = identity.user_id if identity else None
    entry = repository.record_play(game.id, user_id, result.score, time_taken)
    current_app.logger.info(
        f"[submit] game={game.id} user={user_id} score={result.score} "
        f"correct={result.correct_answers}/{result.total_questions}"
    )
    notify_leaderboard(game.id, entry.to_dict())
    return result.to_dict()


def get_game_results(slug, game_id, identity=None) -> dict:
    game = ownership.resolve_published(game_id, slug)
    limit = int(current_app.config.get('LEADERBOARD_LIMIT', 50))
    rows = repository.list_leaderboard(game.id, limit)
    leaderboard = scoring.rank_leaderboard([row.to_dict() for row in rows])

    user_results = None
    if identity is not None:
        user_limit = int(current_app.config.get('USER_RESULTS_LIMIT', 10))
        user_results = [
            row.to_dict(include_user=False)
            for row in repository.list_user_results(game.id, identity.user_id, user_limit)
        ]
    return {'leaderboard': leaderboard, 'user_results': user_results}
