from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
import json

from wordgames.errors import ValidationError
from wordgames.services.games import service
from wordgames.services.games.content import TemplateSlug
from wordgames.services.games.ownership import Identity

MAX_QUESTIONS_PER_GAME = 50
MAX_ANSWER_LENGTH = 100
# leaderboard.time_taken is a 32-bit INTEGER column
MAX_TIME_TAKEN = 2 ** 31 - 1


def _identity():
    if current_user.is_authenticated:
        return Identity(user_id=current_user.id, role=current_user.role)
    return None


def _payload() -> dict:
    """JSON body, or the form fields of a multipart request."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
    else:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError('Request body must be an object')
    return data


def _strip(value):
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return [_strip(v) for v in value]
    if isinstance(value, dict):
        return {k: _strip(v) for k, v in value.items()}
    return value


def _text(value, label: str, max_len: int, min_len: int = 1) -> str:
    if not isinstance(value, str):
        raise ValidationError(f'{label} must be a string')
    value = value.strip()
    if len(value) < min_len:
        raise ValidationError(f'{label} is required')
    if len(value) > max_len:
        raise ValidationError(f'{label} must be at most {max_len} characters')
    return value


def _flag(value, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', '1', 'false', '0'):
        return value.lower() in ('true', '1')
    raise ValidationError(f'{label} must be a boolean')


def _question_list(value) -> list:
    # Multipart forms carry the question list as a JSON string
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError('questions must be valid JSON') from None
    if not isinstance(value, list) or not all(isinstance(q, dict) for q in value):
        raise ValidationError('questions must be a list of objects')
    if not (1 <= len(value) <= MAX_QUESTIONS_PER_GAME):
        raise ValidationError(f'questions must have between 1 and {MAX_QUESTIONS_PER_GAME} entries')
    return _strip(value)


def _game_fields(data: dict, creating: bool = False) -> dict:
    fields = {}
    # 'name' is accepted as an alias of 'title'
    title = data.get('title') if data.get('title') is not None else data.get('name')
    if title is not None:
        fields['title'] = _text(title, 'title', 128)
    elif creating:
        raise ValidationError('title is required')
    if data.get('description') is not None:
        fields['description'] = _text(data['description'], 'description', 256, min_len=0)
    if data.get('is_published') is not None:
        fields['is_published'] = _flag(data['is_published'], 'is_published')
    if data.get('questions') is not None:
        fields['questions'] = _question_list(data['questions'])
    return fields


def _answer(item) -> dict:
    if not isinstance(item, dict):
        raise ValidationError('Each answer must be an object')
    question_id = item.get('question_id')
    if not isinstance(question_id, str) or not question_id:
        raise ValidationError('question_id is required')
    return {
        'question_id': question_id,
        'answer': _text(item.get('answer'), 'answer', MAX_ANSWER_LENGTH),
    }


def _time_taken(value):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not (0 <= value <= MAX_TIME_TAKEN):
        raise ValidationError('time_taken must be a non-negative integer')
    return value


def make_game_blueprint(slug) -> Blueprint:
    """Build the authoring and play routes for one game template."""
    slug = TemplateSlug(slug)
    games = Blueprint(slug.value.replace('-', '_'), __name__)

    # ---- Game management ----

    @games.route('', methods=['POST'])
    @login_required
    def create_game():
        fields = _game_fields(_payload(), creating=True)
        game = service.create_game(slug, fields, request.files.get('thumbnail'), _identity())
        return jsonify({'message': 'Game created successfully', 'data': game}), 201

    @games.route('', methods=['GET'])
    @login_required
    def list_games():
        return jsonify({'message': 'Games retrieved successfully', 'data': service.list_user_games(slug, _identity())})

    @games.route('/<string:game_id>', methods=['GET'])
    @login_required
    def get_game(game_id):
        return jsonify({'message': 'Game retrieved successfully', 'data': service.get_game_detail(slug, game_id, _identity())})

    @games.route('/<string:game_id>', methods=['PATCH', 'PUT'])
    @login_required
    def update_game(game_id):
        fields = _game_fields(_payload())
        game = service.update_game(slug, game_id, fields, request.files.get('thumbnail'), _identity())
        return jsonify({'message': 'Game updated successfully', 'data': game})

    @games.route('/<string:game_id>', methods=['DELETE'])
    @login_required
    def delete_game(game_id):
        return jsonify({'message': 'Game deleted successfully', 'data': service.delete_game(slug, game_id, _identity())})

    @games.route('/<string:game_id>/publish', methods=['PATCH'])
    @login_required
    def publish_game(game_id):
        data = _payload()
        is_published = _flag(data['is_published'], 'is_published') if 'is_published' in data else True
        result = service.set_published(slug, game_id, is_published, _identity())
        message = 'Game published successfully' if is_published else 'Game unpublished successfully'
        return jsonify({'message': message, 'data': result})

    @games.route('/<string:game_id>/unpublish', methods=['PATCH'])
    @login_required
    def unpublish_game(game_id):
        result = service.unpublish_game(slug, game_id, _identity())
        return jsonify({'message': 'Game unpublished successfully', 'data': result})

    # ---- Question management ----

    @games.route('/<string:game_id>/questions', methods=['GET'])
    @login_required
    def list_questions(game_id):
        return jsonify({'message': 'Questions retrieved successfully', 'data': service.list_questions(slug, game_id, _identity())})

    @games.route('/<string:game_id>/questions', methods=['POST'])
    @login_required
    def add_question(game_id):
        question = service.add_question(slug, game_id, _strip(_payload()), _identity())
        return jsonify({'message': 'Question added successfully', 'data': question}), 201

    @games.route('/<string:game_id>/questions/<string:question_id>', methods=['GET'])
    @login_required
    def get_question(game_id, question_id):
        question = service.get_question(slug, game_id, question_id, _identity())
        return jsonify({'message': 'Question retrieved successfully', 'data': question})

    @games.route('/<string:game_id>/questions/<string:question_id>', methods=['PATCH', 'PUT'])
    @login_required
    def update_question(game_id, question_id):
        question = service.update_question(slug, game_id, question_id, _strip(_payload()), _identity())
        return jsonify({'message': 'Question updated successfully', 'data': question})

    @games.route('/<string:game_id>/questions/<string:question_id>', methods=['DELETE'])
    @login_required
    def delete_question(game_id, question_id):
        result = service.delete_question(slug, game_id, question_id, _identity())
        return jsonify({'message': 'Question deleted successfully', 'data': result})

    # ---- Play ----

    @games.route('/<string:game_id>/play/public', methods=['GET'])
    def play_public(game_id):
        return jsonify({'message': 'Game loaded successfully', 'data': service.get_game_for_play(slug, game_id)})

    @games.route('/<string:game_id>/play/private', methods=['GET'])
    def play_private(game_id):
        # No login_required: an anonymous caller gets the service's 401
        return jsonify({'message': 'Game loaded successfully', 'data': service.get_game_preview(slug, game_id, _identity())})

    @games.route('/<string:game_id>/check', methods=['POST'])
    def check_answer(game_id):
        answer = _answer(_payload())
        result = service.check_answer(slug, game_id, answer['question_id'], answer['answer'])
        return jsonify({'message': 'Answer checked', 'data': result})

    @games.route('/<string:game_id>/submit', methods=['POST'])
    def submit_answers(game_id):
        data = _payload()
        answers = data.get('answers')
        if not isinstance(answers, list) or not answers:
            raise ValidationError('answers must be a non-empty list')
        result = service.submit_answers(
            slug, game_id,
            [_answer(a) for a in answers],
            _time_taken(data.get('time_taken')),
            _identity(),
        )
        return jsonify({'message': 'Answers submitted successfully', 'data': result})

    @games.route('/<string:game_id>/leaderboard', methods=['GET'])
    def leaderboard(game_id):
        results = service.get_game_results(slug, game_id, _identity())
        return jsonify({'message': 'Results retrieved successfully', 'data': results})

    return games
