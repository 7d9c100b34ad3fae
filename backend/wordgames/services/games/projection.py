"""Player-safe views of game content.

Publication is checked by the ownership gate before these run.
"""

from .content import GameContent


def project_question(question) -> dict:
    view = {}
    for key in question.PLAY_FIELDS:
        value = getattr(question, key)
        view[key] = list(value) if isinstance(value, tuple) else value
    return view


def project(content: GameContent) -> dict:
    return {'questions': [project_question(q) for q in content.questions]}


def play_payload(game, content: GameContent) -> dict:
    payload = {
        'id': game.id,
        'name': game.name,
        'description': game.description,
        'thumbnail_image': game.thumbnail_image,
        'creator_name': game.creator.username if game.creator else None,
        'total_questions': len(content.questions),
    }
    payload.update(project(content))
    return payload
