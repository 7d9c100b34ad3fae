"""Access checks for game records.

A record whose template does not match the game type being served is
reported exactly like a missing record, so one game type's endpoints never
reveal that another type's game exists.
"""

from dataclasses import dataclass

from wordgames.errors import Forbidden, NotFound, Unauthorized
from wordgames.models import ROLE_SUPER_ADMIN, ROLE_USER
from .content import TemplateSlug
from . import repository


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str = ROLE_USER

    @property
    def is_privileged(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN


def _find(game_id, expected_slug):
    game = repository.find_by_id(game_id)
    if game is None or game.template_slug != TemplateSlug(expected_slug).value:
        raise NotFound('Game not found')
    return game


def resolve(game_id, expected_slug, identity, action='modify'):
    """Load a game the requester owns, or any game for a super admin."""
    game = _find(game_id, expected_slug)
    if identity is None:
        raise Unauthorized()
    if not identity.is_privileged and identity.user_id != game.creator_id:
        raise Forbidden(f'You do not have permission to {action} this game')
    return game


def resolve_preview(game_id, expected_slug, identity):
    return resolve(game_id, expected_slug, identity, action='preview')


def resolve_published(game_id, expected_slug):
    game = _find(game_id, expected_slug)
    if not game.is_published:
        raise Forbidden('This game is not published yet')
    return game
