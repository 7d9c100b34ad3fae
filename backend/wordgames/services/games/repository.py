"""Database access for games and leaderboards.

Storage errors are not caught here beyond rolling back the session; they
reach the caller unchanged.
"""

from typing import List, Optional

from sqlalchemy import update

from wordgames import db
from wordgames.models import Game, GameTemplate, Leaderboard, User
from .content import TEMPLATE_NAMES


def find_by_id(game_id) -> Optional[Game]:
    return db.session.get(Game, game_id)


def find_template(slug) -> Optional[GameTemplate]:
    return GameTemplate.query.filter_by(slug=slug).first()


def ensure_templates() -> int:
    """Create any missing game template rows. Returns how many were added."""
    existing = {t.slug for t in GameTemplate.query.all()}
    created = 0
    for slug, name in TEMPLATE_NAMES.items():
        if slug.value in existing:
            continue
        db.session.add(GameTemplate(slug=slug.value, name=name))
        created += 1
    db.session.commit()
    return created


def name_taken(name: str, exclude_id=None) -> bool:
    query = Game.query.filter_by(name=name)
    if exclude_id is not None:
        query = query.filter(Game.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def list_by_owner(slug, user_id) -> List[Game]:
    return (
        Game.query.join(GameTemplate)
        .filter(GameTemplate.slug == slug, Game.creator_id == user_id)
        .order_by(Game.created_at.desc())
        .all()
    )


def save(game: Game) -> Game:
    db.session.add(game)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return game


def delete(game: Game) -> None:
    db.session.delete(game)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def record_play(game_id, user_id, score: int, time_taken) -> Leaderboard:
    """Count one completed play and add its leaderboard row in a single commit."""
    entry = Leaderboard(game_id=game_id, user_id=user_id, score=score, time_taken=time_taken)
    try:
        db.session.execute(
            update(Game)
            .where(Game.id == game_id)
            .values(total_played=Game.total_played + 1)
            .execution_options(synchronize_session=False)
        )
        db.session.add(entry)
        if user_id:
            db.session.execute(
                update(User)
                .where(User.id == user_id)
                .values(total_game_played=User.total_game_played + 1)
                .execution_options(synchronize_session=False)
            )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return entry


def list_leaderboard(game_id, limit: int) -> List[Leaderboard]:
    return (
        Leaderboard.query.filter_by(game_id=game_id)
        .order_by(
            Leaderboard.score.desc(),
            Leaderboard.time_taken.asc().nulls_last(),
            Leaderboard.created_at.asc(),
        )
        .limit(limit)
        .all()
    )


def list_user_results(game_id, user_id, limit: int) -> List[Leaderboard]:
    return (
        Leaderboard.query.filter_by(game_id=game_id, user_id=user_id)
        .order_by(Leaderboard.created_at.desc())
        .limit(limit)
        .all()
    )
