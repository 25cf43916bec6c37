"""
Watch-list use cases (user_doramas table).

The device copy of the list is passed in explicitly (`prior`) instead of being
read from a hidden cache; later progress from it is written back to storage.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.phone import normalize_phone, phone_variants
from app.domain.watchlist import (
    VALID_LISTS, Dorama, WatchLists, is_temporary_id, list_type_to_db_status,
    reconcile_progress, status_to_db,
)
from app.infrastructure.db.models import UserDoramaModel

logger = logging.getLogger(__name__)


class WatchListValidationError(ValueError):
    pass


def _to_int_id(dorama_id: str) -> int | None:
    try:
        return int(dorama_id)
    except (TypeError, ValueError):
        return None


def get_user_doramas(db: Session, phone_number: str, prior: list[Dorama] | None = None) -> WatchLists:
    """
    Stored lists merged with the device copy.

    Storage failure or empty storage returns the prior lists unchanged.
    """
    prior = prior or []
    variants = phone_variants(phone_number)
    if not variants:
        return WatchLists.split(prior)

    try:
        rows = (
            db.query(UserDoramaModel)
            .filter(UserDoramaModel.phone_number.in_(variants))
            .order_by(UserDoramaModel.id)
            .all()
        )
    except SQLAlchemyError:
        logger.warning("Watch-list store unavailable, using device copy", exc_info=True)
        db.rollback()
        return WatchLists.split(prior)

    if not rows:
        return WatchLists.split(prior)

    stored = [Dorama.from_mapping(r.to_record()) for r in rows]
    merged, healed = reconcile_progress(stored, prior)

    if healed:
        by_id = {str(r.id): r for r in rows}
        for item in healed:
            row = by_id[item.id]
            logger.info(
                "Progress restored for %r: ep %d season %d",
                item.title, item.episodes_watched, item.season,
            )
            row.episodes_watched = item.episodes_watched
            row.season = item.season
        db.commit()

    return WatchLists.split(merged)


class AddDoramaUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, list_type: str, dorama: Dorama) -> Dorama:
        if list_type not in VALID_LISTS:
            raise WatchListValidationError(f"Lista inválida: {list_type}")
        title = dorama.title.strip()
        if not title:
            raise WatchListValidationError("Título não pode ser vazio")
        phone = normalize_phone(phone_number)
        if not phone:
            raise WatchListValidationError("Telefone inválido")

        row = UserDoramaModel(
            phone_number=phone,
            title=title,
            genre=dorama.genre or "Dorama",
            thumbnail=dorama.thumbnail,
            status=list_type_to_db_status(list_type),
            list_type=list_type,
            episodes_watched=dorama.episodes_watched or 1,
            total_episodes=dorama.total_episodes or 16,
            season=dorama.season or 1,
            rating=dorama.rating or 0,
        )
        self.db.add(row)
        self.db.flush()
        self.db.commit()
        return Dorama.from_mapping(row.to_record())


class UpdateDoramaUseCase:
    """Returns False when the row is gone. Temporary ids are a no-op."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, dorama: Dorama) -> bool:
        if is_temporary_id(dorama.id):
            logger.warning("Update skipped for unsaved item %r", dorama.title)
            return True

        row = self._owned_row(phone_number, dorama.id)
        if row is None:
            return False

        row.episodes_watched = dorama.episodes_watched
        row.season = dorama.season
        row.total_episodes = dorama.total_episodes
        row.rating = dorama.rating
        row.status = status_to_db(dorama.status)
        self.db.commit()
        return True

    def _owned_row(self, phone_number: str, dorama_id: str) -> UserDoramaModel | None:
        row_id = _to_int_id(dorama_id)
        if row_id is None:
            return None
        return self.db.query(UserDoramaModel).filter(
            UserDoramaModel.id == row_id,
            UserDoramaModel.phone_number.in_(phone_variants(phone_number)),
        ).first()


class RemoveDoramaUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, dorama_id: str) -> bool:
        if is_temporary_id(dorama_id):
            return True
        row_id = _to_int_id(dorama_id)
        if row_id is None:
            return False
        row = self.db.query(UserDoramaModel).filter(
            UserDoramaModel.id == row_id,
            UserDoramaModel.phone_number.in_(phone_variants(phone_number)),
        ).first()
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
