from sqlalchemy.orm import Session

from models.game import GameRecord

# games.id is a 32-bit INTEGER on PostgreSQL
MAX_INDEX = 2 ** 31 - 1


class GameStore:
    """Append-only list of game records, addressed by a 0-based index."""

    def __init__(self, db: Session):
        self.db = db

    def __len__(self):
        return self.db.query(GameRecord).count()

    def push(self, record: GameRecord) -> int:
        index = len(self)
        record.id = index
        self.db.add(record)
        self.db.commit()
        return index

    def get(self, index: int, for_update: bool = False):
        if not 0 <= index <= MAX_INDEX:
            return None
        if not for_update:
            return self.db.get(GameRecord, index)
        return (
            self.db.query(GameRecord)
            .filter_by(id=index)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def replace(self, index: int, record: GameRecord):
        record.id = index
        self.db.merge(record)
        self.db.commit()
