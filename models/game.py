# models/game.py
import base64

from sqlalchemy import BigInteger, Boolean, Column, Integer, LargeBinary, String
from database import Base


class GameRecord(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=False)  # game index, 0-based
    first_player = Column(String, nullable=False)
    second_player = Column(String, nullable=False)
    turn = Column(Integer, nullable=False, default=0)
    size = Column(Integer, nullable=False, default=11)
    field = Column(LargeBinary, nullable=False)
    labels = Column(LargeBinary, nullable=False)  # connectivity labels, never exposed
    current_block_height = Column(BigInteger, nullable=False, default=0)
    prev_block_height = Column(BigInteger, nullable=False, default=0)
    is_finished = Column(Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            "index": self.id,
            "first_player": self.first_player,
            "second_player": self.second_player,
            "turn": self.turn,
            "board": {
                "size": self.size,
                "field": base64.b64encode(bytes(self.field)).decode("ascii"),
            },
            "current_block_height": self.current_block_height,
            "prev_block_height": self.prev_block_height,
            "is_finished": self.is_finished,
        }
