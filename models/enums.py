from enum import Enum

class MoveType(str, Enum):
    PLACE = "PLACE"
    SWAP = "SWAP"

class StreamStatus(str, Enum):
    INITIALIZED = "Initialized"
    ACTIVE = "Active"
    PAUSED = "Paused"
    FINISHED = "Finished"
