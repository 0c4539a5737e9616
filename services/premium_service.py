"""
Premium status lookup.

An account is premium when it funds the service through a locked, expirable
payment stream that is still active and has started paying out. The stream
list lives in an external service, so a check is fired in the background and
resolved exactly once through a callback.
"""
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
import threading
import time
from typing import Callable, Optional
import uuid

import requests

from errors import ConfigError
from models.enums import StreamStatus

logger = logging.getLogger(__name__)

TICKS_PER_SECOND = 10 ** 9


@dataclass
class Stream:
    id: str
    owner_id: str
    receiver_id: str
    balance: int
    tokens_per_sec: int
    last_action: int  # nanoseconds
    status: StreamStatus
    is_locked: bool = False
    is_expirable: bool = False
    description: Optional[str] = None
    creator_id: Optional[str] = None
    token_account_id: Optional[str] = None
    timestamp_created: int = 0
    cliff: Optional[int] = None
    tokens_total_withdrawn: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Stream":
        status = data["status"]
        # finished streams arrive as {"Finished": {"reason": ...}}
        if isinstance(status, dict):
            status = next(iter(status))
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            receiver_id=data["receiver_id"],
            balance=int(data["balance"]),
            tokens_per_sec=int(data["tokens_per_sec"]),
            last_action=int(data["last_action"]),
            status=StreamStatus(status),
            is_locked=bool(data.get("is_locked", False)),
            is_expirable=bool(data.get("is_expirable", False)),
            description=data.get("description"),
            creator_id=data.get("creator_id"),
            token_account_id=data.get("token_account_id"),
            timestamp_created=int(data.get("timestamp_created", 0)),
            cliff=data.get("cliff"),
            tokens_total_withdrawn=int(data.get("tokens_total_withdrawn", 0)),
        )

    def available_to_withdraw(self, now_ns: int) -> int:
        if self.status != StreamStatus.ACTIVE:
            return 0
        period = now_ns - self.last_action
        return min(self.balance, (period // TICKS_PER_SECOND) * self.tokens_per_sec)


def is_premium(streams, contract_account: str, now_ns: int) -> bool:
    return any(
        stream.is_locked
        and stream.is_expirable
        and stream.status == StreamStatus.ACTIVE
        and stream.receiver_id == contract_account
        and stream.available_to_withdraw(now_ns) != stream.balance
        for stream in streams
    )


class PremiumService:
    def __init__(self, streams_url: Optional[str], contract_account: Optional[str],
                 executor: ThreadPoolExecutor = None, timeout: float = 10, now_ns=None,
                 max_checks: int = 1024):
        self.streams_url = streams_url.rstrip("/") if streams_url else None
        self.contract_account = contract_account
        self.timeout = timeout
        self.now_ns = now_ns or time.time_ns
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="premium")
        self.max_checks = max_checks
        self._checks: "OrderedDict[str, dict]" = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "PremiumService":
        return cls(config.streams_url, config.contract_account)

    def fetch_streams(self, account_id: str) -> list[Stream]:
        response = requests.get(
            f"{self.streams_url}/accounts/{account_id}/outgoing_streams",
            timeout=self.timeout,
        )
        response.raise_for_status()
        return [Stream.from_dict(item) for item in response.json()]

    def check_premium(self, account_id: str,
                      callback: Callable[[Optional[bool], Optional[Exception]], None] = None) -> str:
        """Start a one-shot lookup and return its check id without waiting."""
        if not self.streams_url or not self.contract_account:
            raise ConfigError("No streams account to check premium.")

        check_id = uuid.uuid4().hex
        with self._lock:
            self._checks[check_id] = {"status": "pending", "account": account_id}
            self._evict()

        future = self.executor.submit(self.fetch_streams, account_id)
        future.add_done_callback(lambda f: self._resolve(check_id, account_id, f, callback))
        logger.info("Premium check %s started for %s", check_id, account_id)
        return check_id

    def _resolve(self, check_id: str, account_id: str, future, callback):
        error = future.exception()
        result = None
        if error is None:
            result = is_premium(future.result(), self.contract_account, self.now_ns())
            entry = {"status": "done", "premium": result, "account": account_id}
        else:
            logger.warning("Premium check %s failed: %s", check_id, error)
            entry = {"status": "failed", "error": str(error), "account": account_id}

        with self._lock:
            # an evicted check is not brought back
            if check_id in self._checks:
                self._checks[check_id] = entry
        if callback is not None:
            callback(result, error)

    def status(self, check_id: str):
        with self._lock:
            entry = self._checks.get(check_id)
            return dict(entry) if entry is not None else None

    def _evict(self):
        # caller holds self._lock; resolved checks go first, oldest first
        while len(self._checks) > self.max_checks:
            oldest = next((check_id for check_id, entry in self._checks.items()
                           if entry["status"] != "pending"), None)
            if oldest is None:
                oldest = next(iter(self._checks))
            del self._checks[oldest]
