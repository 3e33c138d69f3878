"""Live subscriptions behind one tournament view.

A view moves through IDLE -> TOURNAMENT -> MATCH. Entering TOURNAMENT
subscribes to the tournament record; entering MATCH adds a subscription to
that match's scores. Any change of tournament or match, and ``close``,
disposes every subscription it replaces before subscribing again, so each
registration is disposed exactly once.
"""
from enum import Enum
from typing import Any, Callable, Optional

from warrior_cup.services.kvstore import Disposer, KeyValueStore, kv_store, scores_path, tournament_path


class SyncState(str, Enum):
    IDLE = 'idle'
    TOURNAMENT = 'tournament'
    MATCH = 'match'


class SyncSession:

    def __init__(self, on_tournament: Callable[[dict], Any],
                 on_scores: Callable[[str, dict], Any],
                 store: Optional[KeyValueStore] = None):
        self._store = store or kv_store
        self._on_tournament = on_tournament
        self._on_scores = on_scores
        self.tournament_id: Optional[str] = None
        self.match_id: Optional[str] = None
        self._tournament_disposer: Optional[Disposer] = None
        self._scores_disposer: Optional[Disposer] = None

    @property
    def state(self) -> SyncState:
        if self._scores_disposer is not None:
            return SyncState.MATCH
        if self._tournament_disposer is not None:
            return SyncState.TOURNAMENT
        return SyncState.IDLE

    def open_tournament(self, tournament_id: str) -> None:
        tournament_id = tournament_id.upper()
        if self.tournament_id == tournament_id and self._tournament_disposer is not None:
            return
        self.close()
        self.tournament_id = tournament_id

        def deliver(value):
            # A missing record never wipes the view; last write wins otherwise
            if value:
                self._on_tournament(value)

        self._tournament_disposer = self._store.subscribe(tournament_path(tournament_id), deliver)

    def open_match(self, match_id: str) -> None:
        if self.tournament_id is None:
            raise RuntimeError('open a tournament before opening a match')
        if self.match_id == match_id and self._scores_disposer is not None:
            return
        self.close_match()
        self.match_id = match_id

        def deliver(value):
            if value:
                self._on_scores(match_id, value)

        self._scores_disposer = self._store.subscribe(scores_path(self.tournament_id, match_id), deliver)

    def close_match(self) -> None:
        disposer, self._scores_disposer = self._scores_disposer, None
        self.match_id = None
        if disposer is not None:
            disposer()

    def close(self) -> None:
        self.close_match()
        disposer, self._tournament_disposer = self._tournament_disposer, None
        self.tournament_id = None
        if disposer is not None:
            disposer()
