# =============================================================================
# GIGA WMS v1.0 - SESSIONI E UTENTI ONLINE
# =============================================================================
# Conteggio sessioni attive. Una sessione inizia alla prima richiesta senza
# cookie valido e termina dopo SESSION_TIMEOUT_MINUTES di inattività
# (job APScheduler ogni minuto) o con end_session().
# =============================================================================

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR

from ..config import config


logger = logging.getLogger(__name__)


@dataclass
class SessionInfo:
    """Sessione utente in memoria."""
    session_id: str
    started_at: datetime
    last_seen: datetime
    username: Optional[str] = None


class SessionTracker:
    """
    Registro delle sessioni attive con contatore utenti online.

    Il contatore non scende mai sotto zero. Tutte le modifiche avvengono
    sotto lock.
    """

    def __init__(self, timeout_minutes: Optional[int] = None):
        minutes = timeout_minutes if timeout_minutes is not None else config.SESSION_TIMEOUT_MINUTES
        self.timeout = timedelta(minutes=minutes)
        self._lock = threading.Lock()
        self._sessions: Dict[str, SessionInfo] = {}
        self._online_users = 0
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def online_users(self) -> int:
        with self._lock:
            return self._online_users

    def touch(
        self,
        session_id: Optional[str],
        username: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Tuple[SessionInfo, bool]:
        """
        Registra attività sulla sessione, avviandone una nuova se serve.

        Returns:
            Tupla (sessione, True se appena avviata)
        """
        now = now or datetime.now()
        with self._lock:
            session = self._sessions.get(session_id) if session_id else None
            if session is not None and now - session.last_seen > self.timeout:
                self._end_locked(session.session_id)
                session = None

            is_new = session is None
            if is_new:
                session = SessionInfo(
                    session_id=secrets.token_hex(16),
                    started_at=now,
                    last_seen=now,
                )
                self._sessions[session.session_id] = session
                self._online_users += 1
                logger.debug("Sessione avviata: %s (online: %d)", session.session_id, self._online_users)

            session.last_seen = now
            if username:
                session.username = username
            return session, is_new

    def end_session(self, session_id: str) -> bool:
        """Termina una sessione. False se non esiste."""
        with self._lock:
            return self._end_locked(session_id)

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Termina le sessioni inattive oltre il timeout. Ritorna quante."""
        now = now or datetime.now()
        with self._lock:
            expired = [
                session_id for session_id, session in self._sessions.items()
                if now - session.last_seen > self.timeout
            ]
            for session_id in expired:
                self._end_locked(session_id)
        return len(expired)

    def _end_locked(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        self._online_users = max(0, self._online_users - 1)
        logger.debug("Sessione terminata: %s (online: %d)", session_id, self._online_users)
        return True

    # =========================================================================
    # SCHEDULER
    # =========================================================================

    def start_sweeper(self) -> None:
        """Avvia il job di pulizia sessioni (ogni minuto)."""
        if self._scheduler is not None:
            logger.warning("Session sweeper gia in esecuzione")
            return

        scheduler = BackgroundScheduler(
            job_defaults={
                'coalesce': True,
                'max_instances': 1,
                'misfire_grace_time': 60
            }
        )
        scheduler.add_listener(self._job_listener, EVENT_JOB_ERROR)
        scheduler.add_job(
            self.sweep,
            trigger=IntervalTrigger(minutes=1),
            id='session_sweep',
            name='Session Sweep',
            replace_existing=True
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Session sweeper avviato (timeout: %s)", self.timeout)

    def stop_sweeper(self) -> None:
        """Ferma il job di pulizia sessioni."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Session sweeper fermato")

    @staticmethod
    def _job_listener(event):
        logger.error("Pulizia sessioni fallita: %s", event.exception)


# Singleton instance
session_tracker = SessionTracker()
