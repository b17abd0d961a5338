"""
Session Stores

Persistence boundary for game sessions. Stores hand out and accept
detached copies, so a session read from a store can be mutated freely and
nothing changes until it is saved back.
"""

from typing import Dict, List, Optional
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..models.game import GameSession


class SessionStore:
    """Interface implemented by all session stores."""

    def insert(self, session: GameSession) -> None:
        raise NotImplementedError

    def get(self, session_id: str) -> Optional[GameSession]:
        raise NotImplementedError

    def save(self, session: GameSession) -> None:
        raise NotImplementedError

    def delete(self, session_id: str) -> bool:
        raise NotImplementedError

    def list_ids(self) -> List[str]:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Keeps sessions in a process-local dict."""

    def __init__(self):
        self.sessions: Dict[str, GameSession] = {}

    def insert(self, session: GameSession) -> None:
        if session.id in self.sessions:
            raise KeyError(f"Game {session.id} already exists")
        self.sessions[session.id] = session.copy()

    def get(self, session_id: str) -> Optional[GameSession]:
        session = self.sessions.get(session_id)
        return session.copy() if session else None

    def save(self, session: GameSession) -> None:
        if session.id not in self.sessions:
            raise KeyError(f"Game {session.id} does not exist")
        self.sessions[session.id] = session.copy()

    def delete(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def list_ids(self) -> List[str]:
        return list(self.sessions)


class MongoSessionStore(SessionStore):
    """
    Stores sessions as documents in MongoDB.

    Each document is the full snapshot with the word revealed, keyed by the
    session id.
    """

    def __init__(self, mongo_uri: str = None, db_name: str = 'quizwordz', collection=None):
        """
        Args:
            mongo_uri: MongoDB connection string
            db_name: Database holding the games collection
            collection: Pre-built collection object; skips connecting
        """
        self.client = None
        if collection is None:
            self.client = MongoClient(mongo_uri, server_api=ServerApi('1'))
            # Fail fast on a bad URI
            self.client.admin.command('ping')
            collection = self.client[db_name].games
            collection.create_index("status")
        self.collection = collection

    @staticmethod
    def _to_document(session: GameSession) -> Dict:
        document = session.to_dict(reveal_word=True)
        document['_id'] = session.id
        return document

    @staticmethod
    def _from_document(document: Dict) -> GameSession:
        document = dict(document)
        document.pop('_id', None)
        return GameSession.from_dict(document)

    def insert(self, session: GameSession) -> None:
        self.collection.insert_one(self._to_document(session))

    def get(self, session_id: str) -> Optional[GameSession]:
        document = self.collection.find_one({'_id': session_id})
        return self._from_document(document) if document else None

    def save(self, session: GameSession) -> None:
        result = self.collection.replace_one({'_id': session.id}, self._to_document(session))
        if result.matched_count == 0:
            raise KeyError(f"Game {session.id} does not exist")

    def delete(self, session_id: str) -> bool:
        return self.collection.delete_one({'_id': session_id}).deleted_count > 0

    def list_ids(self) -> List[str]:
        return [doc['_id'] for doc in self.collection.find({}, {'_id': 1})]


def create_store(backend: str = 'memory', mongo_uri: str = None, db_name: str = 'quizwordz') -> SessionStore:
    """Build the session store named by configuration."""
    if backend == 'memory':
        return InMemorySessionStore()
    if backend == 'mongo':
        if not mongo_uri:
            raise ValueError("MONGO_URI is required for the mongo store")
        return MongoSessionStore(mongo_uri, db_name)
    raise ValueError(f"Unknown store backend: {backend}")
