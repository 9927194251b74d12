"""Exceptions for the debate judge"""


class DebateError(Exception):
    """Base exception for debate lifecycle errors"""
    pass


class DebateNotFoundError(DebateError):
    """Raised when the debate does not exist"""

    def __init__(self, debate_id: str):
        super().__init__(f"Debate not found: {debate_id}")
        self.debate_id = debate_id


class DebateNotActiveError(DebateError):
    """Raised when an operation needs a debate in another status"""

    def __init__(self, debate_id: str, status: str):
        super().__init__(f"Debate {debate_id} is {status}")
        self.debate_id = debate_id
        self.status = status


class InvalidParticipantError(DebateError):
    """Raised when a user is not allowed to act on the debate"""
    pass


class StoreError(DebateError):
    """Raised by a store when a read or write fails"""
    pass


class PersistenceError(DebateError):
    """Raised when a write failed and no fallback write succeeded"""
    pass
