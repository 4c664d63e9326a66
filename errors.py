"""
Error types for the leaderboard API

Each error carries the i18n key of its user-facing message and the HTTP
status it is reported with. Handlers in main.py render them as
{"detail": <localized message>}.
"""


class LeaderboardError(Exception):
    status_code = 500

    def __init__(self, key: str, *args):
        super().__init__(key, *args)
        self.key = key


class ValidationError(LeaderboardError):
    """Missing or malformed field in a submission. Nothing is written."""
    status_code = 400


class ConflictError(LeaderboardError):
    """The name is already held by another memberId."""
    status_code = 409


class InfrastructureError(LeaderboardError):
    """Store unreachable or not configured."""
    status_code = 500


class MethodNotAllowedError(LeaderboardError):
    status_code = 405
