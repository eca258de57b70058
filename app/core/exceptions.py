"""Domain errors raised by services and translated to HTTP responses by the endpoints."""


class NotAuthenticatedError(Exception):
    """No valid session: the client must sign in again."""


class WorkoutNotFoundError(Exception):
    """Workout (or a child row) missing, or owned by someone else."""


class LiftTypeNotFoundError(Exception):
    pass


class IncompleteSetsError(Exception):
    """Completing a workout that still has sets not marked as done."""

    def __init__(self, incomplete: int):
        self.incomplete = incomplete
        super().__init__(f"{incomplete} set(s) are not marked as completed")


class LastSetError(Exception):
    """An exercise must keep at least one set."""
