from __future__ import annotations

from typing import Optional


class SubsamplingError(ValueError):
    """
    Base error for the resampling workflow.

    ``fold_id`` and ``condition`` are filled in by the workflow when the error
    is raised while a specific fold is being evaluated, so the caller can tell
    which fold (and which of the sampled / normal conditions) failed.
    """

    def __init__(
        self,
        message: str,
        fold_id: Optional[str] = None,
        condition: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.fold_id = fold_id
        self.condition = condition

    def __str__(self) -> str:
        context = []
        if self.fold_id is not None:
            context.append(f"fold={self.fold_id}")
        if self.condition is not None:
            context.append(f"condition={self.condition}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"

    def __reduce__(self):
        # joblib workers pickle exceptions back to the parent process.
        return (self.__class__, (self.message, self.fold_id, self.condition))


class InputError(SubsamplingError):
    """Malformed dataset or parameters, or too few rows per class to stratify."""


class SingularModelError(SubsamplingError):
    """A per-class covariance matrix is degenerate."""


class EmptyClassError(SubsamplingError):
    """A class has zero rows where both classes are required."""
