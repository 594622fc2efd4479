"""Application-level error types."""


class JobSortError(Exception):
    """Base error for jobsort."""


class JobFileError(JobSortError):
    """Raised when a job document cannot be read or decoded."""
