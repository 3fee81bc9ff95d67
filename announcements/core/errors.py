"""Error taxonomy for the announcement scoring pipeline.

Fatal errors (:class:`IngestSyntaxError`, :class:`EmptyDatasetError`) abort a
run before any scoring happens. Non-fatal errors (:class:`ScoringBatchError`,
:class:`MarkupCleaningError`) are isolated to the affected records and only
show up as a ``Failed`` status or an empty ``text_clean``.
"""


class PipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class IngestSyntaxError(PipelineError):
    """The input is not a JSON array of objects, even after repair."""


class EmptyDatasetError(PipelineError):
    """Ingestion and normalization produced zero usable records."""


class ScoringBatchError(PipelineError):
    """A single batch could not be scored (transport or response problem)."""


class MarkupCleaningError(PipelineError):
    """A description could not be rendered as plain text."""


class InvalidTransitionError(PipelineError):
    """A record was asked to leave a terminal status."""


class ConfigurationError(PipelineError):
    """A configuration value is missing or out of range."""
