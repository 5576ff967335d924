"""Exceptions raised by the sentiment pipeline stages."""


class SentimentPipelineError(Exception):
    """Base class for all pipeline failures."""


class LoadError(SentimentPipelineError):
    """A source snapshot or lexicon file is missing or malformed."""


class SchemaMismatch(SentimentPipelineError):
    """Join keys are absent or type-incompatible between two tables."""


class InvalidParameter(SentimentPipelineError, ValueError):
    """An argument is outside its allowed range (split fraction, grouping)."""


class ConvergenceError(SentimentPipelineError):
    """A mixed-effects fit did not reach a stable optimum."""


class UnmatchedCategory(SentimentPipelineError):
    """A category referenced by a fit or prediction grid has no observed rows."""
