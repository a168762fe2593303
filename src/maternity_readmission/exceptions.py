"""
Exception hierarchy for the readmission simulator.

Empty audit subgroups are not errors: the auditor reports them as a
"no data" result (None) instead of raising.
"""


class ReadmissionSimulatorError(Exception):
    """Base class for all simulator errors."""


class InvalidInputError(ReadmissionSimulatorError, ValueError):
    """Raised for malformed training data, feature vectors or parameters."""


class ModelNotFittedError(ReadmissionSimulatorError, RuntimeError):
    """Raised when a model is queried before fit() has been called."""
