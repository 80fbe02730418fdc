"""
Exception hierarchy

Only RunValidationError and EvaluationCancelled ever reach the caller of a run;
everything else is contained per item by the prediction pipeline.
"""


class PromptGaugeError(Exception):
    """Base class for all harness errors"""
    pass


class RunValidationError(PromptGaugeError):
    """Run configuration is incomplete; raised before any item is dispatched"""
    pass


class InferenceError(PromptGaugeError):
    """A model call failed (network, provider, unknown)"""
    pass


class SchemaViolationError(InferenceError):
    """A structured generation response did not match the schema"""
    pass


class InputShapeError(InferenceError):
    """The item's input variant does not fit the evaluation mode"""
    pass


class EvaluationCancelled(PromptGaugeError):
    """The run's cancellation token fired"""
    pass


class CaptureError(PromptGaugeError):
    """Rendered line capture failed"""
    pass


class DatasetFormatError(PromptGaugeError):
    """A dataset file could not be parsed into dataset items"""
    pass
