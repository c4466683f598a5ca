"""Error hierarchy for syncrelay.

Configuration and validation errors are raised synchronously to whoever is
wiring the relay together.  Everything raised while serving (processing,
delivery, timeouts) is contained by the pipeline or the dispatch engine and
only logged.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by syncrelay."""


class ConfigurationError(RelayError):
    """Invalid base URL or scheme, or setup attempted after serving began."""


class ValidationError(RelayError):
    """An adaptor failed registration checks (malformed id, wrong capability)."""


class DuplicateError(ValidationError):
    """An adaptor with the same id already holds the requested capability."""

    def __init__(self, adaptor_id: str, role: str) -> None:
        super().__init__(
            f"An adaptor with id '{adaptor_id}' is already registered as a {role}."
        )
        self.adaptor_id = adaptor_id
        self.role = role


class AdaptorNotFoundError(RelayError):
    """No subscriber is registered under the requested id."""

    def __init__(self, adaptor_id: str) -> None:
        super().__init__(f"Adaptor with id '{adaptor_id}' not found.")
        self.adaptor_id = adaptor_id


class ConversionError(RelayError):
    """Converting content between HTML and Markdown failed."""


class ProcessingError(RelayError):
    """A processor action raised while running inside a pipeline."""

    def __init__(self, processor_name: str, cause: BaseException) -> None:
        super().__init__(f"Processor '{processor_name}' failed: {cause}")
        self.processor_name = processor_name
        self.cause = cause


class DeliveryFailure(RelayError):
    """A publisher reported failure or raised while sending a message."""

    def __init__(
        self,
        publisher_id: str,
        message_id: str,
        cause: BaseException | None = None,
    ) -> None:
        reason = str(cause) if cause is not None else "publisher reported failure"
        super().__init__(
            f"Delivery of message {message_id} to '{publisher_id}' failed: {reason}"
        )
        self.publisher_id = publisher_id
        self.message_id = message_id
        self.cause = cause


class StepTimeoutError(RelayError):
    """A processor action or send call exceeded the per-step timeout."""

    def __init__(self, step: str, timeout: float) -> None:
        super().__init__(f"Step '{step}' timed out after {timeout:g}s")
        self.step = step
        self.timeout = timeout
