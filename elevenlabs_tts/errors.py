"""Domain exceptions for provider construction, option resolution, and CLI diagnostics."""

from __future__ import annotations


class ProviderStageError(RuntimeError):
    """Raised when a specific provider stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped provider error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ConfigurationError(ProviderStageError):
    """Raised when the provider cannot be configured, e.g. a missing API key."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="config", detail=detail, hint=hint)


class VoiceRequiredError(ProviderStageError):
    """Raised when no voice id can be resolved for a synthesis call."""

    def __init__(self) -> None:
        super().__init__(
            stage="resolve",
            detail="Voice ID is required",
            hint=(
                "Pass a voice in the call options or directive, or set "
                "`ELEVENLABS_VOICE_ID`."
            ),
        )
