"""Wizard state machine and generation lifecycle.

:class:`FlowController` is the only owner of :class:`FlowState`. Every user
intent is a method; each returns True when the event fired and False when the
current step or guard refused it, in which case the state is left untouched.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from vibecopy.encoding import ImageEncoder
from vibecopy.errors import ImageDataMissingError
from vibecopy.generation import GenerationClient
from vibecopy.models import (
    RESULT_BATCH_SIZE,
    STATUS_INTERVAL_SECONDS,
    STATUS_MESSAGES,
    AppStep,
    FlowState,
    ImageReference,
    MimicMode,
    build_result_batch,
)
from vibecopy.prompts import build_instruction

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Generation failed. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


class StatusRotation:
    """Cycle through status phrases on a fixed interval.

    Used as an async context manager: entering shows the first phrase and
    starts a background task, leaving cancels and awaits that task whatever
    the exit path, so no tick can fire after the lifecycle ends.

    Attributes:
        messages: Phrases to cycle through, in order.
        interval: Seconds between two phrases.
        on_message: Called with each phrase as it becomes current.
    """

    def __init__(
        self,
        on_message: Callable[[str], None],
        messages: Sequence[str] = STATUS_MESSAGES,
        interval: float = STATUS_INTERVAL_SECONDS,
    ) -> None:
        if not messages:
            raise ValueError("StatusRotation needs at least one message")
        self.on_message = on_message
        self.messages = tuple(messages)
        self.interval = interval
        self.index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> str:
        """Advance to the next phrase, wrapping after the last one."""
        self.index = (self.index + 1) % len(self.messages)
        message = self.messages[self.index]
        self.on_message(message)
        return message

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    async def __aenter__(self) -> "StatusRotation":
        self.index = 0
        self.on_message(self.messages[0])
        self._task = asyncio.create_task(self._run())
        return self

    async def __aexit__(self, *exc_info) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)


class FlowController:
    """Drive the upload → mode → generating → results wizard.

    Attributes:
        encoder: Produces inline payloads for images lacking them.
        generator: The provider client, built once and injected.
        on_change: Called with the new snapshot after every transition.
        notify: Called with a user-facing message when a generation fails.
        status_messages: Phrases for the status rotation.
        status_interval: Seconds between two status phrases.
        result_batch_size: Slots filled by a successful generation.
    """

    def __init__(
        self,
        encoder: ImageEncoder,
        generator: GenerationClient,
        on_change: Optional[Callable[[FlowState], None]] = None,
        notify: Optional[Callable[[str], None]] = None,
        status_messages: Sequence[str] = STATUS_MESSAGES,
        status_interval: float = STATUS_INTERVAL_SECONDS,
        result_batch_size: int = RESULT_BATCH_SIZE,
    ) -> None:
        self.encoder = encoder
        self.generator = generator
        self.on_change = on_change
        self.notify = notify
        self.status_messages = tuple(status_messages)
        self.status_interval = status_interval
        self.result_batch_size = result_batch_size
        self._state = FlowState()

    @property
    def state(self) -> FlowState:
        return self._state

    def _set(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        if self.on_change is not None:
            self.on_change(self._state)

    def _refuse(self, event: str) -> bool:
        logger.debug("Ignoring %s in step %s", event, self._state.step.value)
        return False

    def _report(self, message: str) -> None:
        if self.notify is not None:
            self.notify(message)

    # -- Upload / selection -------------------------------------------------

    def pick_source(self, image: ImageReference) -> bool:
        """Set the user's photo and move on to mode selection."""
        if self._state.step is not AppStep.UPLOAD_SOURCE:
            return self._refuse("pick_source")
        self._set(source_image=image, step=AppStep.SELECT_MODE)
        return True

    def pick_reference(self, image: ImageReference) -> bool:
        if self._state.step is not AppStep.SELECT_MODE:
            return self._refuse("pick_reference")
        self._set(reference_image=image)
        return True

    def clear_reference(self) -> bool:
        if self._state.step is not AppStep.SELECT_MODE or self._state.reference_image is None:
            return self._refuse("clear_reference")
        self._set(reference_image=None)
        return True

    def select_mode(self, mode: MimicMode) -> bool:
        if self._state.step is not AppStep.SELECT_MODE:
            return self._refuse("select_mode")
        try:
            mode = MimicMode(mode)
        except ValueError:
            return self._refuse(f"select_mode({mode!r})")
        self._set(selected_mode=mode)
        return True

    # -- Navigation ----------------------------------------------------------

    def back(self) -> bool:
        """Step back one level.

        In SelectMode a chosen reference is dropped first; without one the
        source is dropped and the wizard returns to UploadSource. From
        Results it returns to SelectMode keeping every field. Back does
        nothing in UploadSource or while generating.
        """
        state = self._state
        if state.step is AppStep.SELECT_MODE:
            if state.reference_image is not None:
                self._set(reference_image=None)
            else:
                self._set(source_image=None, step=AppStep.UPLOAD_SOURCE)
            return True
        if state.step is AppStep.RESULTS:
            self._set(step=AppStep.SELECT_MODE)
            return True
        return self._refuse("back")

    def regenerate(self) -> bool:
        """Return from Results to SelectMode with all fields kept."""
        if self._state.step is not AppStep.RESULTS:
            return self._refuse("regenerate")
        self._set(step=AppStep.SELECT_MODE)
        return True

    def new_photo(self) -> bool:
        """Start over from an empty UploadSource step."""
        if self._state.step is not AppStep.RESULTS:
            return self._refuse("new_photo")
        self._set(
            source_image=None,
            reference_image=None,
            results=(),
            step=AppStep.UPLOAD_SOURCE,
        )
        return True

    # -- Generation lifecycle ------------------------------------------------

    async def _ensure_encoded(self, field_name: str, missing_message: str) -> str:
        image: Optional[ImageReference] = getattr(self._state, field_name)
        if image is None:
            raise ImageDataMissingError(missing_message)
        try:
            encoded = await self.encoder.encode(image)
        except ImageDataMissingError as e:
            raise ImageDataMissingError(f"{missing_message}: {e}") from e
        if not encoded:
            raise ImageDataMissingError(missing_message)
        if image.encoded_data != encoded:
            self._set(**{field_name: image.with_encoded_data(encoded)})
        return encoded

    async def generate(self) -> bool:
        """Run one generation lifecycle and settle in Results.

        Refused unless the wizard is in SelectMode with both images chosen.
        Any failure yields an empty result batch and a notification; the
        lifecycle always ends in Results with the status rotation stopped.
        """
        if not self._state.can_generate:
            return self._refuse("generate")

        mode = self._state.selected_mode
        logger.info("Starting generation (mode=%s)", mode.value)
        self._set(step=AppStep.GENERATING, is_generating=True, status_message=self.status_messages[0])
        results = ()
        try:
            async with StatusRotation(
                lambda message: self._set(status_message=message),
                messages=self.status_messages,
                interval=self.status_interval,
            ):
                try:
                    source_data = await self._ensure_encoded("source_image", "Source image data missing")
                    reference_data = await self._ensure_encoded("reference_image", "Reference image data missing")
                    instruction = build_instruction(mode)
                    image = await self.generator.generate(source_data, reference_data, instruction)
                except ImageDataMissingError as e:
                    logger.error("Generation aborted: %s", e)
                    self._report(str(e))
                except Exception:
                    logger.exception("Image generation provider error")
                    self._report(UNEXPECTED_ERROR_MESSAGE)
                else:
                    if image:
                        results = build_result_batch(image, self.result_batch_size)
                    else:
                        self._report(GENERATION_FAILED_MESSAGE)
        finally:
            self._set(results=results, is_generating=False, step=AppStep.RESULTS)
        logger.info("Generation finished with %d result(s)", len(results))
        return True
