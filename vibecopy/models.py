"""Data model for the Vibe Copy wizard.

Everything here is immutable. The flow controller replaces its
:class:`FlowState` snapshot on every transition instead of mutating it, so
views can hold on to a snapshot without seeing it change underneath them.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

RESULT_BATCH_SIZE: int = 4
"""Number of result slots filled by one successful generation."""

STATUS_MESSAGES: Tuple[str, ...] = (
    "Reading vibe...",
    "Matching lighting...",
    "Applying style...",
    "Finalizing...",
)
"""Status phrases cycled through while a generation is running."""

STATUS_INTERVAL_SECONDS: float = 1.5
"""Delay between two status phrases."""

INITIAL_STATUS: str = "Initializing..."


class AppStep(str, Enum):
    """The four wizard steps."""

    UPLOAD_SOURCE = "UploadSource"
    SELECT_MODE = "SelectMode"
    GENERATING = "Generating"
    RESULTS = "Results"


class MimicMode(str, Enum):
    """Which attribute of the style reference is carried over to the source.

    Declaration order is the order the mode grid displays them in.
    """

    COMPOSITE = "Composite"
    POSE = "Pose"
    LIGHTING = "Lighting"
    COMPOSITION = "Composition"
    OUTFIT = "Outfit"
    SCENE = "Scene"


@dataclass(frozen=True)
class ImageReference:
    """An image picked by the user, either a local file or a remote sample.

    Attributes:
        id: Slot identifier ("source", "ref-custom") or the sample id.
        display_url: URL used for previews. Remote URL for samples, data URL
            for local files.
        encoded_data: Inline data URL payload. Always present for local
            files; filled in lazily for remote samples.
        is_local: Whether the image was picked from the local filesystem.
    """

    id: str
    display_url: str
    encoded_data: Optional[str] = None
    is_local: bool = False

    def with_encoded_data(self, encoded_data: str) -> "ImageReference":
        """Return a copy of this reference carrying ``encoded_data``."""
        return replace(self, encoded_data=encoded_data)


@dataclass(frozen=True)
class GenerationResult:
    """One slot of a result batch.

    Attributes:
        id: Slot identifier, "res1" through "res4".
        image_data: The generated image as a data URL.
    """

    id: str
    image_data: str


@dataclass(frozen=True)
class SampleAsset:
    """A bundled sample photo, identified by id and remote URL."""

    id: str
    url: str


SAMPLE_SOURCES: Tuple[SampleAsset, ...] = (
    SampleAsset("src1", "https://images.unsplash.com/photo-1534528741775-53994a69daeb?w=400&h=500&fit=crop"),
    SampleAsset("src2", "https://images.unsplash.com/photo-1506794778202-cad84cf45f1d?w=400&h=500&fit=crop"),
    SampleAsset("src3", "https://images.unsplash.com/photo-1531746020798-e6953c6e8e04?w=400&h=500&fit=crop"),
)

SAMPLE_REFERENCES: Tuple[SampleAsset, ...] = (
    SampleAsset("ref1", "https://picsum.photos/id/338/400/500"),  # moody lighting
    SampleAsset("ref2", "https://picsum.photos/id/64/400/500"),  # portrait
    SampleAsset("ref3", "https://picsum.photos/id/129/400/500"),  # urban scene
    SampleAsset("ref4", "https://picsum.photos/id/91/400/500"),  # pose
    SampleAsset("ref5", "https://picsum.photos/id/177/400/500"),  # nature
)


def sample_reference(sample: SampleAsset) -> ImageReference:
    """Build a remote image reference for a bundled sample."""
    return ImageReference(id=sample.id, display_url=sample.url, is_local=False)


@dataclass(frozen=True)
class FlowState:
    """Snapshot of the wizard state owned by the flow controller.

    Attributes:
        step: The active wizard step.
        source_image: The user's photo, required from SelectMode onwards.
        reference_image: The style reference, required to generate.
        selected_mode: The mimicry mode used for the next generation.
        is_generating: True while a generation lifecycle is running.
        status_message: Current progress text shown while generating.
        results: Result batch of the most recent generation attempt.
    """

    step: AppStep = AppStep.UPLOAD_SOURCE
    source_image: Optional[ImageReference] = None
    reference_image: Optional[ImageReference] = None
    selected_mode: MimicMode = MimicMode.COMPOSITE
    is_generating: bool = False
    status_message: str = INITIAL_STATUS
    results: Tuple[GenerationResult, ...] = field(default_factory=tuple)

    @property
    def can_go_back(self) -> bool:
        """Whether the back action does anything in the current step."""
        return self.step in (AppStep.SELECT_MODE, AppStep.RESULTS)

    @property
    def can_generate(self) -> bool:
        """Whether the generate action is allowed right now."""
        return (
            self.step is AppStep.SELECT_MODE
            and self.source_image is not None
            and self.reference_image is not None
        )


def build_result_batch(image_data: str, size: int = RESULT_BATCH_SIZE) -> Tuple[GenerationResult, ...]:
    """Fill every result slot with the same generated image.

    The provider returns a single image per call; it is shown in all slots
    until multi-variant generation is supported.
    """
    return tuple(GenerationResult(id=f"res{index}", image_data=image_data) for index in range(1, size + 1))
