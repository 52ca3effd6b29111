"""Editing instructions sent to the generation provider, one per mimicry mode."""

from typing import Dict

from vibecopy.models import MimicMode

MODE_INSTRUCTIONS: Dict[MimicMode, str] = {
    MimicMode.COMPOSITE: (
        "Create a perfect fusion. Take the subject from the FIRST image and stylize it "
        "using the aesthetic, vibe, and style of the SECOND image."
    ),
    MimicMode.POSE: (
        "Redraw the person from the FIRST image, but strictly copy the body pose, gesture, "
        "and head angle of the person in the SECOND image. Keep the first person's identity."
    ),
    MimicMode.LIGHTING: (
        "Keep the subject and composition of the FIRST image, but completely change the "
        "lighting, color grading, and shadows to match the atmosphere of the SECOND image."
    ),
    MimicMode.OUTFIT: (
        "Redraw the person from the FIRST image wearing the clothes/outfit seen in the "
        "SECOND image. Keep the pose of the first image."
    ),
    MimicMode.SCENE: (
        "Place the subject from the FIRST image into the background environment/location "
        "shown in the SECOND image. Blend them naturally."
    ),
    MimicMode.COMPOSITION: (
        "Re-frame the subject of the FIRST image to match the camera angle, zoom level, "
        "and framing rule (e.g. rule of thirds) of the SECOND image."
    ),
}
"""Mode clause for every :class:`MimicMode`."""

PROMPT_TEMPLATE: str = (
    "You are an expert visual editor.\n"
    "Image 1 is the USER SOURCE.\n"
    "Image 2 is the STYLE REFERENCE.\n"
    "\n"
    "Task: {instruction}\n"
    "\n"
    "Return a high-quality, photorealistic image."
)


def mode_instruction(mode: MimicMode) -> str:
    """Return the mode clause, falling back to the composite fusion clause."""
    try:
        mode = MimicMode(mode)
    except ValueError:
        mode = MimicMode.COMPOSITE
    return MODE_INSTRUCTIONS.get(mode, MODE_INSTRUCTIONS[MimicMode.COMPOSITE])


def build_instruction(mode: MimicMode) -> str:
    """Build the full instruction string sent alongside the two images.

    Args:
        mode: The selected mimicry mode. Values outside the table (for
            example a mode string from a newer client) get the composite
            instruction.

    Returns:
        The preamble labelling image 1 and image 2, the mode clause, and the
        photorealistic output request.

    Example:
        >>> "body pose" in build_instruction(MimicMode.POSE)
        True
    """
    return PROMPT_TEMPLATE.format(instruction=mode_instruction(mode))
