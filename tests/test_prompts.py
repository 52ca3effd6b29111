import pytest

from vibecopy.models import MimicMode
from vibecopy.prompts import MODE_INSTRUCTIONS, PROMPT_TEMPLATE, build_instruction

PREAMBLE = PROMPT_TEMPLATE.split("{instruction}")[0]


def test_every_mode_has_an_instruction():
    assert set(MODE_INSTRUCTIONS) == set(MimicMode)


def test_instructions_are_distinct():
    prompts = {build_instruction(mode) for mode in MimicMode}
    assert len(prompts) == len(MimicMode)


@pytest.mark.parametrize("mode", list(MimicMode))
def test_instruction_wraps_mode_clause_in_preamble(mode):
    prompt = build_instruction(mode)
    assert prompt.startswith(PREAMBLE)
    assert "Image 1 is the USER SOURCE." in prompt
    assert "Image 2 is the STYLE REFERENCE." in prompt
    assert MODE_INSTRUCTIONS[mode] in prompt
    assert prompt.endswith("Return a high-quality, photorealistic image.")


@pytest.mark.parametrize(
    "mode, phrase",
    [
        (MimicMode.POSE, "body pose"),
        (MimicMode.LIGHTING, "lighting, color grading, and shadows"),
        (MimicMode.OUTFIT, "clothes/outfit"),
        (MimicMode.SCENE, "background environment"),
        (MimicMode.COMPOSITION, "camera angle"),
        (MimicMode.COMPOSITE, "perfect fusion"),
    ],
)
def test_mode_clause_names_transplanted_attribute(mode, phrase):
    assert phrase in build_instruction(mode)


def test_unknown_mode_falls_back_to_composite():
    assert build_instruction("Sketch") == build_instruction(MimicMode.COMPOSITE)


def test_mode_string_value_is_accepted():
    assert build_instruction("Pose") == build_instruction(MimicMode.POSE)
