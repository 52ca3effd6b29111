import dataclasses

import pytest

from vibecopy.models import (
    SAMPLE_REFERENCES,
    SAMPLE_SOURCES,
    AppStep,
    FlowState,
    ImageReference,
    MimicMode,
    build_result_batch,
    sample_reference,
)


def test_mode_values_and_order():
    assert [mode.value for mode in MimicMode] == ["Composite", "Pose", "Lighting", "Composition", "Outfit", "Scene"]


def test_sample_ids():
    assert [sample.id for sample in SAMPLE_SOURCES] == ["src1", "src2", "src3"]
    assert [sample.id for sample in SAMPLE_REFERENCES] == ["ref1", "ref2", "ref3", "ref4", "ref5"]


def test_sample_reference_has_no_payload_yet():
    image = sample_reference(SAMPLE_REFERENCES[2])
    assert image == ImageReference(id="ref3", display_url=SAMPLE_REFERENCES[2].url)
    assert image.encoded_data is None
    assert not image.is_local


def test_with_encoded_data_copies():
    image = sample_reference(SAMPLE_SOURCES[0])
    encoded = image.with_encoded_data("data:image/png;base64,AAAA")
    assert encoded.encoded_data == "data:image/png;base64,AAAA"
    assert image.encoded_data is None
    assert encoded.id == image.id


def test_state_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        FlowState().step = AppStep.RESULTS


@pytest.mark.parametrize(
    "step, can_go_back",
    [
        (AppStep.UPLOAD_SOURCE, False),
        (AppStep.SELECT_MODE, True),
        (AppStep.GENERATING, False),
        (AppStep.RESULTS, True),
    ],
)
def test_can_go_back(step, can_go_back):
    assert FlowState(step=step).can_go_back is can_go_back


def test_can_generate_needs_both_images():
    image = sample_reference(SAMPLE_SOURCES[0])
    assert not FlowState(step=AppStep.SELECT_MODE, source_image=image).can_generate
    assert FlowState(step=AppStep.SELECT_MODE, source_image=image, reference_image=image).can_generate
    assert not FlowState(step=AppStep.RESULTS, source_image=image, reference_image=image).can_generate


def test_result_batch_repeats_single_image():
    batch = build_result_batch("data:image/png;base64,AAAA")
    assert [result.id for result in batch] == ["res1", "res2", "res3", "res4"]
    assert {result.image_data for result in batch} == {"data:image/png;base64,AAAA"}
