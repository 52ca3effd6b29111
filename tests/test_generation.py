from types import SimpleNamespace

import pytest
from google import genai

from tests.conftest import make_png
from vibecopy.config import ProviderConfig
from vibecopy.encoding import to_data_url
from vibecopy.generation import GenerationClient, extract_image_data_url


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def fake_sdk_client(models: FakeModels) -> SimpleNamespace:
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def response_with_parts(*parts) -> SimpleNamespace:
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data: bytes, mime_type: str = "image/png") -> SimpleNamespace:
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


CONFIG = ProviderConfig(api_key="test-key")


def test_extract_returns_first_image_part():
    first, second = make_png((1, 2, 3)), make_png((4, 5, 6))
    response = response_with_parts(text_part("here you go"), image_part(first), image_part(second))
    assert extract_image_data_url(response) == to_data_url(first, "image/png")


def test_extract_without_image_returns_none():
    assert extract_image_data_url(response_with_parts(text_part("sorry"))) is None
    assert extract_image_data_url(SimpleNamespace(candidates=[])) is None
    assert extract_image_data_url(SimpleNamespace(candidates=None)) is None


async def test_generate_sends_images_then_instruction(png_bytes):
    output = make_png((9, 9, 9))
    models = FakeModels(response=response_with_parts(image_part(output)))
    client = GenerationClient(CONFIG, client=fake_sdk_client(models))
    source = to_data_url(png_bytes, "image/png")
    reference = to_data_url(make_png((0, 0, 255)), "image/jpeg")

    result = await client.generate(source, reference, "Copy the lighting")

    assert result == to_data_url(output, "image/png")
    (call,) = models.calls
    assert call["model"] == CONFIG.model
    source_part, reference_part, text = call["contents"]
    assert source_part.inline_data.data == png_bytes
    assert source_part.inline_data.mime_type == "image/png"
    assert reference_part.inline_data.mime_type == "image/jpeg"
    assert text.text == "Copy the lighting"
    assert "IMAGE" in call["config"].response_modalities


async def test_generate_returns_none_without_image_part(png_data_url):
    models = FakeModels(response=response_with_parts(text_part("I can't do that")))
    client = GenerationClient(CONFIG, client=fake_sdk_client(models))
    assert await client.generate(png_data_url, png_data_url, "x") is None


async def test_provider_errors_propagate(png_data_url):
    models = FakeModels(error=RuntimeError("401 unauthorized"))
    client = GenerationClient(CONFIG, client=fake_sdk_client(models))
    with pytest.raises(RuntimeError, match="401"):
        await client.generate(png_data_url, png_data_url, "x")
    assert len(models.calls) == 1


def test_builds_sdk_client_from_config():
    client = GenerationClient(CONFIG)
    assert isinstance(client.client, genai.Client)
