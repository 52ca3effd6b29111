import io
from typing import List, Optional, Tuple

import httpx
import pytest
from PIL import Image

from vibecopy.encoding import ImageEncoder, to_data_url
from vibecopy.flow import FlowController
from vibecopy.models import ImageReference


def make_png(color: Tuple[int, int, int] = (200, 40, 40), size: Tuple[int, int] = (4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class StubGenerator:
    """Stands in for GenerationClient; records calls and returns a canned result."""

    def __init__(self, result: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []

    async def generate(self, source_image: str, reference_image: str, instruction: str) -> Optional[str]:
        self.calls.append((source_image, reference_image, instruction))
        if self.error is not None:
            raise self.error
        return self.result


class ImageServer:
    """httpx mock transport serving the same PNG for every URL."""

    def __init__(self, body: bytes, content_type: str = "image/png", status_code: int = 200) -> None:
        self.body = body
        self.content_type = content_type
        self.status_code = status_code
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.body, headers={"content-type": self.content_type})


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_data_url(png_bytes) -> str:
    return to_data_url(png_bytes, "image/png")


@pytest.fixture
def generated_image() -> str:
    return to_data_url(make_png((10, 200, 10)), "image/png")


@pytest.fixture
def image_server(png_bytes) -> ImageServer:
    return ImageServer(png_bytes)


@pytest.fixture
def local_source(png_data_url) -> ImageReference:
    return ImageReference(id="source", display_url=png_data_url, encoded_data=png_data_url, is_local=True)


@pytest.fixture
def local_reference(png_data_url) -> ImageReference:
    return ImageReference(id="ref-custom", display_url=png_data_url, encoded_data=png_data_url, is_local=True)


@pytest.fixture
def stub_generator(generated_image) -> StubGenerator:
    return StubGenerator(result=generated_image)


@pytest.fixture
def notifications() -> List[str]:
    return []


@pytest.fixture
def controller(image_server, stub_generator, notifications) -> FlowController:
    return FlowController(
        encoder=ImageEncoder(transport=image_server.transport),
        generator=stub_generator,
        notify=notifications.append,
        status_interval=0.01,
    )
