"""Flet presentation layer for the Vibe Copy wizard.

The views hold no state of their own: :class:`ViewRenderer` rebuilds the
page from the controller's latest :class:`FlowState` snapshot every time the
controller reports a change, and forwards user intents back to it.

Typical usage:
    python main.py

Or programmatically:
    import flet as ft
    from vibecopy.ui import main
    ft.app(target=main)
"""

import logging
from concurrent.futures import Future
from typing import Callable, Dict, Optional

import flet as ft

from vibecopy.config import load_provider_config
from vibecopy.encoding import (
    ImageEncoder,
    extension_for_mime,
    generate_filename,
    save_data_url,
    split_data_url,
)
from vibecopy.errors import ConfigurationError, ImageFetchError
from vibecopy.flow import FlowController
from vibecopy.generation import GenerationClient
from vibecopy.models import (
    SAMPLE_REFERENCES,
    SAMPLE_SOURCES,
    AppStep,
    FlowState,
    GenerationResult,
    MimicMode,
    sample_reference,
)

logger = logging.getLogger(__name__)

APP_TITLE = "AI Vibe Copy"
BACKGROUND = "#020617"
CARD = "#1E293B"
ACCENT = ft.Colors.INDIGO_600
BUTTON_BG = "#E0E7FF"

SOURCE_ID = "source"
CUSTOM_REFERENCE_ID = "ref-custom"

MODE_ICONS: Dict[MimicMode, str] = {
    MimicMode.COMPOSITE: ft.Icons.AUTO_AWESOME,
    MimicMode.POSE: ft.Icons.ACCESSIBILITY_NEW,
    MimicMode.LIGHTING: ft.Icons.LIGHT_MODE,
    MimicMode.OUTFIT: ft.Icons.CHECKROOM,
    MimicMode.SCENE: ft.Icons.LANDSCAPE,
    MimicMode.COMPOSITION: ft.Icons.CROP,
}
"""Icon shown on the mode grid for every :class:`MimicMode`."""


def image_control(url: str, **kwargs) -> ft.Image:
    """Build an image control for a remote URL or an inline data URL."""
    if url.startswith("data:"):
        _, payload = split_data_url(url)
        return ft.Image(src_base64=payload, **kwargs)
    return ft.Image(src=url, **kwargs)


def primary_button(text: str, on_click: Callable, icon: Optional[str] = None) -> ft.Container:
    return ft.Container(
        content=ft.Row(
            [
                ft.FilledButton(
                    text,
                    icon=icon,
                    on_click=on_click,
                    height=56,
                    style=ft.ButtonStyle(bgcolor=BUTTON_BG, color=BACKGROUND),
                    expand=True,
                )
            ]
        ),
        padding=ft.padding.symmetric(horizontal=24, vertical=16),
    )


class ViewRenderer:
    """Render each wizard step and wire its controls to the controller.

    Attributes:
        page: The Flet page being drawn on.
        controller: The flow controller that owns all state.
        source_picker: File picker for the user's photo.
        reference_picker: File picker for a custom style reference.
        generation: Future of the running generation task, if any.
    """

    def __init__(self, page: ft.Page, controller: FlowController) -> None:
        self.page = page
        self.controller = controller
        self.source_picker = ft.FilePicker(on_result=lambda e: self._on_file_picked(e, SOURCE_ID))
        self.reference_picker = ft.FilePicker(on_result=lambda e: self._on_file_picked(e, CUSTOM_REFERENCE_ID))
        page.overlay.extend([self.source_picker, self.reference_picker])
        self.body = ft.Container(expand=True)
        self.generation: Optional[Future] = None

    # -- Intent forwarding ---------------------------------------------------

    def notify(self, message: str) -> None:
        """Show a user-visible message as a snack bar."""
        self.page.open(ft.SnackBar(ft.Text(message)))

    def _on_file_picked(self, e: ft.FilePickerResultEvent, slot: str) -> None:
        if not e.files:
            return
        self.page.run_task(self._load_local_file, e.files[0].path, slot)

    async def _load_local_file(self, path: Optional[str], slot: str) -> None:
        if path is None:
            self.notify("Local files can only be imported in the desktop app")
            return
        try:
            image = await self.controller.encoder.read_local_file(path, image_id=slot)
        except ImageFetchError as e:
            logger.warning("Rejected local file %s: %s", path, e)
            self.notify(str(e))
            return
        if slot == SOURCE_ID:
            self.controller.pick_source(image)
        else:
            self.controller.pick_reference(image)

    def _pick_files(self, picker: ft.FilePicker) -> None:
        picker.pick_files(allow_multiple=False, file_type=ft.FilePickerFileType.IMAGE)

    def _on_generate(self, _: ft.ControlEvent) -> None:
        self.generation = self.page.run_task(self.controller.generate)

    def shutdown(self, _: Optional[ft.ControlEvent] = None) -> None:
        """Detach from the controller and cancel a running generation.

        Called when the page disconnects or closes, so nothing renders onto a
        dead session afterwards.
        """
        self.controller.on_change = None
        self.controller.notify = None
        generation, self.generation = self.generation, None
        if generation is not None and not generation.done():
            logger.info("Page closed, cancelling running generation")
            generation.cancel()

    def _save_result(self, result: GenerationResult) -> None:
        mime_type, _ = split_data_url(result.image_data)
        filename = generate_filename(extension=extension_for_mime(mime_type))
        try:
            save_data_url(result.image_data, filename)
        except (OSError, ValueError) as e:
            logger.error("Could not save %s: %s", filename, e)
            self.notify(f"Could not save image: {e}")
            return
        self.notify(f"Image saved as {filename}")

    # -- Views ---------------------------------------------------------------

    def header(self, state: FlowState) -> ft.Control:
        return ft.Container(
            content=ft.Row(
                [
                    ft.IconButton(
                        icon=ft.Icons.ARROW_BACK,
                        icon_color=ft.Colors.WHITE,
                        on_click=lambda _: self.controller.back(),
                        visible=state.can_go_back,
                    ),
                    ft.Text(APP_TITLE, size=18, weight=ft.FontWeight.W_600, expand=True, text_align=ft.TextAlign.CENTER),
                    ft.Container(width=48),
                ],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            height=56,
            padding=ft.padding.symmetric(horizontal=8),
        )

    def upload_source_view(self, state: FlowState) -> ft.Control:
        samples = ft.Row(
            [
                ft.Container(
                    content=image_control(sample.url, fit=ft.ImageFit.COVER),
                    width=64,
                    height=64,
                    border_radius=12,
                    border=ft.border.all(2, ft.Colors.BLUE_GREY_700),
                    clip_behavior=ft.ClipBehavior.HARD_EDGE,
                    on_click=lambda _, s=sample: self.controller.pick_source(sample_reference(s)),
                )
                for sample in SAMPLE_SOURCES
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            spacing=16,
        )
        card = ft.Container(
            content=ft.Column(
                [
                    ft.Icon(ft.Icons.UPLOAD, size=48, color=ft.Colors.BLUE_GREY_500),
                    ft.Text("No photo selected", color=ft.Colors.BLUE_GREY_500),
                    ft.Container(height=24),
                    ft.Text("OR TRY A SAMPLE", size=11, weight=ft.FontWeight.BOLD, color=ft.Colors.BLUE_GREY_600),
                    samples,
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
            ),
            bgcolor=ft.Colors.BLUE_GREY_900,
            border_radius=24,
            padding=24,
            margin=ft.margin.symmetric(horizontal=24, vertical=16),
            expand=True,
        )
        return ft.Column(
            [card, primary_button("Import Photo", lambda _: self._pick_files(self.source_picker))],
            expand=True,
        )

    def _reference_slot(self, state: FlowState) -> ft.Control:
        if state.reference_image is None:
            return ft.Container(
                content=ft.Column(
                    [ft.Icon(ft.Icons.CAMERA_ALT), ft.Text("Select Style", size=12)],
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    alignment=ft.MainAxisAlignment.CENTER,
                ),
                width=128,
                height=192,
                border_radius=12,
                border=ft.border.all(2, ft.Colors.BLUE_GREY_600),
                on_click=lambda _: self._pick_files(self.reference_picker),
            )
        return ft.Stack(
            [
                ft.Container(
                    content=image_control(state.reference_image.display_url, fit=ft.ImageFit.COVER),
                    width=128,
                    height=192,
                    border_radius=12,
                    clip_behavior=ft.ClipBehavior.HARD_EDGE,
                ),
                ft.IconButton(
                    icon=ft.Icons.CLOSE,
                    icon_size=16,
                    right=0,
                    top=0,
                    on_click=lambda _: self.controller.clear_reference(),
                ),
            ],
            width=128,
            height=192,
        )

    def _recommended_styles(self) -> ft.Control:
        grid = ft.GridView(
            [
                ft.Container(
                    content=image_control(sample.url, fit=ft.ImageFit.COVER),
                    border_radius=12,
                    clip_behavior=ft.ClipBehavior.HARD_EDGE,
                    on_click=lambda _, s=sample: self.controller.pick_reference(sample_reference(s)),
                )
                for sample in SAMPLE_REFERENCES
            ],
            runs_count=3,
            child_aspect_ratio=0.75,
            spacing=12,
            run_spacing=12,
            expand=True,
        )
        return ft.Column(
            [
                ft.Row(
                    [
                        ft.Text("Recommended Styles", weight=ft.FontWeight.W_600),
                        ft.TextButton("UPLOAD OWN", on_click=lambda _: self._pick_files(self.reference_picker)),
                    ],
                    alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                ),
                grid,
            ],
            expand=True,
        )

    def _mode_grid(self, state: FlowState) -> ft.Control:
        tiles = []
        for mode in MimicMode:
            selected = mode is state.selected_mode
            tiles.append(
                ft.Container(
                    content=ft.Column(
                        [
                            ft.Icon(MODE_ICONS[mode], color=ft.Colors.WHITE if selected else ft.Colors.BLUE_GREY_400),
                            ft.Text(mode.value.upper(), size=10, weight=ft.FontWeight.W_500),
                        ],
                        horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                        alignment=ft.MainAxisAlignment.CENTER,
                    ),
                    bgcolor=ACCENT if selected else CARD,
                    border_radius=16,
                    on_click=lambda _, m=mode: self.controller.select_mode(m),
                )
            )
        return ft.Column(
            [
                ft.Text("Select Editing Mode", weight=ft.FontWeight.W_600, text_align=ft.TextAlign.CENTER),
                ft.GridView(tiles, runs_count=3, spacing=12, run_spacing=12, expand=True),
                primary_button("Generate", self._on_generate, icon=ft.Icons.AUTO_AWESOME),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.STRETCH,
            expand=True,
        )

    def select_mode_view(self, state: FlowState) -> ft.Control:
        previews = ft.Row(
            [
                ft.Container(
                    content=image_control(state.source_image.display_url, fit=ft.ImageFit.COVER),
                    width=128,
                    height=192,
                    border_radius=12,
                    clip_behavior=ft.ClipBehavior.HARD_EDGE,
                    rotate=-0.05,
                ),
                ft.Icon(ft.Icons.ALL_INCLUSIVE),
                ft.Container(content=self._reference_slot(state), rotate=0.05),
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=8,
        )
        bottom = self._recommended_styles() if state.reference_image is None else self._mode_grid(state)
        return ft.Column(
            [
                ft.Container(content=previews, padding=24),
                ft.Container(
                    content=bottom,
                    bgcolor=ft.Colors.BLUE_GREY_900,
                    border_radius=ft.border_radius.only(top_left=32, top_right=32),
                    padding=24,
                    expand=True,
                ),
            ],
            expand=True,
        )

    def generating_view(self, state: FlowState) -> ft.Control:
        return ft.Container(
            content=ft.Column(
                [
                    ft.ProgressRing(width=64, height=64, color=ft.Colors.INDIGO_400),
                    ft.Text("Generating...", size=20, weight=ft.FontWeight.BOLD),
                    ft.Text(state.status_message, size=14, color=ft.Colors.BLUE_GREY_400),
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
            ),
            alignment=ft.alignment.center,
            expand=True,
        )

    def results_view(self, state: FlowState) -> ft.Control:
        if state.results:
            content: ft.Control = ft.GridView(
                [
                    ft.Stack(
                        [
                            ft.Container(
                                content=image_control(result.image_data, fit=ft.ImageFit.COVER),
                                border_radius=16,
                                clip_behavior=ft.ClipBehavior.HARD_EDGE,
                                expand=True,
                            ),
                            ft.IconButton(
                                icon=ft.Icons.DOWNLOAD,
                                right=4,
                                bottom=4,
                                on_click=lambda _, r=result: self._save_result(r),
                            ),
                        ]
                    )
                    for result in state.results
                ],
                runs_count=2,
                child_aspect_ratio=0.75,
                spacing=12,
                run_spacing=12,
                padding=16,
                expand=True,
            )
        else:
            content = ft.Container(
                content=ft.Text("No results", color=ft.Colors.BLUE_GREY_500),
                alignment=ft.alignment.center,
                expand=True,
            )
        actions = ft.Row(
            [
                ft.OutlinedButton("New Photo", icon=ft.Icons.ADD_A_PHOTO, on_click=lambda _: self.controller.new_photo()),
                ft.FilledButton("Regenerate", icon=ft.Icons.REFRESH, on_click=lambda _: self.controller.regenerate()),
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            spacing=12,
        )
        return ft.Column([content, ft.Container(content=actions, padding=16)], expand=True)

    def render(self, state: FlowState) -> None:
        """Redraw the page for ``state`` and refresh the display."""
        views = {
            AppStep.UPLOAD_SOURCE: self.upload_source_view,
            AppStep.SELECT_MODE: self.select_mode_view,
            AppStep.GENERATING: self.generating_view,
            AppStep.RESULTS: self.results_view,
        }
        controls = [] if state.step is AppStep.GENERATING else [self.header(state)]
        controls.append(views[state.step](state))
        self.body.content = ft.Column(controls, expand=True, spacing=0)
        self.page.update()


def main(page: ft.Page) -> None:
    """Main Flet application entry point.

    Builds the provider client and flow controller once, then renders the
    initial UploadSource step.

    Args:
        page: Flet page object for UI rendering.
    """
    page.title = APP_TITLE
    page.theme_mode = ft.ThemeMode.DARK
    page.bgcolor = BACKGROUND
    page.padding = 0
    page.window.width = 420
    page.window.height = 860

    try:
        config = load_provider_config()
    except ConfigurationError as e:
        logger.error("%s", e)
        page.add(ft.Container(content=ft.Text(str(e), color=ft.Colors.RED_300), padding=24))
        return

    controller = FlowController(encoder=ImageEncoder(), generator=GenerationClient(config))
    renderer = ViewRenderer(page, controller)
    controller.on_change = renderer.render
    controller.notify = renderer.notify
    page.on_disconnect = renderer.shutdown
    page.on_close = renderer.shutdown

    page.add(renderer.body)
    renderer.render(controller.state)
