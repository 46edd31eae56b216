"""Gradio UI for Collageworks."""

import logging

import gradio as gr

from collageworks.core.config import config

from .handlers import (
    add_stock_photo,
    add_uploaded_image,
    apply_suggestion,
    canvas_click,
    clear_canvas,
    edit_result,
    enhance_collage,
    layer_action,
    search_stock,
    set_layer_rotation,
    set_layer_scale,
)
from .models import CANVAS_TOOLS, LAYER_ACTIONS, UIState

logger = logging.getLogger(__name__)


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the Gradio UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .layer-list {
        max-height: 240px;
        overflow-y: auto;
    }
    """

    app = gr.Blocks(title="Collageworks")

    with app:
        # Session state - one instance per user
        ui_state = gr.State(UIState())

        gr.Markdown(
            """
            # Collageworks
            ### Build a collage, then let AI turn it into a polished image
            """
        )

        with gr.Row():
            with gr.Column(scale=1):
                source_components = create_sources_column(ui_state)

            with gr.Column(scale=3):
                canvas_components = create_canvas_column(ui_state, source_components)

            with gr.Column(scale=2):
                create_result_column(ui_state, canvas_components)

    return app, custom_css


def create_sources_column(ui_state):
    """Create the upload and stock search controls.

    Args:
        ui_state: UI state component

    Returns:
        Dictionary of source components, wired up by create_canvas_column
    """
    gr.Markdown("### Add Images")

    upload = gr.Image(label="Upload", type="filepath", sources=["upload"], height=160)

    gr.Markdown("#### Stock Photos")
    with gr.Row():
        search_input = gr.Textbox(
            label="Search",
            placeholder="e.g. mountains, coffee, city at night",
            scale=3,
        )
        search_btn = gr.Button("Search", size="sm", scale=1)
    search_status = gr.Markdown("")
    stock_gallery = gr.Gallery(
        label="Results (click to add)",
        columns=3,
        height=300,
        object_fit="cover",
    )

    return {
        "upload": upload,
        "search_input": search_input,
        "search_btn": search_btn,
        "search_status": search_status,
        "stock_gallery": stock_gallery,
    }


def create_canvas_column(ui_state, sources):
    """Create the canvas view, tools, transform sliders and layer actions.

    Args:
        ui_state: UI state component
        sources: Components returned by create_sources_column

    Returns:
        Dictionary of canvas components for event handling
    """
    gr.Markdown("### Canvas")

    tool_radio = gr.Radio(
        choices=CANVAS_TOOLS,
        value="Select",
        label="Click tool",
    )

    canvas_image = gr.Image(
        label="Canvas",
        type="pil",
        interactive=False,
        width=config.canvas_width,
        height=config.canvas_height,
    )

    with gr.Row():
        scale_slider = gr.Slider(
            minimum=0.1,
            maximum=3.0,
            step=0.05,
            value=1.0,
            label="Scale",
            interactive=False,
        )
        rotation_slider = gr.Slider(
            minimum=0,
            maximum=359,
            step=1,
            value=0,
            label="Rotation (degrees)",
            interactive=False,
        )

    with gr.Row():
        action_buttons = [gr.Button(label, size="sm") for label in LAYER_ACTIONS]

    clear_btn = gr.Button("Clear Canvas", variant="stop", size="sm")

    canvas_status = gr.Markdown("")
    layer_info = gr.Markdown(
        "*Canvas is empty. Upload an image or add one from stock search.*",
        elem_classes=["layer-list"],
    )

    canvas_outputs = [
        canvas_image,
        layer_info,
        scale_slider,
        rotation_slider,
        canvas_status,
        ui_state,
    ]

    # Canvas clicks
    canvas_image.select(
        fn=canvas_click,
        inputs=[tool_radio, ui_state],
        outputs=canvas_outputs,
    )

    # Transform sliders
    scale_slider.release(
        fn=set_layer_scale,
        inputs=[scale_slider, ui_state],
        outputs=canvas_outputs,
    )
    rotation_slider.release(
        fn=set_layer_rotation,
        inputs=[rotation_slider, ui_state],
        outputs=canvas_outputs,
    )

    # Layer actions
    for button in action_buttons:
        button.click(
            fn=layer_action,
            inputs=[button, ui_state],
            outputs=canvas_outputs,
        )

    # Sources feed the canvas
    sources["upload"].upload(
        fn=add_uploaded_image,
        inputs=[sources["upload"], ui_state],
        outputs=canvas_outputs,
    )
    sources["search_btn"].click(
        fn=search_stock,
        inputs=[sources["search_input"], ui_state],
        outputs=[sources["stock_gallery"], sources["search_status"], ui_state],
    )
    sources["search_input"].submit(
        fn=search_stock,
        inputs=[sources["search_input"], ui_state],
        outputs=[sources["stock_gallery"], sources["search_status"], ui_state],
    )
    sources["stock_gallery"].select(
        fn=add_stock_photo,
        inputs=[ui_state],
        outputs=canvas_outputs,
    )

    return {
        "canvas_outputs": canvas_outputs,
        "clear_btn": clear_btn,
    }


def create_result_column(ui_state, canvas_components):
    """Create the prompt, result, edit and suggestion controls.

    Args:
        ui_state: UI state component
        canvas_components: Components returned by create_canvas_column
    """
    gr.Markdown("### Enhance")

    prompt_input = gr.Textbox(
        label="Enhancement prompt",
        placeholder="Leave blank to use the default professional-finish prompt",
        lines=3,
    )
    compare_checkbox = gr.Checkbox(
        label="A/B compare two models and keep the better result",
        value=False,
    )
    generate_btn = gr.Button("✨ Enhance Collage", variant="primary")

    status_output = gr.Markdown("*Ready*")

    result_image = gr.Image(
        label="Enhanced result",
        interactive=False,
        height=360,
    )
    comparison_output = gr.Markdown("")

    gr.Markdown("#### Refine")
    with gr.Row():
        edit_input = gr.Textbox(
            label="Edit instruction",
            placeholder="e.g. make the sky more dramatic",
            scale=3,
        )
        edit_btn = gr.Button("Apply Edit", scale=1)

    suggestions_radio = gr.Radio(
        choices=[],
        label="AI suggestions",
    )
    suggestion_btn = gr.Button("Apply Suggestion", size="sm")

    # Enhancement
    generate_btn.click(
        fn=enhance_collage,
        inputs=[prompt_input, compare_checkbox, ui_state],
        outputs=[result_image, comparison_output, suggestions_radio, status_output, ui_state],
    )

    # Edit and suggestions
    edit_btn.click(
        fn=edit_result,
        inputs=[edit_input, ui_state],
        outputs=[result_image, edit_input, status_output, ui_state],
    )
    suggestion_btn.click(
        fn=apply_suggestion,
        inputs=[suggestions_radio, ui_state],
        outputs=[result_image, edit_input, status_output, ui_state],
    )

    # Clear resets the canvas and the result panel
    canvas_outputs = canvas_components["canvas_outputs"]
    canvas_components["clear_btn"].click(
        fn=clear_canvas,
        inputs=[ui_state],
        outputs=canvas_outputs[:-1]
        + [result_image, comparison_output, suggestions_radio, ui_state],
    )


def main():
    """Main entry point for the Gradio application."""
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting Collageworks UI...")
    logger.info(f"Primary model: {config.primary_model}, secondary model: {config.secondary_model}")

    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
