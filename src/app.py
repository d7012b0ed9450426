"""
src/app.py
"""


import logging
from pathlib import Path
from typing import List, Optional

import gradio as gr

from config import InvalidPortError, Provider, configure_logging
from config import sanitize_endpoint, sanitize_host, sanitize_port, sanitize_prompt
from context.settings_store import JsonSettingsStore
from context.windows import WindowInfo, find_window, refresh_selection
from orchestrator import prompts
from orchestrator.models import SessionState, ToolInvocation
from orchestrator.service import AIService, sync_selected_model
from orchestrator.session import AutomationSession
from tools.automation import capture_with_deadline, png_bytes
from tools.desktop import DesktopAutomation, list_windows
from tools.dispatcher import save_screenshot


logger = logging.getLogger(__name__)

APP_TITLE = "Window Assistant"
APP_DESC = (
    "Pick a window, then describe what you want done: "
    "'take a screenshot', 'type hello world', 'press command+s'. "
    "The assistant can capture the window, type text and send shortcuts."
)
DESKTOP_DIR = Path.home() / "Desktop"


def _window_choices(windows: List[WindowInfo]):

    return [(f"{w.display_title} ({w.subtitle})", w.id) for w in windows]

def render_transcript(session: AutomationSession) -> str:

    lines = [f"**{e.author.value}:** {e.content}" for e in session.transcript]
    if session.state is SessionState.FAILED and session.last_error:
        lines.append(f"**Error:** {session.last_error}")

    return "\n\n".join(lines) or "_No conversation yet._"


def app(service: Optional[AIService] = None, automation: Optional[DesktopAutomation] = None):

    service = service or AIService(JsonSettingsStore())
    automation = automation or DesktopAutomation()
    session = AutomationSession(service, automation)
    windows: List[WindowInfo] = list_windows()
    session.selected_window = find_window(windows, refresh_selection(windows, None))
    config = service.load_configuration()

    # -------- Handlers ---------------------------------------------------------

    def refresh_windows(selected_id):

        windows[:] = list_windows()
        selected_id = refresh_selection(windows, selected_id)
        session.selected_window = find_window(windows, selected_id)

        return gr.update(choices=_window_choices(windows), value=selected_id)

    def select_window(selected_id):

        session.selected_window = find_window(windows, selected_id)

    def run_automation(instruction: str):

        refusal = session.refusal(instruction)
        if refusal is None and not session.start(instruction):
            refusal = prompts.ALREADY_RUNNING
        if refusal:
            return render_transcript(session) + f"\n\n**Error:** {refusal}"

        return render_transcript(session)

    def reset():

        session.reset_conversation()

        return render_transcript(session)

    def capture():

        try:
            return capture_with_deadline(lambda: automation.capture_screenshot(session.selected_window)), ""
        except Exception as e:
            logger.exception("Manual capture failed")
            return None, str(e)

    def save_to_desktop(image):

        if image is None:
            return "Capture a screenshot first."
        try:
            path = save_screenshot(png_bytes(image), DESKTOP_DIR, session.selected_window)
        except OSError as e:
            return f"Failed to save screenshot: {e}"

        return f"Saved to {path}"

    def manual(name: str, **arguments):

        args = {k: str(v).lower() if isinstance(v, bool) else v for k, v in arguments.items()}
        try:
            return session.dispatcher.execute(ToolInvocation(name=name, arguments=args)).message
        except Exception as e:
            return str(e)

    def save_settings(provider, host, port, endpoint, api_key, model_id, prompt):

        try:
            configuration = service.load_configuration().model_copy(update={
                "provider": Provider(provider),
                "selected_model_id": model_id or None,
                "ollama_host": sanitize_host(host),
                "ollama_port": sanitize_port(port),
                "openai_endpoint": sanitize_endpoint(endpoint),
                "openai_api_key": api_key or None,
                "prompt": sanitize_prompt(prompt),
            })
            service.update_configuration(configuration)
            models = service.list_models(configuration.provider)
        except InvalidPortError as e:
            return gr.update(), str(e)
        except Exception as e:
            logger.exception("Saving settings failed")
            return gr.update(), str(e)

        selected = sync_selected_model(configuration.selected_model_id, models)
        if selected != configuration.selected_model_id:
            service.update_configuration(configuration.model_copy(update={"selected_model_id": selected}))

        return gr.update(choices=[m.id for m in models], value=selected), "Settings saved."

    def refresh_models(provider):

        try:
            models = service.list_models(Provider(provider))
        except Exception as e:
            return gr.update(choices=[]), str(e)

        if not models:
            return gr.update(choices=[]), f"No models reported by {Provider(provider).display_name}."

        selected = sync_selected_model(service.load_configuration().selected_model_id, models)

        return gr.update(choices=[m.id for m in models], value=selected), ""

    def test_connection(provider):

        return service.test_connection(Provider(provider)).message

    # -------- Layout -----------------------------------------------------------

    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(f"# {APP_TITLE}")
        gr.Markdown(APP_DESC)

        with gr.Row():
            window_dd = gr.Dropdown(
                label="Window",
                choices=_window_choices(windows),
                value=session.selected_window.id if session.selected_window else None,
            )
            refresh_btn = gr.Button("Refresh windows")

        with gr.Tab("Automation"):
            instruction = gr.Textbox(label="Instruction", placeholder="e.g., take a screenshot", lines=2)
            with gr.Row():
                run_btn = gr.Button("Run", variant="primary")
                reset_btn = gr.Button("Reset conversation")
            transcript = gr.Markdown(render_transcript(session))

        with gr.Tab("Manual"):
            with gr.Row():
                capture_btn = gr.Button("Capture screenshot")
                save_btn = gr.Button("Save to Desktop")
            shot = gr.Image(label="Screenshot", type="pil")
            text_in = gr.Textbox(label="Text to type")
            type_btn = gr.Button("Type text")
            with gr.Row():
                key_in = gr.Textbox(label="Key", placeholder="c, enter, escape")
                cmd_cb = gr.Checkbox(label="Command")
                opt_cb = gr.Checkbox(label="Option")
                ctl_cb = gr.Checkbox(label="Control")
                sft_cb = gr.Checkbox(label="Shift")
            shortcut_btn = gr.Button("Send shortcut")
            manual_status = gr.Markdown()

        with gr.Tab("Settings"):
            provider_dd = gr.Dropdown(
                label="Provider",
                choices=[(p.display_name, p.value) for p in Provider],
                value=config.provider.value,
            )
            host_in = gr.Textbox(label="Ollama host", value=config.ollama_host)
            port_in = gr.Textbox(label="Ollama port", value=str(config.ollama_port))
            endpoint_in = gr.Textbox(label="OpenAI endpoint", value=config.openai_endpoint)
            key_secret = gr.Textbox(label="OpenAI API key", type="password", value=config.openai_api_key or "")
            model_dd = gr.Dropdown(
                label="Model",
                choices=[config.selected_model_id] if config.selected_model_id else [],
                value=config.selected_model_id,
                allow_custom_value=True,
            )
            prompt_in = gr.Textbox(label="System prompt", value=config.prompt, lines=4)
            with gr.Row():
                save_settings_btn = gr.Button("Save", variant="primary")
                refresh_models_btn = gr.Button("Refresh models")
                test_btn = gr.Button("Test connection")
            settings_status = gr.Markdown()

        # Wire events
        refresh_btn.click(fn=refresh_windows, inputs=[window_dd], outputs=[window_dd])
        window_dd.change(fn=select_window, inputs=[window_dd], outputs=[])
        run_btn.click(fn=run_automation, inputs=[instruction], outputs=[transcript])
        reset_btn.click(fn=reset, inputs=[], outputs=[transcript])
        capture_btn.click(fn=capture, inputs=[], outputs=[shot, manual_status])
        save_btn.click(fn=save_to_desktop, inputs=[shot], outputs=[manual_status])
        type_btn.click(fn=lambda text: manual("type_text", text=text), inputs=[text_in], outputs=[manual_status])
        shortcut_btn.click(
            fn=lambda key, command, option, control, shift: manual(
                "send_shortcut", key=key, command=command, option=option, control=control, shift=shift
            ),
            inputs=[key_in, cmd_cb, opt_cb, ctl_cb, sft_cb],
            outputs=[manual_status],
        )
        save_settings_btn.click(
            fn=save_settings,
            inputs=[provider_dd, host_in, port_in, endpoint_in, key_secret, model_dd, prompt_in],
            outputs=[model_dd, settings_status],
        )
        refresh_models_btn.click(fn=refresh_models, inputs=[provider_dd], outputs=[model_dd, settings_status])
        test_btn.click(fn=test_connection, inputs=[provider_dd], outputs=[settings_status])

    return demo


if __name__ == "__main__":

    configure_logging()
    app().launch()

# EOF
