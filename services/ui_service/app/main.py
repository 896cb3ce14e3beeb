# services/ui_service/app/main.py

import gradio as gr
import fastapi
import logging
from dataclasses import dataclass
from typing import List, Optional

from core.auth import SupabaseAuthProvider
from core.config import settings
from core.models import IncomingFile
from core.storage import ImageStorage
from core.supabase_client import create_supabase_client
from .auth_routes import router as auth_router
from .session_gate import SessionGate
from .upload_panel import UploadPanel

# Setup logger
logger = logging.getLogger("Uploadly_Core").getChild("UIService")

# Follows the redirect target written by a handler, if any
REDIRECT_JS = "(target) => { if (target) { window.location.href = target; } return []; }"


@dataclass
class Workspace:
    """Per-visitor controllers, kept in gr.State."""
    gate: SessionGate
    panel: Optional[UploadPanel] = None


def emit_notifications(*controllers) -> None:
    for controller in controllers:
        if controller is None:
            continue
        for note in controller.drain_notifications():
            message = f"{note.title}: {note.description}" if note.description else note.title
            if note.is_error: gr.Warning(message)
            else: gr.Info(message)


def render(workspace: Optional[Workspace]):
    """Values for the shared outputs: state, redirect, app column, status view, user line, gallery, heading."""
    if workspace is None or not workspace.gate.is_authenticated or workspace.panel is None:
        target = (workspace.gate.consume_redirect() if workspace else None) or settings.LOGIN_ROUTE
        status = gr.update(value=f"Redirecting to [sign in]({target})...", visible=True)
        return workspace, target, gr.update(visible=False), status, "", [], ""

    gate, panel = workspace.gate, workspace.panel
    user = gate.user.email or gate.user.user_id
    images = [(image.url, image.name) for image in panel.images]
    heading = f"### ✅ Uploaded Images ({len(images)})" if images else ""
    return (workspace, gate.consume_redirect() or "", gr.update(visible=True), gr.update(visible=False),
            f"Signed in as **{user}**", images, heading)


# --- Gradio Interface Functions ---

async def on_load(request: gr.Request):
    """Mounts the session gate, then the upload panel when a session exists."""
    cookies = dict(request.cookies) if request is not None else {}
    try:
        client = await create_supabase_client()
    except Exception as e:
        logger.error(f"Failed to get Supabase client: {e}", exc_info=True)
        gr.Warning("Service unavailable: storage backend is not configured.")
        return render(None)

    provider = SupabaseAuthProvider(
        client,
        access_token=cookies.get(settings.ACCESS_TOKEN_COOKIE),
    )
    gate = SessionGate(provider)
    await gate.mount()
    workspace = Workspace(gate=gate)

    if gate.is_authenticated:
        logger.info(f"Session found for user {gate.user.user_id}; mounting upload panel.")
        workspace.panel = UploadPanel(ImageStorage(client))
        await workspace.panel.load_gallery()
    else:
        logger.info("No session on load; upload panel not rendered.")
        gate.unmount()

    emit_notifications(gate, workspace.panel)
    return render(workspace)


async def handle_upload(files: Optional[List[str]], workspace: Optional[Workspace]):
    """Uploads the dropped or selected files."""
    if workspace is None or workspace.panel is None or not workspace.gate.is_authenticated:
        return render(workspace) + (gr.update(value=None),)

    incoming = [IncomingFile.from_path(path) for path in (files or [])]
    logger.info(f"Received {len(incoming)} file(s) from the drop zone.")
    await workspace.panel.drop(incoming)
    emit_notifications(workspace.panel)
    return render(workspace) + (gr.update(value=None),) # Clear file input


def on_gallery_select(workspace: Optional[Workspace], evt: gr.SelectData):
    if workspace is None or workspace.panel is None:
        return None, ""
    try:
        image = workspace.panel.images[evt.index]
    except (IndexError, TypeError):
        return None, ""
    return image.id, f"Selected: `{image.name}`"


async def handle_delete(selected_id: Optional[str], workspace: Optional[Workspace]):
    if workspace is None or workspace.panel is None or not workspace.gate.is_authenticated:
        return render(workspace) + (None, "")
    if not selected_id:
        gr.Info("Select an image in the gallery first.")
        return render(workspace) + (None, "")

    await workspace.panel.remove_image(selected_id)
    emit_notifications(workspace.panel)
    return render(workspace) + (None, "")


async def handle_sign_out(workspace: Optional[Workspace]):
    if workspace is None:
        return render(None)
    signed_out = await workspace.gate.sign_out()
    emit_notifications(workspace.gate)
    if not workspace.gate.is_authenticated:
        workspace.gate.unmount()
        if signed_out and workspace.gate.redirect_to:
            # The login view must not trade the old refresh cookie for a new session
            workspace.gate.redirect_to = f"{workspace.gate.redirect_to}?signed_out=1"
    return render(workspace)


# --- Build Gradio Interface ---
with gr.Blocks(theme=gr.themes.Soft(), title="Uploadly") as demo:
    workspace_state = gr.State(None)
    selected_image = gr.State(None)
    redirect_target = gr.Textbox(visible=False)

    status_view = gr.Markdown("Loading...")
    with gr.Column(visible=False) as app_column:
        with gr.Row():
            user_line = gr.Markdown()
            sign_out_button = gr.Button("Sign Out", variant="secondary", scale=0)
        gr.Markdown("# Uploadly")
        gr.Markdown("Simple image upload to Supabase")
        file_input = gr.File(label="Drop your images here or click to browse your files", file_count="multiple", file_types=["image"], type="filepath")
        gallery_heading = gr.Markdown()
        gallery = gr.Gallery(label="Uploaded Images", columns=3, object_fit="cover", allow_preview=True)
        with gr.Row():
            selected_label = gr.Markdown()
            delete_button = gr.Button("✖ Delete Selected", variant="stop", scale=0)

    # --- Connect UI elements to functions ---
    shared_outputs = [workspace_state, redirect_target, app_column, status_view, user_line, gallery, gallery_heading]
    demo.load(on_load, inputs=None, outputs=shared_outputs)\
        .then(None, inputs=[redirect_target], outputs=None, js=REDIRECT_JS)
    file_input.upload(handle_upload, inputs=[file_input, workspace_state], outputs=shared_outputs + [file_input])\
        .then(None, inputs=[redirect_target], outputs=None, js=REDIRECT_JS)
    gallery.select(on_gallery_select, inputs=[workspace_state], outputs=[selected_image, selected_label])
    delete_button.click(handle_delete, inputs=[selected_image, workspace_state], outputs=shared_outputs + [selected_image, selected_label])\
        .then(None, inputs=[redirect_target], outputs=None, js=REDIRECT_JS)
    sign_out_button.click(handle_sign_out, inputs=[workspace_state], outputs=shared_outputs)\
        .then(None, inputs=[redirect_target], outputs=None, js=REDIRECT_JS)


# --- Mount Gradio app within FastAPI ---
app = fastapi.FastAPI(title="Uploadly", description="Drag-and-drop image uploads to Supabase Storage", version="1.0.0")
app.include_router(auth_router)

@app.get("/")
async def root():
    return {"message": f"Uploadly UI Service is running. Access the Gradio interface at {settings.UI_PATH}"}

@app.get("/health")
async def health_check():
    configured = bool(settings.SUPABASE_URL and settings.SUPABASE_KEY)
    return {"status": "ok", "supabase_configured": configured, "bucket": settings.IMAGE_BUCKET}

app = gr.mount_gradio_app(app, demo, path=settings.UI_PATH)
logger.info(f"UI Service Ready. Gradio interface available at {settings.UI_PATH}")
