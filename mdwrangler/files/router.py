"""Browse, preview, create, edit and delete files under the sandbox root."""

import logging
from dataclasses import asdict
from pathlib import Path

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from mdwrangler.content.classifier import (
    FileCategory,
    classify,
    describe_file_type,
    iframe_content_type,
    image_content_type,
)
from mdwrangler.content.filenames import normalize_markdown_filename
from mdwrangler.content.frontmatter import has_draft
from mdwrangler.files import storage
from mdwrangler.files.views import (
    build_breadcrumbs,
    build_entry_views,
    directory_url,
    encode,
    parent_directory_url,
    path_url,
)
from mdwrangler.security.csrf import CsrfSecret, issue_token, verify_token
from mdwrangler.security.paths import PathSandbox

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))

router = APIRouter(tags=["files"])


def get_sandbox(request: Request) -> PathSandbox:
    return request.app.state.sandbox


def get_csrf_secret(request: Request) -> CsrfSecret:
    return request.app.state.csrf_secret


def require_path(path: str | None) -> str:
    if path is None:
        raise HTTPException(400, "Missing path parameter")
    return path


def status_page(request: Request, title: str, heading: str, file_path: str, detail_text: str, editable: bool):
    return templates.TemplateResponse(
        request,
        "status_page.html",
        {
            "title": f"{title} - Markdown Wrangler",
            "heading": heading,
            "heading_class": "success",
            "file_path": file_path,
            "detail_text": detail_text,
            "show_edit_button": editable,
            "edit_url": path_url("/edit", file_path) if editable else "",
            "back_url": parent_directory_url(file_path),
        },
    )


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, path: str = "", sandbox: PathSandbox = Depends(get_sandbox)):
    path = path.rstrip("/")
    entries = sandbox.list_directory(path)
    parent_url = directory_url(path.rsplit("/", 1)[0]) if "/" in path else "/"

    return templates.TemplateResponse(
        request,
        "directory.html",
        {
            "at_root": not path,
            "breadcrumbs": build_breadcrumbs(path),
            "has_parent": bool(path),
            "parent_url": parent_url,
            "new_file_url": path_url("/new-file", path) if path else "/new-file",
            "entries": build_entry_views(entries),
        },
    )


@router.get("/new-file", response_class=HTMLResponse)
async def new_file_form(
    request: Request,
    path: str = "",
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    path = path.rstrip("/")
    sandbox.validate_directory(path)

    return templates.TemplateResponse(
        request,
        "new_file.html",
        {
            "current_path_display": f"/{path}",
            "path_value": path,
            "back_url": directory_url(path),
            "csrf_token": issue_token(secret),
        },
    )


@router.post("/new-file")
async def create_new_file(
    path: str = Form(""),
    filename: str = Form(""),
    csrf_token: str = Form(...),
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    verify_token(csrf_token, secret)

    directory = sandbox.validate_directory(path)
    markdown_filename = normalize_markdown_filename(filename)

    try:
        storage.create_empty(directory / markdown_filename)
    except FileExistsError:
        raise HTTPException(400, "File already exists")

    parent = path.rstrip("/")
    new_path = f"{parent}/{markdown_filename}" if parent else markdown_filename
    logger.info(f"File created: {new_path}")
    return RedirectResponse(path_url("/edit", new_path), status_code=303)


@router.get("/edit", response_class=HTMLResponse)
async def edit_file(
    request: Request,
    path: str | None = None,
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    file_path = require_path(path)
    if classify(file_path) is not FileCategory.MARKDOWN:
        raise HTTPException(400, "File is not a markdown file")

    content = storage.read_text(sandbox.validate_file(file_path))

    return templates.TemplateResponse(
        request,
        "editor.html",
        {
            "file_path": file_path,
            "encoded_path": encode(file_path),
            "back_url": parent_directory_url(file_path),
            "content": content,
            "csrf_token": issue_token(secret),
            "is_draft": has_draft(content),
        },
    )


@router.post("/save", response_class=HTMLResponse)
async def save_file(
    request: Request,
    path: str = Form(...),
    content: str = Form(""),
    csrf_token: str = Form(...),
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    verify_token(csrf_token, secret)

    if classify(path) is not FileCategory.MARKDOWN:
        raise HTTPException(400, "File is not a markdown file")

    full_path = sandbox.validate_file(path)
    if not storage.save_if_changed(full_path, content):
        logger.info(f"File content unchanged, skipping write: {path}")
        return status_page(request, "File Unchanged", "ℹ️ No Changes to Save", path, "content is unchanged.", True)

    logger.info(f"File saved successfully: {path}")
    return status_page(request, "File Saved", "✅ File Saved Successfully!", path, "has been saved.", True)


@router.post("/delete", response_class=HTMLResponse)
async def delete_file(
    request: Request,
    path: str = Form(...),
    csrf_token: str = Form(...),
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    verify_token(csrf_token, secret)

    storage.delete(sandbox.validate_file(path))
    logger.info(f"File deleted successfully: {path}")
    return status_page(request, "File Deleted", "🗑️ File Deleted Successfully!", path, "has been deleted.", False)


@router.get("/preview", response_class=HTMLResponse)
async def preview_image(
    request: Request,
    path: str | None = None,
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    file_path = require_path(path)
    if classify(file_path) is not FileCategory.IMAGE:
        raise HTTPException(400, "File is not an image file")

    full_path = sandbox.validate_file(file_path)

    return templates.TemplateResponse(
        request,
        "image_preview.html",
        {
            "file_path": file_path,
            "encoded_path": encode(file_path),
            "file_size": storage.format_file_size(full_path.stat().st_size),
            "parent_path": parent_directory_url(file_path),
            "csrf_token": issue_token(secret),
        },
    )


@router.get("/image")
async def serve_image(path: str | None = None, sandbox: PathSandbox = Depends(get_sandbox)):
    file_path = require_path(path)
    if classify(file_path) is not FileCategory.IMAGE:
        raise HTTPException(400, "File is not an image file")

    full_path = sandbox.validate_file(file_path)
    return Response(content=full_path.read_bytes(), media_type=image_content_type(file_path))


@router.get("/file-preview", response_class=HTMLResponse)
async def preview_file(
    request: Request,
    path: str | None = None,
    sandbox: PathSandbox = Depends(get_sandbox),
    secret: CsrfSecret = Depends(get_csrf_secret),
):
    file_path = require_path(path)
    category = classify(file_path)
    if category in (FileCategory.MARKDOWN, FileCategory.IMAGE):
        raise HTTPException(400, "Use specific handlers for markdown and image files")

    full_path = sandbox.validate_file(file_path)
    try:
        file_size = storage.format_file_size(full_path.stat().st_size)
    except OSError as e:
        logger.warning(f"Failed to get file size: {e}")
        file_size = "Unknown"

    return templates.TemplateResponse(
        request,
        "file_preview.html",
        {
            "file_path": file_path,
            "encoded_path": encode(file_path),
            "file_size": file_size,
            "file_type": describe_file_type(file_path),
            "parent_path": parent_directory_url(file_path),
            "csrf_token": issue_token(secret),
            "can_iframe": category is FileCategory.IFRAME_SAFE,
        },
    )


@router.get("/file")
async def serve_file(path: str | None = None, sandbox: PathSandbox = Depends(get_sandbox)):
    file_path = require_path(path)
    if classify(file_path) is not FileCategory.IFRAME_SAFE:
        raise HTTPException(403, "File type not allowed for security reasons")

    full_path = sandbox.validate_file(file_path)
    return Response(
        content=full_path.read_bytes(),
        media_type=iframe_content_type(file_path),
        headers={
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "SAMEORIGIN",
        },
    )


@router.get("/file-info")
async def get_file_info(path: str | None = None, sandbox: PathSandbox = Depends(get_sandbox)):
    full_path = sandbox.validate_file(require_path(path))
    return asdict(storage.file_info(full_path))


@router.get("/file-content")
async def get_file_content(path: str | None = None, sandbox: PathSandbox = Depends(get_sandbox)):
    file_path = require_path(path)
    if classify(file_path) is not FileCategory.MARKDOWN:
        raise HTTPException(400, "Only markdown files are supported")

    full_path = sandbox.validate_file(file_path)
    return {
        "content": storage.read_text(full_path),
        "modified_time": storage.modification_time(full_path),
    }
