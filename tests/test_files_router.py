import os

import pytest

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def site(content_dir):
    (content_dir / "posts").mkdir()
    (content_dir / "posts" / "hello.md").write_text("# Hello\n", encoding="utf-8")
    (content_dir / "draft.md").write_text("---\ndraft: true\n---\n# WIP\n", encoding="utf-8")
    (content_dir / "logo.png").write_bytes(PNG_BYTES)
    (content_dir / "notes.txt").write_text("plain notes", encoding="utf-8")
    (content_dir / "page.html").write_text("<p>hi</p>", encoding="utf-8")
    (content_dir / "archive.zip").write_bytes(b"PK\x03\x04")
    (content_dir / "install.sh").write_text("echo hi", encoding="utf-8")
    (content_dir / ".secret").write_text("hidden", encoding="utf-8")
    (content_dir.parent / "outside.md").write_text("outside", encoding="utf-8")
    return content_dir


def test_index_lists_root(client, site):
    response = client.get("/")
    assert response.status_code == 200
    assert "posts" in response.text
    assert "/edit?path=draft.md" in response.text
    assert "/preview?path=logo.png" in response.text
    assert "/file-preview?path=notes.txt" in response.text
    assert ".secret" not in response.text


def test_index_executables_are_not_linked(client, site):
    response = client.get("/")
    assert "install.sh" in response.text
    assert "?path=install.sh" not in response.text


def test_index_subdirectory(client, site):
    response = client.get("/", params={"path": "posts"})
    assert response.status_code == 200
    assert "/edit?path=posts%2Fhello.md" in response.text
    assert "/new-file?path=posts" in response.text


def test_index_trailing_slash(client, site):
    response = client.get("/", params={"path": "posts/"})
    assert response.status_code == 200
    assert "/edit?path=posts%2Fhello.md" in response.text
    assert "%2F%2F" not in response.text
    assert 'href="/?path=posts">posts</a>' in response.text
    assert 'href="/?path=">' not in response.text


def test_index_empty_root(client, content_dir):
    response = client.get("/")
    assert response.status_code == 200
    assert "The target directory is empty." in response.text


def test_index_missing_directory(client, site):
    response = client.get("/", params={"path": "nope"})
    assert response.status_code == 400


def test_index_file_is_not_a_directory(client, site):
    response = client.get("/", params={"path": "notes.txt"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Path is not a directory"


def test_index_traversal_is_unauthorized(client, site):
    response = client.get("/", params={"path": ".."})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized access"


def test_edit_renders_editor(client, site):
    response = client.get("/edit", params={"path": "posts/hello.md"})
    assert response.status_code == 200
    assert "# Hello" in response.text
    assert 'name="csrf_token"' in response.text
    assert "badge draft" not in response.text


def test_edit_loads_preview_and_draft_scripts(client, site):
    response = client.get("/edit", params={"path": "posts/hello.md"})
    assert 'id="preview"' in response.text
    assert '<script src="/static/editor.js"></script>' in response.text
    assert '<script src="/static/editor-storage.js"></script>' in response.text


def test_edit_keeps_leading_newline(client, site):
    (site / "blank-start.md").write_text("\nbody", encoding="utf-8")
    response = client.get("/edit", params={"path": "blank-start.md"})
    # browsers drop one newline right after <textarea>, so a second must survive
    assert 'spellcheck="true">\n\nbody</textarea>' in response.text


def test_edit_shows_draft_badge(client, site):
    response = client.get("/edit", params={"path": "draft.md"})
    assert response.status_code == 200
    assert "badge draft" in response.text


def test_edit_survives_deeply_nested_frontmatter(client, site):
    (site / "deep.md").write_text('{"a": ' + "[" * 100000 + "]" * 100000 + "}\n# Hi", encoding="utf-8")
    response = client.get("/edit", params={"path": "deep.md"})
    assert response.status_code == 200
    assert "badge draft" not in response.text


def test_edit_escapes_content(client, site):
    (site / "xss.md").write_text("<script>alert(1)</script>", encoding="utf-8")
    response = client.get("/edit", params={"path": "xss.md"})
    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_edit_requires_path(client, site):
    response = client.get("/edit")
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing path parameter"


def test_edit_rejects_non_markdown(client, site):
    response = client.get("/edit", params={"path": "notes.txt"})
    assert response.status_code == 400
    assert response.json()["detail"] == "File is not a markdown file"


def test_edit_missing_file(client, site):
    response = client.get("/edit", params={"path": "missing.md"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Path does not exist"


def test_edit_traversal(client, site):
    response = client.get("/edit", params={"path": "../outside.md"})
    assert response.status_code == 401


def test_edit_directory_named_like_markdown(client, site):
    (site / "folder.md").mkdir()
    response = client.get("/edit", params={"path": "folder.md"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Path is not a file"


def test_save_with_valid_token(client, site, csrf_token):
    response = client.post(
        "/save",
        data={"path": "posts/hello.md", "content": "# Updated\n", "csrf_token": csrf_token},
    )
    assert response.status_code == 200
    assert "File Saved Successfully!" in response.text
    assert (site / "posts" / "hello.md").read_text(encoding="utf-8") == "# Updated\n"


def test_save_preserves_crlf(client, site, csrf_token):
    client.post(
        "/save",
        data={"path": "posts/hello.md", "content": "a\r\nb\r\n", "csrf_token": csrf_token},
    )
    assert (site / "posts" / "hello.md").read_bytes() == b"a\r\nb\r\n"


def test_save_unchanged_content_is_not_written(client, site, csrf_token):
    target = site / "posts" / "hello.md"
    os.utime(target, (1_000_000, 1_000_000))

    response = client.post(
        "/save",
        data={"path": "posts/hello.md", "content": "# Hello\n", "csrf_token": csrf_token},
    )

    assert response.status_code == 200
    assert "No Changes to Save" in response.text
    assert int(target.stat().st_mtime) == 1_000_000


def test_save_missing_token(client, site):
    response = client.post("/save", data={"path": "posts/hello.md", "content": "x"})
    assert response.status_code == 422
    assert (site / "posts" / "hello.md").read_text(encoding="utf-8") == "# Hello\n"


def test_save_invalid_token(client, site):
    response = client.post(
        "/save",
        data={"path": "posts/hello.md", "content": "x", "csrf_token": "1:2:deadbeef"},
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid CSRF Token"
    assert (site / "posts" / "hello.md").read_text(encoding="utf-8") == "# Hello\n"


def test_save_oversized_timestamp_token(client, site):
    response = client.post(
        "/save",
        data={"path": "posts/hello.md", "content": "x", "csrf_token": "9" * 5000 + ":1:" + "a" * 64},
    )
    assert response.status_code == 403
    assert (site / "posts" / "hello.md").read_text(encoding="utf-8") == "# Hello\n"


def test_save_traversal(client, site, csrf_token):
    response = client.post(
        "/save",
        data={"path": "../outside.md", "content": "pwned", "csrf_token": csrf_token},
    )
    assert response.status_code == 401
    assert (site.parent / "outside.md").read_text(encoding="utf-8") == "outside"


def test_save_does_not_create_files(client, site, csrf_token):
    response = client.post(
        "/save",
        data={"path": "new.md", "content": "x", "csrf_token": csrf_token},
    )
    assert response.status_code == 400
    assert not (site / "new.md").exists()


def test_save_rejects_non_markdown(client, site, csrf_token):
    response = client.post(
        "/save",
        data={"path": "notes.txt", "content": "x", "csrf_token": csrf_token},
    )
    assert response.status_code == 400
    assert (site / "notes.txt").read_text(encoding="utf-8") == "plain notes"


def test_delete_with_valid_token(client, site, csrf_token):
    response = client.post("/delete", data={"path": "notes.txt", "csrf_token": csrf_token})
    assert response.status_code == 200
    assert "File Deleted Successfully!" in response.text
    assert not (site / "notes.txt").exists()


def test_delete_invalid_token(client, site):
    response = client.post("/delete", data={"path": "notes.txt", "csrf_token": "garbage"})
    assert response.status_code == 403
    assert (site / "notes.txt").exists()


def test_delete_missing_token(client, site):
    response = client.post("/delete", data={"path": "notes.txt"})
    assert response.status_code == 422
    assert (site / "notes.txt").exists()


def test_delete_directory(client, site, csrf_token):
    response = client.post("/delete", data={"path": "posts", "csrf_token": csrf_token})
    assert response.status_code == 400
    assert (site / "posts").is_dir()


def test_delete_traversal(client, site, csrf_token):
    response = client.post("/delete", data={"path": "../outside.md", "csrf_token": csrf_token})
    assert response.status_code == 401
    assert (site.parent / "outside.md").exists()


def test_new_file_form(client, site):
    response = client.get("/new-file", params={"path": "posts"})
    assert response.status_code == 200
    assert "/posts" in response.text
    assert 'name="csrf_token"' in response.text


def test_new_file_form_trailing_slash(client, site):
    response = client.get("/new-file", params={"path": "posts/"})
    assert response.status_code == 200
    assert "<code>/posts</code>" in response.text


def test_new_file_form_missing_directory(client, site):
    response = client.get("/new-file", params={"path": "nope"})
    assert response.status_code == 400


def test_new_file_created_and_redirects(client, site, csrf_token):
    response = client.post(
        "/new-file",
        data={"path": "posts", "filename": "  My-Post.MD ", "csrf_token": csrf_token},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/edit?path=posts%2FMy-Post.md"
    assert (site / "posts" / "My-Post.md").read_bytes() == b""


def test_new_file_at_root(client, site, csrf_token):
    response = client.post(
        "/new-file",
        data={"filename": "about", "csrf_token": csrf_token},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/edit?path=about.md"
    assert (site / "about.md").exists()


def test_new_file_existing_file_is_not_overwritten(client, site, csrf_token):
    response = client.post(
        "/new-file",
        data={"path": "posts", "filename": "hello", "csrf_token": csrf_token},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "File already exists"
    assert (site / "posts" / "hello.md").read_text(encoding="utf-8") == "# Hello\n"


@pytest.mark.parametrize("filename", ["", "   ", "../evil", "a b", "café", ".hidden", "x/y"])
def test_new_file_rejects_bad_filenames(client, site, csrf_token, filename):
    before = sorted(p.name for p in site.iterdir())
    response = client.post(
        "/new-file",
        data={"path": "", "filename": filename, "csrf_token": csrf_token},
    )
    assert response.status_code == 400
    assert sorted(p.name for p in site.iterdir()) == before


def test_new_file_invalid_token(client, site):
    response = client.post(
        "/new-file",
        data={"path": "", "filename": "x", "csrf_token": "bad"},
    )
    assert response.status_code == 403
    assert not (site / "x.md").exists()


def test_new_file_traversal(client, site, csrf_token):
    response = client.post(
        "/new-file",
        data={"path": "..", "filename": "x", "csrf_token": csrf_token},
    )
    assert response.status_code == 401
    assert not (site.parent / "x.md").exists()


def test_image_preview_page(client, site):
    response = client.get("/preview", params={"path": "logo.png"})
    assert response.status_code == 200
    assert "/image?path=logo.png" in response.text
    assert "24 B" in response.text
    assert 'id="previewImage"' in response.text
    assert 'id="imageDimensions"' in response.text
    assert '<script src="/static/image-preview.js"></script>' in response.text


def test_image_preview_rejects_non_images(client, site):
    response = client.get("/preview", params={"path": "notes.txt"})
    assert response.status_code == 400
    assert response.json()["detail"] == "File is not an image file"


def test_image_served_with_content_type(client, site):
    response = client.get("/image", params={"path": "logo.png"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == PNG_BYTES


def test_image_traversal(client, site):
    (site.parent / "evil.png").write_bytes(PNG_BYTES)
    response = client.get("/image", params={"path": "../evil.png"})
    assert response.status_code == 401


def test_file_preview_iframe_for_safe_types(client, site):
    response = client.get("/file-preview", params={"path": "notes.txt"})
    assert response.status_code == 200
    assert "<iframe" in response.text
    assert "Text file" in response.text


def test_file_preview_without_iframe_for_blocked_types(client, site):
    response = client.get("/file-preview", params={"path": "archive.zip"})
    assert response.status_code == 200
    assert "<iframe" not in response.text
    assert "Preview is not available" in response.text


@pytest.mark.parametrize("path", ["draft.md", "logo.png"])
def test_file_preview_rejects_markdown_and_images(client, site, path):
    response = client.get("/file-preview", params={"path": path})
    assert response.status_code == 400
    assert response.json()["detail"] == "Use specific handlers for markdown and image files"


def test_file_served_with_security_headers(client, site):
    response = client.get("/file", params={"path": "notes.txt"})
    assert response.status_code == 200
    assert response.text == "plain notes"
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"


def test_file_html_served_as_html(client, site):
    response = client.get("/file", params={"path": "page.html"})
    assert response.headers["content-type"] == "text/html; charset=utf-8"


@pytest.mark.parametrize("path", ["archive.zip", "install.sh", "draft.md", "logo.png"])
def test_file_refuses_other_types(client, site, path):
    response = client.get("/file", params={"path": path})
    assert response.status_code == 403
    assert response.json()["detail"] == "File type not allowed for security reasons"


def test_file_info(client, site):
    target = site / "notes.txt"
    os.utime(target, (1_700_000_000, 1_700_000_000))

    response = client.get("/file-info", params={"path": "notes.txt"})

    assert response.status_code == 200
    assert response.json() == {"modified_time": "1700000000", "size": 11}


def test_file_info_missing(client, site):
    response = client.get("/file-info", params={"path": "nope.txt"})
    assert response.status_code == 400


def test_file_content(client, site):
    target = site / "posts" / "hello.md"
    os.utime(target, (1_700_000_000, 1_700_000_000))

    response = client.get("/file-content", params={"path": "posts/hello.md"})

    assert response.status_code == 200
    assert response.json() == {"content": "# Hello\n", "modified_time": "1700000000"}


def test_file_content_rejects_non_markdown(client, site):
    response = client.get("/file-content", params={"path": "notes.txt"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Only markdown files are supported"


def test_file_content_traversal(client, site):
    response = client.get("/file-content", params={"path": "../outside.md"})
    assert response.status_code == 401


@pytest.mark.parametrize(
    "script,needle",
    [
        ("editor.js", "stripFrontmatter"),
        ("editor-storage.js", "/file-content?path="),
        ("image-preview.js", "naturalWidth"),
    ],
)
def test_client_scripts_served(client, script, needle):
    response = client.get(f"/static/{script}")
    assert response.status_code == 200
    assert needle in response.text
