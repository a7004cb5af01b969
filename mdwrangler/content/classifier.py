"""Extension-based file classification.

Classification looks at the name only; file contents are never sniffed.
A renamed file is classified by its new extension.
"""

from enum import Enum


class FileCategory(str, Enum):
    DIRECTORY = "directory"
    MARKDOWN = "markdown"
    IMAGE = "image"
    EXECUTABLE = "executable"
    IFRAME_SAFE = "iframe_safe"
    BLOCKED = "blocked"


MARKDOWN_EXTENSIONS = frozenset({"md", "markdown"})

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "tiff", "tif"})

EXECUTABLE_EXTENSIONS = frozenset(
    {"exe", "bat", "cmd", "com", "scr", "msi", "sh", "ps1", "vbs", "app", "dmg", "pkg", "deb", "rpm"}
)

# Text, web and document formats a browser can display in a sandboxed iframe
IFRAME_SAFE_EXTENSIONS = frozenset(
    {
        "txt", "html", "htm", "css", "js", "json", "xml", "pdf", "csv",
        "log", "yml", "yaml", "toml", "ini", "conf", "cfg",
    }
)

IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
}

IFRAME_CONTENT_TYPES = {
    "txt": "text/plain; charset=utf-8",
    "log": "text/plain; charset=utf-8",
    "html": "text/html; charset=utf-8",
    "htm": "text/html; charset=utf-8",
    "css": "text/css; charset=utf-8",
    "js": "application/javascript; charset=utf-8",
    "json": "application/json; charset=utf-8",
    "xml": "application/xml; charset=utf-8",
    "pdf": "application/pdf",
    "csv": "text/csv; charset=utf-8",
    "yml": "text/yaml; charset=utf-8",
    "yaml": "text/yaml; charset=utf-8",
    "toml": "text/plain; charset=utf-8",
    "ini": "text/plain; charset=utf-8",
    "conf": "text/plain; charset=utf-8",
    "cfg": "text/plain; charset=utf-8",
}

_TYPE_DESCRIPTIONS = {
    "txt": "Text file",
    "html": "HTML document",
    "htm": "HTML document",
    "css": "CSS stylesheet",
    "js": "JavaScript file",
    "json": "JSON data",
    "xml": "XML document",
    "pdf": "PDF document",
    "csv": "CSV data",
    "log": "Log file",
    "yml": "YAML configuration",
    "yaml": "YAML configuration",
    "toml": "TOML configuration",
    "ini": "Configuration file",
    "conf": "Configuration file",
    "cfg": "Configuration file",
}


def extension(path: str) -> str:
    """Lowercased text after the final '.', or '' when there is none."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def classify(path: str, is_directory: bool = False) -> FileCategory:
    if is_directory:
        return FileCategory.DIRECTORY

    ext = extension(path)
    if ext in MARKDOWN_EXTENSIONS:
        return FileCategory.MARKDOWN
    if ext in IMAGE_EXTENSIONS:
        return FileCategory.IMAGE
    if ext in EXECUTABLE_EXTENSIONS:
        return FileCategory.EXECUTABLE
    if ext in IFRAME_SAFE_EXTENSIONS:
        return FileCategory.IFRAME_SAFE
    return FileCategory.BLOCKED


def image_content_type(path: str) -> str:
    return IMAGE_CONTENT_TYPES.get(extension(path), "application/octet-stream")


def iframe_content_type(path: str) -> str:
    return IFRAME_CONTENT_TYPES.get(extension(path), "text/plain; charset=utf-8")


def describe_file_type(path: str) -> str:
    ext = extension(path)
    if ext in _TYPE_DESCRIPTIONS:
        return _TYPE_DESCRIPTIONS[ext]
    if ext in EXECUTABLE_EXTENSIONS:
        return "Executable file"
    return "Unknown file type"
