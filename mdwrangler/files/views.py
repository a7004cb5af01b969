"""View-model helpers for the file browser templates."""

from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import quote

from mdwrangler.content.classifier import FileCategory, classify
from mdwrangler.security.paths import DirectoryEntry


@dataclass
class Breadcrumb:
    name: str
    url: str


@dataclass
class EntryView:
    icon: str
    class_name: str
    name: str
    url: str | None
    executable: bool = False

    @property
    def has_url(self) -> bool:
        return self.url is not None


# category -> (icon, url route); executables get no route
_ENTRY_STYLES = {
    FileCategory.DIRECTORY: ("📁", "/"),
    FileCategory.MARKDOWN: ("📄", "/edit"),
    FileCategory.IMAGE: ("🖼️", "/preview"),
    FileCategory.EXECUTABLE: ("⚠️", None),
    FileCategory.IFRAME_SAFE: ("📄", "/file-preview"),
    FileCategory.BLOCKED: ("📄", "/file-preview"),
}


def encode(path: str) -> str:
    return quote(path, safe="")


def path_url(route: str, path: str) -> str:
    return f"{route}?path={encode(path)}"


def directory_url(path: str) -> str:
    return path_url("/", path) if path else "/"


def parent_directory_url(file_path: str) -> str:
    parent = str(PurePosixPath(file_path).parent)
    if parent in ("", "."):
        return "/"
    return path_url("/", parent)


def build_breadcrumbs(current_path: str) -> list[Breadcrumb]:
    if not current_path:
        return []

    crumbs = []
    so_far = ""
    for part in current_path.split("/"):
        so_far = f"{so_far}/{part}" if so_far else part
        crumbs.append(Breadcrumb(name=part, url=path_url("/", so_far)))
    return crumbs


def build_entry_views(entries: list[DirectoryEntry]) -> list[EntryView]:
    views = []
    for entry in entries:
        category = classify(entry.name, is_directory=entry.is_directory)
        icon, route = _ENTRY_STYLES[category]
        views.append(
            EntryView(
                icon=icon,
                class_name="directory" if category is FileCategory.DIRECTORY else "file",
                name=entry.name,
                url=path_url(route, entry.path) if route else None,
                executable=category is FileCategory.EXECUTABLE,
            )
        )
    return views
