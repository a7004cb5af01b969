"""Optional YAML or JSON frontmatter at the start of a markdown document.

Only a handful of well-known fields are interpreted; everything else is
kept verbatim in ``extra``. Frontmatter is advisory, so a block that is
unterminated, unparseable or not a mapping is simply treated as absent.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class FrontmatterFormat(Enum):
    YAML = "yaml"
    JSON = "json"


@dataclass
class Frontmatter:
    draft: bool | None = None
    title: str | None = None
    date: str | None = None
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


class _JsonCompatibleLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings."""


_JsonCompatibleLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def extract_yaml(content: str) -> str | None:
    if content.startswith("---\n"):
        start = 4
    elif content.startswith("---\r\n"):
        start = 5
    else:
        return None

    offset = start
    for line in content[start:].split("\n"):
        if line.strip() == "---":
            return content[start:offset]
        offset = min(len(content), offset + len(line) + 1)

    return None


def extract_json(content: str) -> str | None:
    if not content.startswith("{"):
        return None

    depth = 0
    in_string = False
    escape_next = False

    for idx, ch in enumerate(content):
        if in_string:
            if escape_next:
                escape_next = False
            elif ch == "\\":
                escape_next = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                end = idx + 1
                remainder = content[end:]
                if not remainder or remainder.lstrip(" \t\r").startswith("\n"):
                    return content[:end]
                # something else follows the object on the same line
                return None

    return None


def extract(content: str) -> tuple[FrontmatterFormat, str] | None:
    block = extract_yaml(content)
    if block is not None:
        return FrontmatterFormat.YAML, block

    block = extract_json(content)
    if block is not None:
        return FrontmatterFormat.JSON, block

    return None


def coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in ("true", "yes", "on", "1"):
            return True
        if normalized in ("false", "no", "off", "0"):
            return False
        return None
    if isinstance(value, int):
        return {0: False, 1: True}.get(value)
    return None


def coerce_string(value: Any) -> str | None:
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, int):
        text = str(value)
    elif isinstance(value, float):
        text = str(int(value)) if math.isfinite(value) and value.is_integer() else str(value)
    else:
        return None
    return text or None


def coerce_string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [text for text in map(coerce_string, value) if text is not None]

    if isinstance(value, str):
        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]
        text = value.strip()
        return [text] if text else []

    text = coerce_string(value)
    return [text] if text is not None else []


def _load(fmt: FrontmatterFormat, block: str) -> Any:
    if fmt is FrontmatterFormat.YAML:
        return yaml.load(block, Loader=_JsonCompatibleLoader)
    return json.loads(block)


def parse(content: str) -> Frontmatter | None:
    found = extract(content)
    if found is None:
        return None
    fmt, block = found

    try:
        data = _load(fmt, block)
    except (yaml.YAMLError, ValueError, RecursionError) as e:
        logger.debug("Ignoring unparseable %s frontmatter: %s", fmt.value, e)
        return None

    if not isinstance(data, dict):
        return None

    data = {str(key): value for key, value in data.items()}
    return Frontmatter(
        draft=coerce_bool(data.pop("draft", None)),
        title=coerce_string(data.pop("title", None)),
        date=coerce_string(data.pop("date", None)),
        tags=coerce_string_list(data.pop("tags", None)),
        categories=coerce_string_list(data.pop("categories", None)),
        extra=data,
    )


def has_draft(content: str) -> bool:
    parsed = parse(content)
    return bool(parsed and parsed.draft)
