#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
# -*- coding: utf-8 -*-
#

import json
import os
import pathlib
import re
from dataclasses import asdict, dataclass

# title [id] at the end of the file stem.
RX_ID: re.Pattern = re.compile(r"(?P<title>.+)\s+\[(?P<id>[^\]]+)\]\Z")

USER_SIGIL = "@"


def _as_text(value: str) -> str:
    """
    Return the value if it is valid unicode, otherwise an empty string.

    Undecodable file names reach us with lone surrogates (surrogateescape), they
    can't be written as UTF-8 so they are treated as having no usable text.
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return ""

    return value


def split_extension(name: str) -> tuple[str, str | None]:
    """
    Split a file name into stem and extension.

    :param name: The file base name.

    :return: (stem, extension), extension is None when the name has none.
    """
    if not name or name == "..":
        return name, None

    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        # no dot at all, or a dotfile like ".hidden"
        return name, None

    return stem, ext


def extract_id(stem: str) -> tuple[str, str] | None:
    """
    Extract the id and title from a file stem.

    :param stem: The file name without extension, e.g. "Some title [abc123]".

    :return: (id, title) or None if the stem doesn't end with a bracketed id.
    """
    match = RX_ID.search(stem)
    if not match:
        return None

    return match.group("id"), match.group("title")


def extract_user_name(component: str) -> str | None:
    """
    Return the path component if it names a user directory.

    :param component: A single directory name.

    :return: The component, sigil included, or None.
    """
    component = _as_text(component)
    if component.startswith(USER_SIGIL):
        return component

    return None


@dataclass
class MovieEntry:
    id: str
    user: str
    title: str

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "MovieEntry | None":
        """
        Build an entry from a file path.

        The id and title come from the file name, the user from the nearest
        ancestor directory starting with "@".

        :param path: Path to the movie file.

        :return: MovieEntry or None if either the id or the user is missing.
        """
        path = pathlib.PurePath(os.fsdecode(path))

        stem, _ = split_extension(path.name)
        found = extract_id(_as_text(stem))
        if not found:
            return None

        movie_id, title = found

        for component in reversed(path.parts[:-1]):
            user = extract_user_name(component)
            if user:
                return cls(id=movie_id, user=user, title=title)

        return None

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
