"""Browse paths: encoding, decoding and breadcrumbs.

A path is a ``/``-separated list of segments, each ``mode:value[|name]`` with
value and name URL-encoded, so that neither contains ``/``, ``:`` or ``|``.
"""

from urllib.parse import quote_plus, unquote_plus

from evernote_repository.models.listing import Breadcrumb, Segment
from evernote_repository.strings import get_string

# Modes contributing a category crumb, plus a leaf crumb when named.
_CATEGORY_MODES = {"tags": "tags", "searchs": "savedsearchs"}

# Modes contributing a crumb only when a name is present.
_NAMED_LEAF_MODES = {"notebook", "note"}


def encode_segment(mode: str, value: str = "", name: str = "", parent: str = "") -> str:
    """Build a path to a node, appended to ``parent`` when given.

    Args:
        mode: Kind of node, expected to match ``[a-z]+``.
        value: Identifier of the node, URL-encoded.
        name: Display name of the node, URL-encoded. Omitted when empty.
        parent: Path to append the node on, as returned by this function.
    """
    path = f"{mode}:{quote_plus(value, safe='')}"
    if name:
        path += "|" + quote_plus(name, safe="")
    parent = parent.strip("/")
    if parent:
        path = f"{parent}/{path}"
    return path


def decode_segment(segment: str) -> Segment:
    """Split one path segment into its mode, identifier and name."""
    mode, _, rest = segment.partition(":")
    value, _, name = rest.partition("|")
    return Segment(mode=mode, id=unquote_plus(value), name=unquote_plus(name))


def split_path(path: str) -> tuple[str, str]:
    """Split a path into its parent path and its last segment."""
    parent, _, last = path.rpartition("/")
    return parent, last


def build_breadcrumb(path: str) -> tuple[Breadcrumb, ...]:
    """Build the breadcrumb of a path.

    The trail starts with the repository root. Each segment adds zero, one or
    two crumbs depending on its mode; crumbs are linked from the path of the
    previous crumb, not from the raw segments, so that partial segments such
    as ``tags:`` still link correctly.
    """
    crumbs = [Breadcrumb(name=get_string("evernote"), path=encode_segment("root"))]
    trail = ""
    for raw in path.split("/"):
        seg = decode_segment(raw)
        mode = seg.mode
        if mode == "all":
            crumbs.append(Breadcrumb(get_string("allnotes"), encode_segment(mode)))
        elif mode in _CATEGORY_MODES:
            crumbs.append(
                Breadcrumb(get_string(_CATEGORY_MODES[mode]), encode_segment(mode, parent=trail))
            )
            if seg.name:
                crumbs.append(Breadcrumb(seg.name, encode_segment(mode, seg.id, seg.name, trail)))
        elif mode == "notebooks":
            crumbs.append(Breadcrumb(get_string("notebooks"), encode_segment(mode, parent=trail)))
        elif mode == "stack":
            crumbs.append(Breadcrumb(seg.id, encode_segment(mode, seg.id, parent=trail)))
        elif mode in _NAMED_LEAF_MODES:
            if seg.name:
                crumbs.append(Breadcrumb(seg.name, encode_segment(mode, seg.id, seg.name, trail)))
        elif mode == "mysearch":
            crumbs.append(
                Breadcrumb(get_string("searchresults"), encode_segment(mode, seg.id, parent=trail))
            )
        trail = crumbs[-1].path
    return tuple(crumbs)
