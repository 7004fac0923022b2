"""Identifier normalizer — map a DocFX symbol uid to its ScriptReference page.

Unity's ScriptReference pages are named after the symbol with the root
namespace dropped, generic markers flattened and member pages joined to their
type with a hyphen (``GameObject-activeSelf.html``). The uid emitted by DocFX
is rewritten into that form by an ordered chain of small pure steps::

    UnityEngine.GameObject.#ctor     -> GameObject-ctor.html
    UnityEngine.List``1              -> List.html
    UnityEngine.Transform.position   -> Transform-position.html

Order matters: the arity marker contains backticks, so it has to be removed
before the remaining backticks become underscores, and the parameter list has
to be gone before the member segment is located.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

NAMESPACE_PREFIX = "N:"
MEMBER_PREFIXES = ("P:", "F:", "M:")
ROOT_NAMESPACES = ("UnityEngine", "UnityEditor")

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_ARITY_RE = re.compile(r"``\d+")
_TRAILING_STAR_RE = re.compile(r"\*$")
# Greedy: first "(" through last ")".
_PARAMETERS_RE = re.compile(r"\(.*\)")
# A final dot-separated segment that starts with a lowercase letter.
_MEMBER_SEGMENT_RE = re.compile(r"\.([a-z][^.]*)$")


@dataclass(frozen=True)
class RewriteStep:
    """A named rewrite applied to the href being built."""

    name: str
    apply: Callable[[str, str], str]
    """``apply(href, comment_id) -> href``"""


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def root_namespace_stripper(root_namespaces: tuple[str, ...]) -> Callable[[str, str], str]:
    """Build a step that drops one leading ``<root>.`` prefix.

    Only the start of the uid is considered, so a nested segment that repeats
    a root name (``UnityEngine.UnityEngine.Foo``) keeps its later occurrence.
    """
    if not root_namespaces:
        return lambda href, comment_id: href

    alternatives = "|".join(re.escape(ns) for ns in root_namespaces)
    pattern = re.compile(rf"^(?:{alternatives})\.")

    def strip_root_namespace(href: str, comment_id: str) -> str:
        return pattern.sub("", href, count=1)

    return strip_root_namespace


def replace_constructor_marker(href: str, comment_id: str) -> str:
    return href.replace(".#ctor", "-ctor")


def remove_arity_markers(href: str, comment_id: str) -> str:
    return _ARITY_RE.sub("", href)


def replace_backticks(href: str, comment_id: str) -> str:
    return href.replace("`", "_")


def remove_trailing_star(href: str, comment_id: str) -> str:
    return _TRAILING_STAR_RE.sub("", href)


def remove_parameter_list(href: str, comment_id: str) -> str:
    return _PARAMETERS_RE.sub("", href, count=1)


def hyphenate_member(href: str, comment_id: str) -> str:
    """Join a lowercase member name to its type: ``Transform.position`` -> ``Transform-position``."""
    if not comment_id.startswith(MEMBER_PREFIXES):
        return href
    return _MEMBER_SEGMENT_RE.sub(r"-\1", href)


def build_rewrite_chain(root_namespaces: tuple[str, ...] = ROOT_NAMESPACES) -> tuple[RewriteStep, ...]:
    """Return the ordered rewrite chain for the given root namespaces."""
    return (
        RewriteStep("strip-root-namespace", root_namespace_stripper(tuple(root_namespaces))),
        RewriteStep("constructor", replace_constructor_marker),
        RewriteStep("generic-arity", remove_arity_markers),
        RewriteStep("generic-backtick", replace_backticks),
        RewriteStep("overload-star", remove_trailing_star),
        RewriteStep("parameter-list", remove_parameter_list),
        RewriteStep("member-hyphen", hyphenate_member),
    )


DEFAULT_CHAIN = build_rewrite_chain()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_namespace(comment_id: str) -> bool:
    return comment_id.startswith(NAMESPACE_PREFIX)


def page_name(uid: str, comment_id: str, chain: tuple[RewriteStep, ...] = DEFAULT_CHAIN) -> str:
    """Return the page name (without base URL or extension) for a symbol.

    Namespaces have no page of their own and map to ``index``.
    """
    if is_namespace(comment_id):
        return "index"

    href = uid
    for step in chain:
        href = step.apply(href, comment_id)
    return href


def normalize(
    uid: str,
    comment_id: str,
    base_url: str,
    chain: tuple[RewriteStep, ...] = DEFAULT_CHAIN,
) -> str:
    """Compute the documentation URL for a symbol.

    Args:
        uid: DocFX uid, e.g. ``UnityEngine.Transform.position``.
        comment_id: DocFX commentId, e.g. ``P:UnityEngine.Transform.position``.
        base_url: ScriptReference root for the version, ending in ``/``.
        chain: Rewrite chain; defaults to the Unity root namespaces.

    Returns:
        ``base_url + page + ".html"``. Never raises for string input.
    """
    return f"{base_url}{page_name(uid, comment_id, chain)}.html"
