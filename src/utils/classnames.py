"""CSS class-name helpers for server-rendered views.

``cn`` joins class-name fragments and resolves conflicting Tailwind
utilities so the last one wins:

    cn("px-2 py-1", "px-4")  ->  "py-1 px-4"
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

ClassValue = Union[str, int, float, bool, None, Mapping[str, object], Iterable["ClassValue"]]

WHITESPACE = re.compile(r"\s+")
LENGTH_VALUE = re.compile(r"^\[(?:length:)?-?\d*\.?\d+(?:px|r?em|%|vh|vw|ch|ex|pt)?\]$")

# Tailwind theme scales used to tell groups apart
FONT_SIZES = frozenset({"xs", "sm", "base", "lg", "xl"} | {f"{n}xl" for n in range(2, 10)})
FONT_WEIGHTS = frozenset({
    "thin", "extralight", "light", "normal", "medium", "semibold", "bold", "extrabold", "black",
})
TEXT_ALIGNS = frozenset({"left", "center", "right", "justify", "start", "end"})
BORDER_STYLES = frozenset({"solid", "dashed", "dotted", "double", "hidden", "none"})
SHADOW_SIZES = frozenset({"sm", "md", "lg", "xl", "2xl", "inner", "none"})
BG_POSITIONS = frozenset({
    "bottom", "center", "left", "left-bottom", "left-top",
    "right", "right-bottom", "right-top", "top",
})
BG_SIZES = frozenset({"auto", "cover", "contain"})
BG_ATTACHMENTS = frozenset({"fixed", "local", "scroll"})
OBJECT_FITS = frozenset({"contain", "cover", "fill", "none", "scale-down"})
OUTLINE_STYLES = frozenset({"none", "dashed", "dotted", "double"})

# Classes that are a group on their own
STANDALONE: Dict[str, str] = {
    **{d: "display" for d in (
        "block", "inline-block", "inline", "flex", "inline-flex", "table", "inline-table",
        "grid", "inline-grid", "contents", "flow-root", "list-item", "hidden",
    )},
    **{p: "position" for p in ("static", "fixed", "absolute", "relative", "sticky")},
    **{v: "visibility" for v in ("visible", "invisible", "collapse")},
    **{t: "text-transform" for t in ("uppercase", "lowercase", "capitalize", "normal-case")},
    **{d: "text-decoration" for d in ("underline", "overline", "line-through", "no-underline")},
    **{s: "font-style" for s in ("italic", "not-italic")},
    **{t: "truncate" for t in ("truncate",)},
    "grow": "grow",
    "shrink": "shrink",
    "border": "border-w",
    "border-x": "border-w-x",
    "border-y": "border-w-y",
    "border-t": "border-w-t",
    "border-r": "border-w-r",
    "border-b": "border-w-b",
    "border-l": "border-w-l",
    "rounded": "rounded",
    "shadow": "shadow",
    "ring": "ring-w",
    "ring-inset": "ring-inset",
    "outline": "outline-style",
    "transition": "transition",
    "container": "container",
    "sr-only": "sr",
    "not-sr-only": "sr",
}

SIDES = ("x", "y", "s", "e", "t", "r", "b", "l")
CORNERS = ("s", "e", "t", "r", "b", "l", "ss", "se", "ee", "es", "tl", "tr", "br", "bl")


def _text_group(value: str) -> str:
    if value in FONT_SIZES or LENGTH_VALUE.match(value):
        return "font-size"
    if value in TEXT_ALIGNS:
        return "text-align"
    if value in {"ellipsis", "clip"}:
        return "text-overflow"
    if value in {"wrap", "nowrap", "balance", "pretty"}:
        return "text-wrap"
    return "text-color"


def _font_group(value: str) -> str:
    return "font-weight" if value in FONT_WEIGHTS else "font-family"


def _bg_group(value: str) -> str:
    if value in BG_ATTACHMENTS:
        return "bg-attachment"
    if value in BG_SIZES:
        return "bg-size"
    if value in BG_POSITIONS:
        return "bg-position"
    if value == "none" or value.startswith("gradient-"):
        return "bg-image"
    if value.startswith("repeat") or value == "no-repeat":
        return "bg-repeat"
    if value.startswith("clip-"):
        return "bg-clip"
    return "bg-color"


def _border_group(side: str) -> Callable[[str], str]:
    suffix = f"-{side}" if side else ""

    def resolve(value: str) -> str:
        if value.isdigit() or LENGTH_VALUE.match(value):
            return f"border-w{suffix}"
        if not side and value in BORDER_STYLES:
            return "border-style"
        return f"border-color{suffix}"

    return resolve


def _shadow_group(value: str) -> str:
    return "shadow" if value in SHADOW_SIZES else "shadow-color"


def _width_or_color(width_group: str, color_group: str) -> Callable[[str], str]:
    def resolve(value: str) -> str:
        if value.isdigit() or LENGTH_VALUE.match(value):
            return width_group
        return color_group

    return resolve


def _outline_group(value: str) -> str:
    if value in OUTLINE_STYLES:
        return "outline-style"
    if value.isdigit() or LENGTH_VALUE.match(value):
        return "outline-w"
    return "outline-color"


def _object_group(value: str) -> str:
    return "object-fit" if value in OBJECT_FITS else "object-position"


def _flex_group(value: str) -> str:
    if value in {"row", "row-reverse", "col", "col-reverse"}:
        return "flex-direction"
    if value in {"wrap", "wrap-reverse", "nowrap"}:
        return "flex-wrap"
    return "flex"


def _build_prefixes() -> List[Tuple[str, Union[str, Callable[[str], str]]]]:
    prefixes: Dict[str, Union[str, Callable[[str], str]]] = {
        "p": "p", "m": "m",
        "space-x": "space-x", "space-y": "space-y",
        "gap": "gap", "gap-x": "gap-x", "gap-y": "gap-y",
        "w": "w", "min-w": "min-w", "max-w": "max-w",
        "h": "h", "min-h": "min-h", "max-h": "max-h",
        "size": "size",
        "inset": "inset", "inset-x": "inset-x", "inset-y": "inset-y",
        "top": "top", "right": "right", "bottom": "bottom", "left": "left",
        "start": "start", "end": "end",
        "z": "z",
        "opacity": "opacity",
        "text": _text_group,
        "font": _font_group,
        "bg": _bg_group,
        "border": _border_group(""),
        "shadow": _shadow_group,
        "rounded": "rounded",
        "flex": _flex_group,
        "grow": "grow", "shrink": "shrink", "basis": "basis", "order": "order",
        "grid-cols": "grid-cols", "grid-rows": "grid-rows",
        "col": "col", "row": "row",
        "items": "align-items", "justify": "justify-content", "content": "align-content",
        "justify-items": "justify-items", "justify-self": "justify-self",
        "self": "align-self", "place-items": "place-items", "place-content": "place-content",
        "place-self": "place-self",
        "leading": "leading", "tracking": "tracking",
        "overflow": "overflow", "overflow-x": "overflow-x", "overflow-y": "overflow-y",
        "animate": "animate", "transition": "transition",
        "duration": "duration", "ease": "ease", "delay": "delay",
        "cursor": "cursor", "select": "select", "pointer-events": "pointer-events",
        "ring": _width_or_color("ring-w", "ring-color"),
        "ring-offset": _width_or_color("ring-offset-w", "ring-offset-color"),
        "outline": _outline_group, "outline-offset": "outline-offset",
        "fill": "fill", "stroke": "stroke",
        "aspect": "aspect", "object": _object_group,
        "whitespace": "whitespace", "break": "break",
        "translate-x": "translate-x", "translate-y": "translate-y",
        "scale": "scale", "rotate": "rotate",
    }
    for side in SIDES:
        prefixes[f"p{side}"] = f"p{side}"
        prefixes[f"m{side}"] = f"m{side}"
    for side in ("x", "y", "t", "r", "b", "l"):
        prefixes[f"border-{side}"] = _border_group(side)
    for corner in CORNERS:
        prefixes[f"rounded-{corner}"] = f"rounded-{corner}"

    # Longest prefix first so "inset-x-" wins over "inset-"
    return sorted(
        ((f"{prefix}-", group) for prefix, group in prefixes.items()),
        key=lambda item: len(item[0]),
        reverse=True,
    )


PREFIXES = _build_prefixes()

# A class in the key group also overrides earlier classes of these groups
CONFLICTS: Dict[str, Tuple[str, ...]] = {
    "p": tuple(f"p{side}" for side in SIDES),
    "px": ("pr", "pl", "ps", "pe"),
    "py": ("pt", "pb"),
    "m": tuple(f"m{side}" for side in SIDES),
    "mx": ("mr", "ml", "ms", "me"),
    "my": ("mt", "mb"),
    "gap": ("gap-x", "gap-y"),
    "size": ("w", "h"),
    "inset": ("inset-x", "inset-y", "top", "right", "bottom", "left", "start", "end"),
    "inset-x": ("right", "left"),
    "inset-y": ("top", "bottom"),
    "overflow": ("overflow-x", "overflow-y"),
    "rounded": tuple(f"rounded-{corner}" for corner in CORNERS),
    "rounded-t": ("rounded-tl", "rounded-tr"),
    "rounded-r": ("rounded-tr", "rounded-br"),
    "rounded-b": ("rounded-br", "rounded-bl"),
    "rounded-l": ("rounded-tl", "rounded-bl"),
    "border-w": tuple(f"border-w-{side}" for side in ("x", "y", "t", "r", "b", "l")),
    "border-w-x": ("border-w-r", "border-w-l"),
    "border-w-y": ("border-w-t", "border-w-b"),
    "border-color": tuple(f"border-color-{side}" for side in ("x", "y", "t", "r", "b", "l")),
    "border-color-x": ("border-color-r", "border-color-l"),
    "border-color-y": ("border-color-t", "border-color-b"),
    "flex": ("grow", "shrink", "basis"),
}


def _split_modifiers(class_name: str) -> Tuple[List[str], str]:
    """Split ``hover:md:px-2`` into (["hover", "md"], "px-2"), ignoring colons in brackets."""
    modifiers: List[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(class_name):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == ":" and depth == 0:
            modifiers.append(class_name[start:index])
            start = index + 1
    return modifiers, class_name[start:]


def class_group(base_class: str) -> Optional[str]:
    """
    Return the conflict group of a bare utility class (no modifiers).

    Returns None for classes this helper does not know; those never conflict.
    """
    if base_class.startswith("-"):
        base_class = base_class[1:]

    if base_class in STANDALONE:
        return STANDALONE[base_class]

    for prefix, group in PREFIXES:
        if base_class.startswith(prefix) and len(base_class) > len(prefix):
            value = base_class[len(prefix):]
            return group(value) if callable(group) else group
    return None


def _conflict_key(class_name: str) -> Optional[Tuple[str, str, Tuple[str, ...]]]:
    modifiers, base = _split_modifiers(class_name)

    important = ""
    if base.startswith("!"):
        important, base = "!", base[1:]
    elif base.endswith("!"):
        important, base = "!", base[:-1]

    group = class_group(base)
    if group is None:
        return None
    variant = ":".join(sorted(modifiers)) + important
    return variant, group, CONFLICTS.get(group, ())


def merge_classes(class_string: str) -> str:
    """
    Resolve conflicting utility classes in a space-separated class string.

    Later classes win; surviving classes keep their relative order.
    """
    classes = [c for c in WHITESPACE.split(class_string.strip()) if c]
    seen: set[str] = set()
    kept: List[str] = []

    for class_name in reversed(classes):
        key = _conflict_key(class_name)
        if key is None:
            kept.append(class_name)
            continue

        variant, group, overrides = key
        group_key = f"{variant}|{group}"
        if group_key in seen:
            continue

        seen.add(group_key)
        seen.update(f"{variant}|{other}" for other in overrides)
        kept.append(class_name)

    return " ".join(reversed(kept))


def _flatten(value: ClassValue, out: List[str]) -> None:
    if not value or isinstance(value, bool):
        return
    if isinstance(value, str):
        out.append(value)
    elif isinstance(value, (int, float)):
        out.append(str(value))
    elif isinstance(value, Mapping):
        out.extend(str(key) for key, enabled in value.items() if enabled)
    else:
        for item in value:
            _flatten(item, out)


def class_names(*values: ClassValue) -> str:
    """
    Join class-name fragments, skipping falsy values.

    Strings are used as-is, lists and tuples are flattened, and mappings
    contribute the keys whose values are truthy.
    """
    parts: List[str] = []
    for value in values:
        _flatten(value, parts)
    return " ".join(part.strip() for part in parts if part and part.strip())


def cn(*values: ClassValue) -> str:
    """Join class-name fragments and let later conflicting utilities win."""
    return merge_classes(class_names(*values))


__all__ = ["cn", "class_names", "merge_classes", "class_group"]
